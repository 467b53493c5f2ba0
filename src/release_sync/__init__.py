"""Release sync: merged change-request reporting reconciled into a spreadsheet.

The package resolves work-item identifiers from branch names and titles,
groups merged pull/merge requests into report rows and reconciles those rows
against a previously synced spreadsheet snapshot.
"""

__version__ = "0.1.0"
