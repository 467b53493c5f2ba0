"""Startup validation of the spreadsheet column layout."""

import logging

from ..models import ColumnMapping

logger = logging.getLogger(__name__)


def validate(mapping: ColumnMapping) -> bool:
    """Check a column mapping before any spreadsheet I/O.

    Every column must be a one- or two-letter reference (``A`` to ``ZZ``)
    and no two logical fields may share a column.
    """
    valid = mapping.is_valid()
    if not valid:
        logger.error(f"Invalid column mapping: {mapping}")
    return valid


def describe(mapping: ColumnMapping) -> dict[str, str | None]:
    """Return the mapping as a field-name to column dictionary."""
    return {
        "repository": mapping.repository,
        "feature": mapping.feature,
        "team": mapping.team,
        "authors": mapping.authors,
        "links": mapping.links,
        "unique_key": mapping.unique_key,
        "merged_at": mapping.merged_at,
        "auto_sync": mapping.auto_sync,
    }
