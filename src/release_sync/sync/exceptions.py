"""Exceptions raised by the release sync core.

Record-level failures (resolution, enrichment) are absorbed by the stage that
owns the record and counted. Structural failures (invalid input, invariant
violations) abort the run before any spreadsheet mutation is attempted.
"""

from typing import Any


class ReleaseSyncError(Exception):
    """Base exception for all release sync errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize release sync error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.details = details or {}


class ResolutionError(ReleaseSyncError):
    """Raised when no extraction rule matches and the policy is ``fail``."""

    def __init__(self, text: str, rule_names: list[str] | None = None):
        """Initialize resolution error.

        Args:
            text: Text the identifier could not be resolved from
            rule_names: Names of the rules that were tried
        """
        super().__init__(
            f"Unable to resolve work item identifier from: {text!r}",
            {"text": text, "rules": rule_names or []},
        )
        self.text = text
        self.rule_names = rule_names or []


class EnrichmentError(ReleaseSyncError):
    """Work item lookup failed for a resolvable identifier."""

    def __init__(
        self,
        record_key: str,
        identifier: int,
        cause: BaseException | None = None,
    ):
        """Initialize enrichment error.

        Args:
            record_key: Key of the change request that was dropped
            identifier: Identifier whose work item could not be fetched
            cause: Exception raised by the work item source, if any
        """
        reason = f": {cause}" if cause is not None else ": work item not found"
        super().__init__(
            f"Failed to fetch work item ID{identifier} for {record_key}{reason}",
            {"record_key": record_key, "identifier": identifier},
        )
        self.record_key = record_key
        self.identifier = identifier
        self.cause = cause


class InvalidInputError(ReleaseSyncError):
    """Raised when reconciliation input is structurally invalid."""

    pass


class InvariantViolationError(ReleaseSyncError):
    """Raised when the core would otherwise emit wrong operations."""

    pass


class PlatformFetchError(ReleaseSyncError):
    """A change-request source failed to return records."""

    def __init__(self, source_name: str, cause: BaseException):
        """Initialize platform fetch error.

        Args:
            source_name: Name of the failing source
            cause: Exception raised by the source
        """
        super().__init__(
            f"Failed to fetch change requests from {source_name}: {cause}",
            {"source": source_name},
        )
        self.source_name = source_name
        self.cause = cause
