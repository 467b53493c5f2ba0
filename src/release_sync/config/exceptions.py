"""Configuration-related exceptions.

Configuration errors are fatal: they are raised while loading, before any
change request is fetched or any spreadsheet row is read.
"""

from typing import Any

from ..sync.exceptions import ReleaseSyncError


class ConfigurationError(ReleaseSyncError):
    """Invalid, missing or unreadable release sync configuration."""


class ConfigurationFileError(ConfigurationError):
    """The configuration file is missing, unreadable or not a YAML mapping."""

    def __init__(self, message: str, file_path: str | None = None):
        super().__init__(message, {"file_path": file_path} if file_path else None)
        self.file_path = file_path


class ConfigurationValidationError(ConfigurationError):
    """The configuration was read but failed schema or rule checks.

    ``validation_errors`` holds pydantic error dictionaries for schema
    failures and plain messages for extraction rule failures.
    """

    def __init__(self, message: str, validation_errors: list[Any] | None = None):
        errors = list(validation_errors or [])
        super().__init__(message, {"error_count": len(errors)})
        self.validation_errors = errors

    def messages(self) -> list[str]:
        """Flatten validation errors into ``location: message`` strings."""
        flattened = []
        for error in self.validation_errors:
            if isinstance(error, dict):
                location = ".".join(str(part) for part in error.get("loc", ()))
                flattened.append(f"{location}: {error.get('msg', '')}")
            else:
                flattened.append(str(error))
        return flattened
