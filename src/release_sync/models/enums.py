"""Enums shared by the release sync domain models."""

import enum


class Platform(str, enum.Enum):
    """Version-control platforms change requests are collected from."""

    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    GITHUB = "github"
    AZURE_DEVOPS = "azure_devops"


class PRState(str, enum.Enum):
    """Change request lifecycle state."""

    OPENED = "opened"
    CLOSED = "closed"
    MERGED = "merged"


class SyncOperationKind(str, enum.Enum):
    """Kind of row-level spreadsheet operation."""

    UPDATE = "update"
    INSERT = "insert"


class ParseFailurePolicy(str, enum.Enum):
    """What the identifier resolver does when no rule matches."""

    WARN_AND_CONTINUE = "warn-and-continue"
    FAIL = "fail"


class PlatformSyncState(str, enum.Enum):
    """Outcome of fetching records from one change-request source."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
