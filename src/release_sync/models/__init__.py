"""Domain models for release sync."""

from .enums import (
    ParseFailurePolicy,
    Platform,
    PlatformSyncState,
    PRState,
    SyncOperationKind,
)
from .records import (
    PLACEHOLDER_IDENTIFIER,
    ChangeRequestRecord,
    FetchWindow,
    WorkItemInfo,
)
from .rows import (
    HEADER_ROW_NUMBER,
    BlockReorderOperation,
    CaseInsensitiveSet,
    ColumnMapping,
    ReportRow,
    SyncOperation,
)

__all__ = [
    "HEADER_ROW_NUMBER",
    "PLACEHOLDER_IDENTIFIER",
    "BlockReorderOperation",
    "CaseInsensitiveSet",
    "ChangeRequestRecord",
    "ColumnMapping",
    "FetchWindow",
    "PRState",
    "ParseFailurePolicy",
    "Platform",
    "PlatformSyncState",
    "ReportRow",
    "SyncOperation",
    "SyncOperationKind",
    "WorkItemInfo",
]
