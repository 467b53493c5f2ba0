"""Release sync core: resolution, enrichment, mapping and reconciliation."""

from .enrichment import EnrichmentCoordinator, EnrichmentResult, EnrichmentStats
from .exceptions import (
    EnrichmentError,
    InvalidInputError,
    InvariantViolationError,
    PlatformFetchError,
    ReleaseSyncError,
    ResolutionError,
)
from .interfaces import ChangeRequestSource, SheetReader, SheetWriter, WorkItemSource
from .mapper import RowMapper, generate_unique_key, report_timestamp
from .mapping import TeamMapper, TeamMapping, UserMapper, UserMapping
from .orchestrator import PlatformSyncStatus, SyncOrchestrator, SyncSummary
from .reconciliation import ReconciliationEngine, ReconciliationPlan
from .resolver import ExtractionRule, IdentifierResolver
from .schema import validate as validate_column_mapping

__all__ = [
    "ChangeRequestSource",
    "EnrichmentCoordinator",
    "EnrichmentError",
    "EnrichmentResult",
    "EnrichmentStats",
    "ExtractionRule",
    "IdentifierResolver",
    "InvalidInputError",
    "InvariantViolationError",
    "PlatformFetchError",
    "PlatformSyncStatus",
    "ReconciliationEngine",
    "ReconciliationPlan",
    "ReleaseSyncError",
    "ResolutionError",
    "RowMapper",
    "SheetReader",
    "SheetWriter",
    "SyncOrchestrator",
    "SyncSummary",
    "TeamMapper",
    "TeamMapping",
    "UserMapper",
    "UserMapping",
    "WorkItemSource",
    "generate_unique_key",
    "report_timestamp",
    "validate_column_mapping",
]
