"""Run orchestration: fetch, enrich, map, reconcile, apply.

Change requests are fetched concurrently, one task per source. A failing
source is reported in the summary and does not keep the other sources'
records from reaching the core. Everything after the fetch is sequential.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from ..models import ChangeRequestRecord, FetchWindow, PlatformSyncState
from .enrichment import EnrichmentCoordinator, EnrichmentStats
from .exceptions import PlatformFetchError
from .interfaces import ChangeRequestSource, SheetReader, SheetWriter
from .mapper import RowMapper
from .reconciliation import ReconciliationEngine, ReconciliationPlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformSyncStatus:
    """Fetch outcome of one change-request source."""

    source_name: str
    state: PlatformSyncState
    record_count: int = 0
    error: str | None = None

    @property
    def is_success(self) -> bool:
        """Check if the source returned its records."""
        return self.state == PlatformSyncState.SUCCEEDED


@dataclass
class SyncSummary:
    """Outcome of one sync run."""

    processed_records: int = 0
    merged_records: int = 0
    row_count: int = 0
    updated_rows: int = 0
    inserted_rows: int = 0
    reordered_blocks: int = 0
    dry_run: bool = False
    duration_seconds: float = 0.0
    platforms: list[PlatformSyncStatus] = field(default_factory=list)
    enrichment: EnrichmentStats = field(default_factory=EnrichmentStats)
    plan: ReconciliationPlan = field(default_factory=ReconciliationPlan)

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return (
            f"SyncSummary(records={self.processed_records}, rows={self.row_count}, "
            f"updated={self.updated_rows}, inserted={self.inserted_rows}, "
            f"reordered={self.reordered_blocks}, dry_run={self.dry_run})"
        )

    @property
    def failed_platforms(self) -> list[PlatformSyncStatus]:
        """Sources whose fetch failed."""
        return [status for status in self.platforms if not status.is_success]

    @property
    def is_partial(self) -> bool:
        """Check if at least one source failed."""
        return bool(self.failed_platforms)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "processed_records": self.processed_records,
            "merged_records": self.merged_records,
            "row_count": self.row_count,
            "updated_rows": self.updated_rows,
            "inserted_rows": self.inserted_rows,
            "reordered_blocks": self.reordered_blocks,
            "dry_run": self.dry_run,
            "duration_seconds": round(self.duration_seconds, 3),
            "platforms": [
                {
                    "source": status.source_name,
                    "state": status.state.value,
                    "record_count": status.record_count,
                    "error": status.error,
                }
                for status in self.platforms
            ],
            "enrichment": self.enrichment.to_dict(),
        }


class SyncOrchestrator:
    """Drives one release sync run end to end."""

    def __init__(
        self,
        sources: list[ChangeRequestSource],
        coordinator: EnrichmentCoordinator,
        mapper: RowMapper,
        reader: SheetReader,
        writer: SheetWriter,
        engine: ReconciliationEngine | None = None,
    ):
        self.sources = list(sources)
        self.coordinator = coordinator
        self.mapper = mapper
        self.reader = reader
        self.writer = writer
        self.engine = engine or ReconciliationEngine()

    async def run(self, window: FetchWindow, dry_run: bool = False) -> SyncSummary:
        """Execute a sync run.

        Args:
            window: Time window handed to every source
            dry_run: Plan the operations without applying them

        Returns:
            Summary of the run

        Raises:
            InvalidInputError: If the sheet snapshot is malformed
            InvariantViolationError: If planning hits a defect
            ResolutionError: If resolution fails under the ``fail`` policy
        """
        window.validate()
        started = time.perf_counter()
        summary = SyncSummary(dry_run=dry_run)

        records = await self._fetch_all(window, summary)
        summary.processed_records = len(records)

        merged = [record for record in records if record.is_merged]
        summary.merged_records = len(merged)

        enrichment = await self.coordinator.enrich_with_stats(merged)
        summary.enrichment = enrichment.stats

        rows = self.mapper.map(enrichment.records)
        summary.row_count = len(rows)

        existing = await self.reader.read_rows()
        plan = self.engine.plan(rows, existing)
        summary.plan = plan
        summary.updated_rows = plan.update_count
        summary.inserted_rows = plan.insert_count
        summary.reordered_blocks = len(plan.reorders)

        if dry_run:
            logger.info(f"Dry run, not applying {plan}")
        elif not plan.is_empty:
            await self.writer.apply_sync_operations(plan.sync_operations)
            await self.writer.apply_reorders(plan.reorders)

        summary.duration_seconds = time.perf_counter() - started
        logger.info(
            f"Release sync completed - updated: {summary.updated_rows}, "
            f"inserted: {summary.inserted_rows}, "
            f"reordered: {summary.reordered_blocks}, "
            f"processed: {summary.processed_records}, "
            f"duration: {summary.duration_seconds:.1f}s"
        )
        return summary

    async def _fetch_all(
        self, window: FetchWindow, summary: SyncSummary
    ) -> list[ChangeRequestRecord]:
        results = await asyncio.gather(
            *(source.fetch_change_requests(window) for source in self.sources),
            return_exceptions=True,
        )

        records: list[ChangeRequestRecord] = []
        for source, result in zip(self.sources, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result

                error = PlatformFetchError(source.name, result)
                logger.error(str(error), exc_info=result)
                summary.platforms.append(
                    PlatformSyncStatus(
                        source_name=source.name,
                        state=PlatformSyncState.FAILED,
                        error=str(result),
                    )
                )
                continue

            summary.platforms.append(
                PlatformSyncStatus(
                    source_name=source.name,
                    state=PlatformSyncState.SUCCEEDED,
                    record_count=len(result),
                )
            )
            records.extend(result)

        return records
