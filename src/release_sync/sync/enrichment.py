"""Work item enrichment of change request records.

For every record the coordinator resolves a work item identifier (source
branch first, then title), fetches the work item and decides whether the
record is kept with its work item, kept without one, or dropped.

Decision table:

- identifier is the placeholder ``0``: kept, no work item
- identifier unresolved: kept, no work item (the row mapper handles it)
- work item fetched: kept with the work item, unless the returned work item
  itself carries the placeholder identifier (kept, no work item) or its team
  is excluded by team filtering (filtered out)
- lookup returned nothing or raised: dropped

A failure on one record never aborts the batch.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any

from ..models import PLACEHOLDER_IDENTIFIER, ChangeRequestRecord, WorkItemInfo
from .exceptions import EnrichmentError, ResolutionError
from .interfaces import WorkItemSource
from .mapping import TeamMapper
from .resolver import IdentifierResolver

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentStats:
    """Counters reported by one enrichment pass."""

    resolved: int = 0
    placeholder: int = 0
    unresolved: int = 0
    dropped: int = 0
    filtered: int = 0
    skipped: int = 0
    duration_ms: float = 0.0
    errors: list[EnrichmentError] = field(default_factory=list)

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return (
            f"EnrichmentStats(resolved={self.resolved}, "
            f"placeholder={self.placeholder}, unresolved={self.unresolved}, "
            f"dropped={self.dropped}, filtered={self.filtered}, "
            f"skipped={self.skipped})"
        )

    @property
    def total(self) -> int:
        """Number of records seen."""
        return (
            self.resolved
            + self.placeholder
            + self.unresolved
            + self.dropped
            + self.filtered
            + self.skipped
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "resolved": self.resolved,
            "placeholder": self.placeholder,
            "unresolved": self.unresolved,
            "dropped": self.dropped,
            "filtered": self.filtered,
            "skipped": self.skipped,
            "duration_ms": round(self.duration_ms, 1),
            "errors": [str(error) for error in self.errors],
        }


@dataclass(frozen=True)
class EnrichmentResult:
    """Records kept by enrichment together with the pass counters."""

    records: list[ChangeRequestRecord]
    stats: EnrichmentStats


class EnrichmentCoordinator:
    """Attaches work items to change request records."""

    def __init__(
        self,
        resolver: IdentifierResolver | None = None,
        work_item_source: WorkItemSource | None = None,
        team_mapper: TeamMapper | None = None,
    ):
        """Initialize the coordinator.

        Args:
            resolver: Identifier resolver; enrichment is skipped without one
            work_item_source: Work item lookup; enrichment is skipped without one
            team_mapper: Team display names and filtering
        """
        self.resolver = resolver
        self.work_item_source = work_item_source
        self.team_mapper = team_mapper or TeamMapper()

    @property
    def is_enabled(self) -> bool:
        """Check if both a resolver and a work item source are configured."""
        return self.resolver is not None and self.work_item_source is not None

    async def enrich(
        self, records: list[ChangeRequestRecord]
    ) -> list[ChangeRequestRecord]:
        """Enrich records, returning the ones kept."""
        result = await self.enrich_with_stats(records)
        return result.records

    async def enrich_with_stats(
        self, records: list[ChangeRequestRecord]
    ) -> EnrichmentResult:
        """Enrich records and report what happened to each of them."""
        stats = EnrichmentStats()
        started = time.perf_counter()

        resolver, source = self.resolver, self.work_item_source
        if resolver is None or source is None:
            logger.warning(
                "Work item resolution not configured, skipping work item enrichment"
            )
            stats.skipped = len(records)
            return EnrichmentResult(records=list(records), stats=stats)

        lookups: dict[int, WorkItemInfo | BaseException | None] = {}
        kept: list[ChangeRequestRecord] = []

        for record in records:
            enriched = await self._enrich_record(
                record, resolver, source, lookups, stats
            )
            if enriched is not None:
                kept.append(enriched)

        stats.duration_ms = (time.perf_counter() - started) * 1000

        logger.info(
            f"Work item enrichment completed - resolved: {stats.resolved}, "
            f"placeholder: {stats.placeholder}, unresolved: {stats.unresolved}, "
            f"dropped: {stats.dropped}, filtered: {stats.filtered}, "
            f"elapsed: {stats.duration_ms:.0f} ms"
        )

        return EnrichmentResult(records=kept, stats=stats)

    async def _enrich_record(
        self,
        record: ChangeRequestRecord,
        resolver: IdentifierResolver,
        source: WorkItemSource,
        lookups: dict[int, WorkItemInfo | BaseException | None],
        stats: EnrichmentStats,
    ) -> ChangeRequestRecord | None:
        try:
            identifier = resolver.resolve_first(record.source_branch, record.title)
        except ResolutionError as e:
            logger.warning(f"Identifier resolution failed for {record.record_key}: {e}")
            identifier = None

        if identifier is None:
            stats.unresolved += 1
            return replace(record, work_item=None)

        if identifier == PLACEHOLDER_IDENTIFIER:
            stats.placeholder += 1
            return replace(record, work_item=None)

        outcome = await self._lookup(identifier, source, lookups)

        if outcome is None or isinstance(outcome, BaseException):
            cause = outcome if isinstance(outcome, BaseException) else None
            error = EnrichmentError(record.record_key, identifier, cause)
            logger.warning(f"Dropping change request: {error}")
            stats.errors.append(error)
            stats.dropped += 1
            return None

        if outcome.is_placeholder:
            stats.placeholder += 1
            return replace(record, work_item=None)

        if not self.team_mapper.has_mapping(outcome.team):
            logger.debug(
                f"Excluding {record.record_key}: team {outcome.team!r} is not mapped"
            )
            stats.filtered += 1
            return None

        stats.resolved += 1
        work_item = replace(outcome, team=self.team_mapper.display_name(outcome.team))
        return replace(record, work_item=work_item)

    @staticmethod
    async def _lookup(
        identifier: int,
        source: WorkItemSource,
        lookups: dict[int, WorkItemInfo | BaseException | None],
    ) -> WorkItemInfo | BaseException | None:
        if identifier not in lookups:
            try:
                lookups[identifier] = await source.get_work_item(identifier)
            except Exception as e:
                logger.warning(f"Work item lookup failed for ID{identifier}: {e}")
                lookups[identifier] = e

        return lookups[identifier]
