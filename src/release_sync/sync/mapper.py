"""Grouping of change request records into report rows.

Records with a work item are grouped by (work item, repository). Records
without one are re-resolved individually against their source branch and
title, without any work item lookup. Rows sharing a unique key are merged
before they leave the mapper, so every emitted key is unique.
"""

import hashlib
import logging
from datetime import UTC, datetime

from ..models import (
    PLACEHOLDER_IDENTIFIER,
    CaseInsensitiveSet,
    ChangeRequestRecord,
    Platform,
    ReportRow,
    WorkItemInfo,
)
from .mapping import UserMapper
from .resolver import IdentifierResolver

logger = logging.getLogger(__name__)


def _short_digest(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:8]


def generate_unique_key(
    identifier: int,
    repository_name: str,
    platform: Platform | str | None = None,
    qualifier: str | None = None,
) -> str:
    """Build the identity of a report row.

    Resolved rows use ``{identifier}{repository}``. Platform and qualifier
    (hashed) are appended when given; the row mapper always passes both for
    the placeholder identifier so unrelated untracked rows do not collide.

    Raises:
        ValueError: If the repository name is blank
    """
    if not repository_name or not repository_name.strip():
        raise ValueError("Repository name cannot be empty")

    key = f"{identifier}{repository_name}"

    if platform is not None:
        platform_name = platform.value if isinstance(platform, Platform) else platform
        key = f"{key}@{platform_name}"

    if qualifier:
        key = f"{key}#{_short_digest(qualifier)}"

    return key


def report_timestamp(value: datetime | None) -> datetime | None:
    """Normalize a merge time to UTC at the minute granularity the sheet shows."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).replace(second=0, microsecond=0)


def _latest(values: list[datetime | None]) -> datetime | None:
    present = [report_timestamp(value) for value in values if value is not None]
    return max(present) if present else None


class RowMapper:
    """Maps change request records to canonical report rows."""

    def __init__(
        self,
        resolver: IdentifierResolver | None = None,
        user_mapper: UserMapper | None = None,
    ):
        """Initialize the mapper.

        Args:
            resolver: Resolver used for records without a work item
            user_mapper: Author display-name mapping
        """
        self.resolver = resolver
        self.user_mapper = user_mapper or UserMapper()

    def map(self, records: list[ChangeRequestRecord]) -> list[ReportRow]:
        """Map records to report rows sorted by repository, team and merge time.

        Raises:
            ResolutionError: If the resolver policy is ``fail`` and a record
                without a work item cannot be resolved
        """
        with_work_item = [record for record in records if record.work_item is not None]
        without_work_item = [record for record in records if record.work_item is None]

        rows = self._map_with_work_item(with_work_item)
        rows.extend(self._map_without_work_item(record) for record in without_work_item)

        merged = self._merge_by_key(rows)
        merged.sort(key=lambda row: row.canonical_sort_key)

        logger.info(
            f"Mapped {len(records)} change requests to {len(merged)} report rows "
            f"({len(with_work_item)} with work item)"
        )
        return merged

    def _map_with_work_item(self, records: list[ChangeRequestRecord]) -> list[ReportRow]:
        groups: dict[tuple[int, str], list[ChangeRequestRecord]] = {}
        work_items: dict[tuple[int, str], WorkItemInfo] = {}
        for record in records:
            if record.work_item is None:
                continue
            group_key = (record.work_item.identifier, record.repository_name)
            groups.setdefault(group_key, []).append(record)
            work_items.setdefault(group_key, record.work_item)

        rows = []
        for (identifier, repository_name), group in groups.items():
            work_item = work_items[(identifier, repository_name)]

            rows.append(
                ReportRow(
                    unique_key=generate_unique_key(identifier, repository_name),
                    repository_name=repository_name,
                    feature=f"ID{identifier} - {work_item.title}",
                    feature_url=work_item.url or "",
                    team=work_item.team or "",
                    authors=CaseInsensitiveSet(self._author(r) for r in group),
                    links=CaseInsensitiveSet(r.url for r in group if r.url),
                    merged_at=_latest([r.merged_at for r in group]),
                )
            )
        return rows

    def _map_without_work_item(self, record: ChangeRequestRecord) -> ReportRow:
        identifier = None
        if self.resolver is not None:
            # Enrichment already reported unresolved records
            identifier = self.resolver.resolve_first(
                record.source_branch,
                record.title,
                unresolved_log_level=logging.DEBUG,
            )

        repository_name = record.repository_name

        if identifier is None or identifier == PLACEHOLDER_IDENTIFIER:
            unique_key = generate_unique_key(
                PLACEHOLDER_IDENTIFIER,
                repository_name,
                platform=record.platform,
                qualifier=record.source_branch,
            )
            feature = record.source_branch
        else:
            unique_key = generate_unique_key(identifier, repository_name)
            feature = f"ID{identifier}"

        return ReportRow(
            unique_key=unique_key,
            repository_name=repository_name,
            feature=feature,
            authors=CaseInsensitiveSet([self._author(record)]),
            links=CaseInsensitiveSet([record.url] if record.url else []),
            merged_at=report_timestamp(record.merged_at),
        )

    def _author(self, record: ChangeRequestRecord) -> str:
        return self.user_mapper.display_name(
            record.platform, record.author, default=record.author_display_name
        )

    @staticmethod
    def _merge_by_key(rows: list[ReportRow]) -> list[ReportRow]:
        # Earlier rows (work item rows come first) keep their scalar values.
        merged: dict[str, ReportRow] = {}
        for row in rows:
            key = row.unique_key.casefold()
            primary = merged.get(key)
            if primary is None:
                merged[key] = row
                continue

            merged[key] = ReportRow(
                unique_key=primary.unique_key,
                repository_name=primary.repository_name,
                feature=primary.feature or row.feature,
                feature_url=primary.feature_url or row.feature_url,
                team=primary.team or row.team,
                authors=CaseInsensitiveSet([*primary.authors, *row.authors]),
                links=CaseInsensitiveSet([*primary.links, *row.links]),
                merged_at=_latest([primary.merged_at, row.merged_at]),
            )
        return list(merged.values())
