#!/usr/bin/env python3
"""
Release Sync Examples

Demonstrates wiring configuration, the identifier resolver, enrichment, the
row mapper and the orchestrator against an in-memory spreadsheet. Platform
and work item clients are replaced by small in-process sources.
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

from release_sync.config import (
    build_extraction_rules,
    build_team_mappings,
    build_user_mappings,
    column_mapping,
)
from release_sync.config.loader import ConfigurationLoader
from release_sync.models import (
    ChangeRequestRecord,
    FetchWindow,
    Platform,
    PRState,
    WorkItemInfo,
)
from release_sync.sheet import InMemorySheet, RowCodec
from release_sync.sync import (
    ChangeRequestSource,
    EnrichmentCoordinator,
    IdentifierResolver,
    RowMapper,
    SyncOrchestrator,
    TeamMapper,
    UserMapper,
    WorkItemSource,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

EXAMPLE_CONFIG = {
    "work_items": {
        "patterns": [
            {"name": "feature-branch", "pattern": r"feature/(\d+)-"},
            {"name": "vsts-title", "pattern": r"VSTS(\d+)"},
        ],
        "team_mapping": [
            {"original_team_name": "Team Payments", "display_name": "Payments"},
        ],
    },
    "user_mapping": [{"display_name": "Alice Chen", "gitlab_user_id": "alice"}],
    "spreadsheet": {"display_timezone_offset_hours": 8},
}


class ExampleGitLabSource(ChangeRequestSource):
    """Returns two merged requests for the same work item."""

    @property
    def name(self) -> str:
        return "gitlab"

    async def fetch_change_requests(
        self, window: FetchWindow
    ) -> list[ChangeRequestRecord]:
        merged_at = window.end - timedelta(hours=1)
        return [
            ChangeRequestRecord(
                platform=Platform.GITLAB,
                platform_id=str(number),
                number=number,
                title=f"Login page part {number}",
                source_branch=f"feature/12345-login-{number}",
                target_branch="main",
                created_at=merged_at - timedelta(days=1),
                state=PRState.MERGED,
                author=author,
                repository="shop/payments-api",
                merged_at=merged_at,
                url=f"https://gitlab.example.com/shop/payments-api/-/merge_requests/{number}",
            )
            for number, author in ((1, "alice"), (2, "bob"))
        ]


class ExampleTracker(WorkItemSource):
    async def get_work_item(self, identifier: int) -> WorkItemInfo | None:
        if identifier != 12345:
            return None
        return WorkItemInfo(
            identifier, "Login page", "Team Payments", "https://tracker.example.com/12345"
        )


async def release_sync_example() -> None:
    """Run two syncs; the second one plans nothing."""
    config = ConfigurationLoader().load_from_dict(EXAMPLE_CONFIG)
    rules, policy = build_extraction_rules(config)
    resolver = IdentifierResolver(rules, policy)

    sheet = InMemorySheet(
        RowCodec(
            column_mapping(config),
            config.spreadsheet.display_timezone_offset_hours,
        )
    )
    orchestrator = SyncOrchestrator(
        sources=[ExampleGitLabSource()],
        coordinator=EnrichmentCoordinator(
            resolver, ExampleTracker(), TeamMapper(build_team_mappings(config))
        ),
        mapper=RowMapper(resolver, UserMapper(build_user_mappings(config))),
        reader=sheet,
        writer=sheet,
    )

    now = datetime.now(UTC)
    window = FetchWindow(start=now - timedelta(days=7), end=now)

    first = await orchestrator.run(window)
    logger.info(f"First run: {first}")
    for row in await sheet.read_rows():
        logger.info(f"Sheet row {row.row_number}: {row.to_dict()}")

    second = await orchestrator.run(window)
    logger.info(f"Second run: {second}")


if __name__ == "__main__":
    asyncio.run(release_sync_example())
