"""
Shared fixtures for release sync tests.

Provides record and row factories, extraction rules and a fetch window.
Fakes for the boundary interfaces live in ``tests.fixtures``.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import pytest

from release_sync.models import (
    ChangeRequestRecord,
    FetchWindow,
    Platform,
    PRState,
    ReportRow,
)
from release_sync.models.rows import CaseInsensitiveSet
from release_sync.sync.resolver import ExtractionRule
from tests.fixtures import BASE_TIME


@pytest.fixture
def extraction_rules() -> list[ExtractionRule]:
    """
    Standard extraction rules for tests.

    Why: Most resolution paths need a realistic, ordered rule set
    What: Provides a feature-branch rule followed by a title rule
    How: Builds ExtractionRule instances with capture group 1
    """
    return [
        ExtractionRule(name="feature-branch", pattern=r"feature/(\d+)-"),
        ExtractionRule(name="title-vsts", pattern=r"VSTS(\d+)"),
    ]


@pytest.fixture
def make_record() -> Callable[..., ChangeRequestRecord]:
    """
    Factory for merged change request records.

    Why: Tests need many records that differ in one or two fields
    What: Returns a callable building ChangeRequestRecord with sane defaults
    How: Merges keyword overrides into a default field dictionary
    """
    counter = {"number": 0}

    def factory(**overrides: Any) -> ChangeRequestRecord:
        counter["number"] += 1
        number = overrides.pop("number", counter["number"])
        fields: dict[str, Any] = {
            "platform": Platform.GITLAB,
            "platform_id": f"mr-{number}",
            "number": number,
            "title": f"Change {number}",
            "source_branch": f"feature/{number}-change",
            "target_branch": "main",
            "created_at": BASE_TIME - timedelta(days=1),
            "state": PRState.MERGED,
            "author": "alice",
            "repository": "group/payments-api",
            "merged_at": BASE_TIME,
            "url": f"https://gitlab.example.com/group/payments-api/-/merge_requests/{number}",
        }
        fields.update(overrides)
        return ChangeRequestRecord(**fields)

    return factory


@pytest.fixture
def make_row() -> Callable[..., ReportRow]:
    """
    Factory for report rows.

    Why: Reconciliation tests describe sheet snapshots row by row
    What: Returns a callable building ReportRow with sane defaults
    How: Converts author/link lists into CaseInsensitiveSet
    """

    def factory(
        unique_key: str,
        repository_name: str = "payments-api",
        team: str = "Payments",
        merged_at: datetime | None = BASE_TIME,
        row_number: int = 0,
        authors: list[str] | None = None,
        links: list[str] | None = None,
        **overrides: Any,
    ) -> ReportRow:
        return ReportRow(
            unique_key=unique_key,
            repository_name=repository_name,
            feature=overrides.pop("feature", f"Feature {unique_key}"),
            team=team,
            authors=CaseInsensitiveSet(authors or ["Alice"]),
            links=CaseInsensitiveSet(links or []),
            merged_at=merged_at,
            row_number=row_number,
            **overrides,
        )

    return factory


@pytest.fixture
def fetch_window() -> FetchWindow:
    """Two-week fetch window ending at the base test time."""
    return FetchWindow(
        start=BASE_TIME - timedelta(days=14),
        end=BASE_TIME + timedelta(hours=1),
        target_branches=["main"],
    )
