"""Raw change-request records and the work items attached to them.

Records are produced fresh on every run by the change-request sources and
consumed once by the enrichment and row-mapping stages. They are immutable;
enrichment attaches work items with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .enums import Platform, PRState

# Identifier value meaning "intentionally untracked". It is distinct from an
# unresolved identifier, which is represented by ``None``.
PLACEHOLDER_IDENTIFIER = 0


@dataclass(frozen=True)
class WorkItemInfo:
    """Tracked work item associated with a change request."""

    identifier: int
    title: str
    team: str | None = None
    url: str | None = None

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return f"WorkItemInfo(ID{self.identifier}: {self.title[:50]})"

    @property
    def is_placeholder(self) -> bool:
        """Check if this work item carries the placeholder identifier."""
        return self.identifier == PLACEHOLDER_IDENTIFIER

    def validate(self) -> bool:
        """Validate work item data integrity.

        Returns:
            bool: True if all data is valid

        Raises:
            ValueError: If any data is invalid
        """
        if self.identifier < 0:
            raise ValueError("Work item identifier cannot be negative")

        if not self.title.strip():
            raise ValueError("Work item title cannot be empty")

        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "identifier": self.identifier,
            "title": self.title,
            "team": self.team,
            "url": self.url,
        }


@dataclass(frozen=True)
class ChangeRequestRecord:
    """A pull/merge request as reported by one version-control platform."""

    platform: Platform
    platform_id: str
    number: int
    title: str
    source_branch: str
    target_branch: str
    created_at: datetime
    state: PRState
    author: str
    repository: str
    description: str | None = None
    merged_at: datetime | None = None
    author_display_name: str | None = None
    url: str | None = None
    work_item: WorkItemInfo | None = None

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return (
            f"ChangeRequestRecord({self.platform.value} {self.repository}"
            f"#{self.number}: {self.title[:50]})"
        )

    @property
    def is_merged(self) -> bool:
        """Check if the change request was merged."""
        return self.state == PRState.MERGED and self.merged_at is not None

    @property
    def repository_name(self) -> str:
        """Short repository name (last path segment of the repository id)."""
        return self.repository.rstrip("/").split("/")[-1]

    @property
    def record_key(self) -> str:
        """Stable key used in logs and error reports."""
        return f"{self.platform.value}:{self.repository}#{self.number}"

    def validate(self) -> bool:
        """Validate record data integrity.

        Returns:
            bool: True if all data is valid

        Raises:
            ValueError: If any data is invalid
        """
        if not self.platform_id.strip():
            raise ValueError("Platform id cannot be empty")

        if self.number <= 0:
            raise ValueError(f"Change request number must be positive: {self.number}")

        if not self.title.strip():
            raise ValueError("Change request title cannot be empty")

        if not self.source_branch.strip() or not self.target_branch.strip():
            raise ValueError("Source and target branches are required")

        if not self.repository.strip():
            raise ValueError("Repository is required")

        if self.merged_at is not None and self.merged_at < self.created_at:
            raise ValueError("merged_at cannot be earlier than created_at")

        return True


@dataclass(frozen=True)
class FetchWindow:
    """Time window handed to change-request sources."""

    start: datetime
    end: datetime
    target_branches: list[str] = field(default_factory=list)

    def validate(self) -> bool:
        """Validate the window bounds.

        Raises:
            ValueError: If the window ends before it starts
        """
        if self.end < self.start:
            raise ValueError("Fetch window end cannot be earlier than start")
        return True
