"""Report rows and the spreadsheet operations derived from them.

A ``ReportRow`` is the reconciliation unit: one row of the release report,
identified solely by its ``unique_key``. Rows are computed fresh on every run
and compared against the rows parsed from the spreadsheet, which is the only
durable store.
"""

import re
from collections.abc import Iterable, Iterator, MutableSet
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .enums import SyncOperationKind

_COLUMN_PATTERN = re.compile(r"^[A-Z]{1,2}$")

HEADER_ROW_NUMBER = 1


class CaseInsensitiveSet(MutableSet[str]):
    """Set of strings compared case-insensitively.

    The first spelling seen for a value is the one kept and iterated.
    """

    def __init__(self, values: Iterable[str] | None = None):
        self._items: dict[str, str] = {}
        for value in values or ():
            self.add(value)

    @staticmethod
    def _normalize(value: str) -> str:
        return value.casefold()

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, str):
            return False
        return self._normalize(value) in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def add(self, value: str) -> None:
        self._items.setdefault(self._normalize(value), value)

    def discard(self, value: str) -> None:
        self._items.pop(self._normalize(value), None)

    def sorted(self) -> list[str]:
        """Return the values sorted case-insensitively."""
        return sorted(self._items.values(), key=self._normalize)

    def __repr__(self) -> str:
        return f"CaseInsensitiveSet({self.sorted()!r})"


def _merged_at_sort_value(merged_at: datetime | None) -> tuple[int, str]:
    # Rows without a merge time sort after merged rows.
    if merged_at is None:
        return (1, "")
    return (0, merged_at.isoformat())


@dataclass(frozen=True)
class ReportRow:
    """One row of the release report."""

    unique_key: str
    repository_name: str
    feature: str
    feature_url: str = ""
    team: str = ""
    authors: CaseInsensitiveSet = field(default_factory=CaseInsensitiveSet)
    links: CaseInsensitiveSet = field(default_factory=CaseInsensitiveSet)
    merged_at: datetime | None = None
    row_number: int = 0
    is_auto_sync: bool = True

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return (
            f"ReportRow({self.unique_key} row={self.row_number}: "
            f"{self.feature[:50]})"
        )

    @property
    def block_sort_key(self) -> tuple[Any, ...]:
        """Order of a row inside its repository block."""
        return (self.team.casefold(), _merged_at_sort_value(self.merged_at))

    @property
    def canonical_sort_key(self) -> tuple[Any, ...]:
        """Order of a row in a freshly computed row set."""
        return (self.repository_name.casefold(), *self.block_sort_key)

    def is_valid(self) -> bool:
        """Check that the row can be written to the sheet."""
        if self.row_number <= 0:
            return False

        if not self.unique_key.strip():
            return False

        return bool(self.repository_name.strip())

    def with_row_number(self, row_number: int) -> "ReportRow":
        """Return a copy positioned at ``row_number``."""
        return replace(self, row_number=row_number)

    def merge_with(self, fresh: "ReportRow") -> "ReportRow":
        """Merge a freshly computed row into this (existing) row.

        Fresh scalar values win when they are non-empty, otherwise the
        existing value is kept. Authors and links are unioned. The row number
        and the auto-sync flag of ``self`` are preserved; the flag is only
        ever changed by hand in the sheet.
        """
        return replace(
            self,
            repository_name=fresh.repository_name or self.repository_name,
            feature=fresh.feature or self.feature,
            feature_url=fresh.feature_url or self.feature_url,
            team=fresh.team or self.team,
            authors=CaseInsensitiveSet([*self.authors, *fresh.authors]),
            links=CaseInsensitiveSet([*self.links, *fresh.links]),
            merged_at=fresh.merged_at or self.merged_at,
        )

    def same_content(self, other: "ReportRow") -> bool:
        """Compare everything except the row number."""
        return replace(self, row_number=0) == replace(other, row_number=0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "unique_key": self.unique_key,
            "repository_name": self.repository_name,
            "feature": self.feature,
            "feature_url": self.feature_url,
            "team": self.team,
            "authors": self.authors.sorted(),
            "links": self.links.sorted(),
            "merged_at": self.merged_at.isoformat() if self.merged_at else None,
            "row_number": self.row_number,
            "is_auto_sync": self.is_auto_sync,
        }


@dataclass(frozen=True)
class SyncOperation:
    """Update or insert of a single row.

    For updates ``target_row_number`` is the existing row. For inserts it is
    the position the new row occupies once every preceding operation of the
    same plan has been applied.
    """

    kind: SyncOperationKind
    target_row_number: int
    row: ReportRow

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return f"SyncOperation({self.kind.value} row={self.target_row_number})"


@dataclass(frozen=True)
class BlockReorderOperation:
    """Permutation of the contiguous rows of one repository block.

    ``sorted_original_row_numbers`` lists the current row numbers in their
    desired order: ``(5, 3, 4)`` means the block should read rows 5, 3, 4.
    """

    start_row: int
    end_row: int
    repository_name: str
    sorted_original_row_numbers: tuple[int, ...] = ()

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return (
            f"BlockReorderOperation({self.repository_name} "
            f"rows {self.start_row}-{self.end_row})"
        )

    @property
    def row_count(self) -> int:
        """Number of rows covered by the block."""
        return self.end_row - self.start_row + 1

    def is_valid(self) -> bool:
        """Check the block range and its permutation."""
        if self.start_row <= HEADER_ROW_NUMBER:
            return False

        if self.end_row < self.start_row:
            return False

        if len(self.sorted_original_row_numbers) != self.row_count:
            return False

        return sorted(self.sorted_original_row_numbers) == list(
            range(self.start_row, self.end_row + 1)
        )


@dataclass(frozen=True)
class ColumnMapping:
    """Where each logical report field lives in the spreadsheet."""

    repository: str = "Z"
    feature: str = "B"
    team: str = "D"
    authors: str = "W"
    links: str = "X"
    unique_key: str = "Y"
    merged_at: str = "G"
    auto_sync: str | None = "F"

    def columns(self) -> list[str]:
        """Return every configured column reference."""
        columns = [
            self.repository,
            self.feature,
            self.team,
            self.authors,
            self.links,
            self.unique_key,
            self.merged_at,
        ]
        if self.auto_sync is not None:
            columns.append(self.auto_sync)
        return columns

    def is_valid(self) -> bool:
        """Check that every column is ``A``-``ZZ`` and no column repeats."""
        columns = self.columns()

        for column in columns:
            if not isinstance(column, str) or not _COLUMN_PATTERN.match(column):
                return False

        return len(set(columns)) == len(columns)
