"""Reconciliation of computed report rows against the spreadsheet snapshot.

The engine is a pure computation over in-memory snapshots. It produces, in
the order they must be applied:

1. ``Update`` operations for rows whose unique key already exists and whose
   merged content differs from the sheet (targets are current row numbers),
2. ``Insert`` operations for new keys, placed after the last row of the
   repository's block or directly below the header when the repository has
   no block yet (each target accounts for the inserts emitted before it),
3. ``BlockReorderOperation``s that sort the pre-existing rows of each
   repository block by (team, merged at), expressed in row numbers as they
   are once every insert has been applied.

Rows inserted by a run are not part of that run's reorder permutations; the
next run sorts them in once they exist in the sheet.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..models import (
    HEADER_ROW_NUMBER,
    BlockReorderOperation,
    ReportRow,
    SyncOperation,
    SyncOperationKind,
)
from .exceptions import InvalidInputError, InvariantViolationError

logger = logging.getLogger(__name__)


@dataclass
class _SheetEntry:
    """Simulated sheet row used while planning."""

    row_number: int
    row: ReportRow
    is_new: bool = False


@dataclass(frozen=True)
class ReconciliationPlan:
    """Ordered operations produced by one reconciliation pass."""

    sync_operations: list[SyncOperation] = field(default_factory=list)
    reorders: list[BlockReorderOperation] = field(default_factory=list)

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return (
            f"ReconciliationPlan(updates={self.update_count}, "
            f"inserts={self.insert_count}, reorders={len(self.reorders)})"
        )

    @property
    def update_count(self) -> int:
        """Number of update operations."""
        return sum(
            1 for op in self.sync_operations if op.kind == SyncOperationKind.UPDATE
        )

    @property
    def insert_count(self) -> int:
        """Number of insert operations."""
        return sum(
            1 for op in self.sync_operations if op.kind == SyncOperationKind.INSERT
        )

    @property
    def is_empty(self) -> bool:
        """Check if the plan changes nothing."""
        return not self.sync_operations and not self.reorders

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "sync_operations": [
                {
                    "kind": op.kind.value,
                    "target_row_number": op.target_row_number,
                    "row": op.row.to_dict(),
                }
                for op in self.sync_operations
            ],
            "reorders": [
                {
                    "start_row": reorder.start_row,
                    "end_row": reorder.end_row,
                    "repository_name": reorder.repository_name,
                    "sorted_original_row_numbers": list(
                        reorder.sorted_original_row_numbers
                    ),
                }
                for reorder in self.reorders
            ],
        }


class ReconciliationEngine:
    """Plans the spreadsheet operations that bring the sheet up to date."""

    def reconcile(
        self,
        computed_rows: list[ReportRow],
        existing_rows: list[ReportRow],
    ) -> tuple[list[SyncOperation], list[BlockReorderOperation]]:
        """Plan row operations and block reorders.

        Args:
            computed_rows: Freshly mapped rows with unique keys
            existing_rows: Rows parsed from the sheet, row numbers set

        Returns:
            Tuple of (sync operations, block reorder operations)

        Raises:
            InvalidInputError: If the snapshot or the computed rows are malformed
            InvariantViolationError: If computed keys repeat or a reorder is invalid
        """
        plan = self.plan(computed_rows, existing_rows)
        return plan.sync_operations, plan.reorders

    def plan(
        self,
        computed_rows: list[ReportRow],
        existing_rows: list[ReportRow],
    ) -> ReconciliationPlan:
        """Plan row operations and block reorders as a ``ReconciliationPlan``."""
        self._validate_existing(existing_rows)
        self._validate_computed(computed_rows)

        entries = [
            _SheetEntry(row_number=row.row_number, row=row)
            for row in sorted(existing_rows, key=lambda row: row.row_number)
        ]
        by_key = self._index_by_key(entries)

        updates: list[SyncOperation] = []
        new_rows: list[ReportRow] = []

        for computed in sorted(computed_rows, key=lambda row: row.canonical_sort_key):
            entry = by_key.get(computed.unique_key.casefold())
            if entry is None:
                new_rows.append(computed)
                continue

            merged = entry.row.merge_with(computed)
            if merged.same_content(entry.row):
                continue

            entry.row = merged
            updates.append(
                SyncOperation(
                    kind=SyncOperationKind.UPDATE,
                    target_row_number=entry.row_number,
                    row=merged,
                )
            )

        inserts = [self._plan_insert(entries, row) for row in new_rows]
        reorders = self._plan_reorders(entries)

        plan = ReconciliationPlan(sync_operations=updates + inserts, reorders=reorders)
        logger.info(
            f"Reconciliation planned {plan.update_count} updates, "
            f"{plan.insert_count} inserts, {len(plan.reorders)} block reorders"
        )
        return plan

    @staticmethod
    def _validate_existing(existing_rows: list[ReportRow]) -> None:
        seen: set[int] = set()
        for row in existing_rows:
            if row.row_number <= HEADER_ROW_NUMBER:
                raise InvalidInputError(
                    f"Existing row {row.unique_key!r} has invalid row number "
                    f"{row.row_number}; data rows start at {HEADER_ROW_NUMBER + 1}",
                    {"row_number": row.row_number},
                )
            if row.row_number in seen:
                raise InvalidInputError(
                    f"Row number {row.row_number} appears more than once in snapshot",
                    {"row_number": row.row_number},
                )
            seen.add(row.row_number)

    @staticmethod
    def _validate_computed(computed_rows: list[ReportRow]) -> None:
        seen: set[str] = set()
        for row in computed_rows:
            if not row.unique_key.strip() or not row.repository_name.strip():
                raise InvalidInputError(
                    f"Computed row {row} is missing its unique key or repository"
                )
            key = row.unique_key.casefold()
            if key in seen:
                raise InvariantViolationError(
                    f"Duplicate unique key reached reconciliation: {row.unique_key!r}",
                    {"unique_key": row.unique_key},
                )
            seen.add(key)

    @staticmethod
    def _index_by_key(entries: list[_SheetEntry]) -> dict[str, _SheetEntry]:
        index: dict[str, _SheetEntry] = {}
        for entry in entries:
            key = entry.row.unique_key.strip().casefold()
            if not key:
                continue
            if key in index:
                logger.warning(
                    f"Unique key {entry.row.unique_key!r} appears in rows "
                    f"{index[key].row_number} and {entry.row_number}; "
                    f"keeping row {index[key].row_number}"
                )
                continue
            index[key] = entry
        return index

    @staticmethod
    def _plan_insert(entries: list[_SheetEntry], row: ReportRow) -> SyncOperation:
        block = [e for e in entries if e.row.repository_name == row.repository_name]
        if block:
            target = max(e.row_number for e in block) + 1
        else:
            target = HEADER_ROW_NUMBER + 1

        for entry in entries:
            if entry.row_number >= target:
                entry.row_number += 1

        positioned = row.with_row_number(target)
        entries.append(_SheetEntry(row_number=target, row=positioned, is_new=True))
        entries.sort(key=lambda e: e.row_number)

        return SyncOperation(
            kind=SyncOperationKind.INSERT, target_row_number=target, row=positioned
        )

    @staticmethod
    def _plan_reorders(entries: list[_SheetEntry]) -> list[BlockReorderOperation]:
        blocks: dict[str, list[_SheetEntry]] = {}
        for entry in entries:
            if entry.is_new or not entry.row.repository_name.strip():
                continue
            blocks.setdefault(entry.row.repository_name, []).append(entry)

        reorders = []
        for repository_name, block in blocks.items():
            if len(block) < 2:
                continue

            current = [e.row_number for e in sorted(block, key=lambda e: e.row_number)]
            start, end = current[0], current[-1]

            if current != list(range(start, end + 1)):
                logger.warning(
                    f"Rows of repository {repository_name!r} are not contiguous "
                    f"({current}); skipping block reorder"
                )
                continue

            desired = [
                e.row_number
                for e in sorted(
                    sorted(block, key=lambda e: e.row_number),
                    key=lambda e: e.row.block_sort_key,
                )
            ]
            if desired == current:
                continue

            reorder = BlockReorderOperation(
                start_row=start,
                end_row=end,
                repository_name=repository_name,
                sorted_original_row_numbers=tuple(desired),
            )
            if not reorder.is_valid():
                raise InvariantViolationError(
                    f"Planned an invalid block reorder: {reorder}",
                    {"repository_name": repository_name},
                )
            reorders.append(reorder)

        return reorders
