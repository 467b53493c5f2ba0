"""In-memory spreadsheet implementing both reader and writer contracts."""

import asyncio
import logging
from typing import Any

from ..models import BlockReorderOperation, ReportRow, SyncOperation, SyncOperationKind
from ..sync.exceptions import InvalidInputError, InvariantViolationError
from ..sync.interfaces import SheetReader, SheetWriter
from .row_codec import RowCodec

logger = logging.getLogger(__name__)


class InMemorySheet(SheetReader, SheetWriter):
    """Sheet kept as a list of raw row values; row 1 is the header."""

    def __init__(
        self,
        codec: RowCodec | None = None,
        values: list[list[Any]] | None = None,
    ):
        """Initialize the sheet.

        Args:
            codec: Row codec used to read and render rows
            values: Initial raw values including the header row
        """
        self.codec = codec or RowCodec()
        self.values: list[list[Any]] = [list(row) for row in values or [["header"]]]
        self._lock = asyncio.Lock()

    @classmethod
    def from_rows(
        cls, rows: list[ReportRow], codec: RowCodec | None = None
    ) -> "InMemorySheet":
        """Build a sheet holding ``rows`` at their row numbers."""
        sheet = cls(codec=codec)
        for row in sorted(rows, key=lambda r: r.row_number):
            while len(sheet.values) < row.row_number - 1:
                sheet.values.append([])
            sheet.values.insert(row.row_number - 1, sheet.codec.to_row_values(row))
        return sheet

    async def read_rows(self) -> list[ReportRow]:
        """Read every non-empty data row."""
        async with self._lock:
            return self.codec.parse_sheet(self.values)

    async def apply_sync_operations(self, operations: list[SyncOperation]) -> int:
        """Apply updates and inserts in order."""
        async with self._lock:
            for operation in operations:
                index = operation.target_row_number - 1
                if index < 1:
                    raise InvalidInputError(
                        f"Operation targets the header row: {operation}"
                    )

                while len(self.values) < index:
                    self.values.append([])

                if operation.kind == SyncOperationKind.UPDATE:
                    existing = self.values[index] if index < len(self.values) else []
                    rendered = self.codec.to_row_values(operation.row, existing)
                    if index < len(self.values):
                        self.values[index] = rendered
                    else:
                        self.values.append(rendered)
                else:
                    self.values.insert(index, self.codec.to_row_values(operation.row))

            logger.debug(f"Applied {len(operations)} sync operations")
            return len(operations)

    async def apply_reorders(self, reorders: list[BlockReorderOperation]) -> int:
        """Permute the rows of each block."""
        async with self._lock:
            for reorder in reorders:
                if not reorder.is_valid() or reorder.end_row > len(self.values):
                    raise InvariantViolationError(f"Invalid block reorder: {reorder}")

                original = [list(row) for row in self.values]
                for offset, source_row in enumerate(reorder.sorted_original_row_numbers):
                    self.values[reorder.start_row - 1 + offset] = original[source_row - 1]

            logger.debug(f"Applied {len(reorders)} block reorders")
            return len(reorders)
