"""Unit tests for the in-memory spreadsheet backend."""

import pytest

from release_sync.models import (
    BlockReorderOperation,
    SyncOperation,
    SyncOperationKind,
)
from release_sync.sheet import InMemorySheet
from release_sync.sync.exceptions import InvalidInputError, InvariantViolationError


@pytest.fixture
def sheet(make_row):
    return InMemorySheet.from_rows(
        [
            make_row("1A", repository_name="A", row_number=2),
            make_row("2A", repository_name="A", row_number=3),
            make_row("1B", repository_name="B", row_number=4),
        ]
    )


class TestInMemorySheet:
    @pytest.mark.asyncio
    async def test_from_rows_reads_back(self, sheet):
        rows = await sheet.read_rows()

        assert [(row.unique_key, row.row_number) for row in rows] == [
            ("1A", 2),
            ("2A", 3),
            ("1B", 4),
        ]

    @pytest.mark.asyncio
    async def test_insert_shifts_rows_below(self, sheet, make_row):
        operation = SyncOperation(
            SyncOperationKind.INSERT, 3, make_row("3A", repository_name="A")
        )

        applied = await sheet.apply_sync_operations([operation])

        rows = await sheet.read_rows()
        assert applied == 1
        assert [row.unique_key for row in rows] == ["1A", "3A", "2A", "1B"]
        assert rows[-1].row_number == 5

    @pytest.mark.asyncio
    async def test_update_overwrites_row(self, sheet, make_row):
        updated = make_row("2A", repository_name="A", team="Renamed", row_number=3)

        await sheet.apply_sync_operations(
            [SyncOperation(SyncOperationKind.UPDATE, 3, updated)]
        )

        rows = await sheet.read_rows()
        assert rows[1].team == "Renamed"
        assert len(rows) == 3

    @pytest.mark.asyncio
    async def test_header_is_never_written(self, sheet, make_row):
        with pytest.raises(InvalidInputError):
            await sheet.apply_sync_operations(
                [SyncOperation(SyncOperationKind.UPDATE, 1, make_row("1A"))]
            )

        assert sheet.values[0] == ["header"]

    @pytest.mark.asyncio
    async def test_reorder_permutes_block(self, sheet):
        await sheet.apply_reorders([BlockReorderOperation(2, 3, "A", (3, 2))])

        rows = await sheet.read_rows()
        assert [row.unique_key for row in rows] == ["2A", "1A", "1B"]

    @pytest.mark.asyncio
    async def test_invalid_reorder_rejected(self, sheet):
        with pytest.raises(InvariantViolationError):
            await sheet.apply_reorders([BlockReorderOperation(2, 3, "A", (3, 3))])
