"""Unit tests for column letter arithmetic."""

import pytest

from release_sync.sheet.columns import column_to_index, index_to_column


class TestColumnConversion:
    @pytest.mark.parametrize(
        "column, index",
        [("A", 0), ("B", 1), ("Z", 25), ("AA", 26), ("AZ", 51), ("BA", 52), ("ZZ", 701)],
    )
    def test_round_trip(self, column, index):
        assert column_to_index(column) == index
        assert index_to_column(index) == column

    def test_lower_case_and_whitespace_accepted(self):
        assert column_to_index(" aa ") == 26

    @pytest.mark.parametrize("column", ["", "  ", "A1", "-"])
    def test_invalid_column_rejected(self, column):
        with pytest.raises(ValueError):
            column_to_index(column)

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            index_to_column(-1)
