"""Unit tests for converting between sheet values and report rows."""

from datetime import UTC, datetime

import pytest

from release_sync.models import CaseInsensitiveSet, ColumnMapping, ReportRow
from release_sync.sheet.columns import column_to_index
from release_sync.sheet.row_codec import RowCodec, hyperlink_formula
from tests.fixtures import BASE_TIME


def _cells(**by_column: str) -> list[str]:
    values = [""] * 26
    for column, value in by_column.items():
        values[column_to_index(column)] = value
    return values


@pytest.fixture
def codec():
    return RowCodec()


class TestHyperlinkFormula:
    def test_builds_formula(self):
        assert (
            hyperlink_formula("ID1 - Login", "https://t/1")
            == '=HYPERLINK("https://t/1", "ID1 - Login")'
        )

    def test_escapes_quotes(self):
        assert hyperlink_formula('Say "hi"', "u") == '=HYPERLINK("u", "Say ""hi""")'

    def test_blank_arguments_rejected(self):
        with pytest.raises(ValueError):
            hyperlink_formula(" ", "u")
        with pytest.raises(ValueError):
            hyperlink_formula("text", "")


class TestDateTimes:
    def test_format_uses_display_offset_and_weekday(self, codec):
        assert codec.format_datetime(BASE_TIME) == "2024-03-04 (一) 10:30"

    def test_format_sunday(self, codec):
        sunday = datetime(2024, 3, 10, 1, 0, tzinfo=UTC)

        assert codec.format_datetime(sunday) == "2024-03-10 (日) 09:00"

    def test_parse_converts_back_to_utc(self, codec):
        assert codec.parse_datetime("2024-03-04 (一) 10:30") == BASE_TIME

    def test_parse_accepts_plain_and_iso_text(self, codec):
        assert codec.parse_datetime("2024-03-04 10:30") == BASE_TIME
        assert codec.parse_datetime("2024-03-04T02:30:00+00:00") == BASE_TIME

    def test_unparseable_text_is_none(self, codec):
        assert codec.parse_datetime("") is None
        assert codec.parse_datetime("last tuesday") is None

    def test_custom_offset(self):
        codec = RowCodec(display_timezone_offset_hours=0)

        assert codec.format_datetime(BASE_TIME) == "2024-03-04 (一) 02:30"


class TestParseRow:
    def test_reads_mapped_cells(self, codec):
        """
        Why: The reader must recover every field from its configured column
        What: Parses a fully populated row in the default layout
        How: Builds raw values by column letter and checks the ReportRow
        """
        values = _cells(
            Y="900svc-a",
            Z="svc-a",
            B='=HYPERLINK("https://t/900", "ID900 - Checkout")',
            D="Checkout",
            W="Ann\nBo",
            X="u1\r\nu2\n",
            G="2024-03-04 (一) 10:30",
            F="true",
        )

        row = codec.parse_row(values, 5)

        assert row.unique_key == "900svc-a"
        assert row.repository_name == "svc-a"
        assert row.feature == "ID900 - Checkout"
        assert row.feature_url == "https://t/900"
        assert row.team == "Checkout"
        assert row.authors.sorted() == ["Ann", "Bo"]
        assert row.links.sorted() == ["u1", "u2"]
        assert row.merged_at == BASE_TIME
        assert row.row_number == 5
        assert row.is_auto_sync is True

    def test_short_row_yields_empty_fields(self, codec):
        row = codec.parse_row(["", "plain feature"], 2)

        assert row.feature == "plain feature"
        assert row.feature_url == ""
        assert row.unique_key == ""
        assert len(row.authors) == 0
        assert row.is_auto_sync is False

    def test_without_auto_sync_column_rows_are_auto_synced(self):
        codec = RowCodec(ColumnMapping(auto_sync=None))

        assert codec.parse_row(["x"], 2).is_auto_sync is True

    def test_non_positive_row_number_rejected(self, codec):
        with pytest.raises(ValueError):
            codec.parse_row([], 0)

    def test_invalid_mapping_rejected(self):
        with pytest.raises(ValueError, match="Invalid column mapping"):
            RowCodec(ColumnMapping(team="B"))


class TestToRowValues:
    def test_writes_cells_and_round_trips(self, codec):
        row = ReportRow(
            unique_key="900svc-a",
            repository_name="svc-a",
            feature="ID900 - Checkout",
            feature_url="https://t/900",
            team="Checkout",
            authors=CaseInsensitiveSet(["bo", "Ann"]),
            links=CaseInsensitiveSet(["u2", "u1"]),
            merged_at=BASE_TIME,
            row_number=3,
        )

        values = codec.to_row_values(row)

        assert values[column_to_index("B")] == (
            '=HYPERLINK("https://t/900", "ID900 - Checkout")'
        )
        assert values[column_to_index("W")] == "Ann\nbo"
        assert values[column_to_index("F")] == "TRUE"
        assert codec.parse_row(values, 3) == row

    def test_preserves_unmapped_cells_of_existing_row(self, codec):
        existing = _cells(A="keep me", C="notes", B="old")
        row = ReportRow(unique_key="1A", repository_name="A", feature="new")

        values = codec.to_row_values(row, existing)

        assert values[0] == "keep me"
        assert values[2] == "notes"
        assert values[1] == "new"

    def test_parse_sheet_skips_header_and_blank_rows(self, codec):
        sheet = [
            ["header"],
            _cells(Y="1A", Z="A", B="one"),
            ["", None, "  "],
            _cells(Y="2A", Z="A", B="two"),
        ]

        rows = codec.parse_sheet(sheet)

        assert [(row.unique_key, row.row_number) for row in rows] == [
            ("1A", 2),
            ("2A", 4),
        ]
