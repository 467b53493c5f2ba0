"""Conversion between raw sheet row values and ``ReportRow``s.

Cell layout follows a ``ColumnMapping``. Authors and links are stored one per
line. Merge times are shown in a configurable display time zone as
``yyyy-MM-dd (<weekday>) HH:mm`` and converted back to UTC when read. A
feature with a work item URL is written as a ``HYPERLINK`` formula.
"""

import logging
import re
from datetime import UTC, datetime, timedelta
from typing import Any

from ..models import HEADER_ROW_NUMBER, CaseInsensitiveSet, ColumnMapping, ReportRow
from .columns import column_to_index

logger = logging.getLogger(__name__)

_WEEKDAYS = ("一", "二", "三", "四", "五", "六", "日")
_WEEKDAY_PATTERN = re.compile(r"\s*\([日一二三四五六]\)\s*")
_HYPERLINK_PATTERN = re.compile(
    r'^=HYPERLINK\(\s*"((?:[^"]|"")*)"\s*[,;]\s*"((?:[^"]|"")*)"\s*\)$',
    re.IGNORECASE,
)
_AUTO_SYNC_VALUE = "TRUE"


def _escape(text: str) -> str:
    return text.replace('"', '""')


def _unescape(text: str) -> str:
    return text.replace('""', '"')


def hyperlink_formula(display_text: str, url: str) -> str:
    """Build a ``HYPERLINK`` cell formula.

    Raises:
        ValueError: If the display text or URL is blank
    """
    if not display_text or not display_text.strip():
        raise ValueError("Display text cannot be empty")

    if not url or not url.strip():
        raise ValueError("URL cannot be empty")

    return f'=HYPERLINK("{_escape(url)}", "{_escape(display_text)}")'


def _split_lines(text: str) -> CaseInsensitiveSet:
    values = (line.strip() for line in re.split(r"[\r\n]+", text))
    return CaseInsensitiveSet(value for value in values if value)


class RowCodec:
    """Reads and writes report rows using a column mapping."""

    def __init__(
        self,
        mapping: ColumnMapping | None = None,
        display_timezone_offset_hours: float = 8,
    ):
        """Initialize the codec.

        Args:
            mapping: Column layout of the report sheet
            display_timezone_offset_hours: UTC offset merge times are shown in

        Raises:
            ValueError: If the column mapping is invalid
        """
        self.mapping = mapping or ColumnMapping()
        if not self.mapping.is_valid():
            raise ValueError(f"Invalid column mapping: {self.mapping}")

        self.offset = timedelta(hours=display_timezone_offset_hours)
        self._width = max(column_to_index(c) for c in self.mapping.columns()) + 1

    def parse_sheet(self, values: list[list[Any]]) -> list[ReportRow]:
        """Parse every non-empty data row below the header."""
        rows = []
        for index, row_values in enumerate(values):
            row_number = index + 1
            if row_number <= HEADER_ROW_NUMBER:
                continue
            if not any(str(value).strip() for value in row_values if value is not None):
                continue
            rows.append(self.parse_row(row_values, row_number))
        return rows

    def parse_row(self, values: list[Any], row_number: int) -> ReportRow:
        """Parse one raw row.

        Raises:
            ValueError: If ``row_number`` is not positive
        """
        if row_number <= 0:
            raise ValueError(f"Row number must be positive: {row_number}")

        feature, feature_url = self._parse_feature(self._cell(values, self.mapping.feature))

        if self.mapping.auto_sync is None:
            is_auto_sync = True
        else:
            flag = self._cell(values, self.mapping.auto_sync)
            is_auto_sync = flag.upper() == _AUTO_SYNC_VALUE

        return ReportRow(
            unique_key=self._cell(values, self.mapping.unique_key),
            repository_name=self._cell(values, self.mapping.repository),
            feature=feature,
            feature_url=feature_url,
            team=self._cell(values, self.mapping.team),
            authors=_split_lines(self._cell(values, self.mapping.authors)),
            links=_split_lines(self._cell(values, self.mapping.links)),
            merged_at=self.parse_datetime(self._cell(values, self.mapping.merged_at)),
            row_number=row_number,
            is_auto_sync=is_auto_sync,
        )

    def to_row_values(
        self, row: ReportRow, existing: list[Any] | None = None
    ) -> list[Any]:
        """Render a row, keeping cells of ``existing`` outside the mapping."""
        values: list[Any] = list(existing or [])
        while len(values) < self._width:
            values.append("")

        if row.feature_url and row.feature:
            feature_cell = hyperlink_formula(row.feature, row.feature_url)
        else:
            feature_cell = row.feature

        self._set(values, self.mapping.unique_key, row.unique_key)
        self._set(values, self.mapping.repository, row.repository_name)
        self._set(values, self.mapping.feature, feature_cell)
        self._set(values, self.mapping.team, row.team)
        self._set(values, self.mapping.authors, "\n".join(row.authors.sorted()))
        self._set(values, self.mapping.links, "\n".join(row.links.sorted()))
        self._set(values, self.mapping.merged_at, self.format_datetime(row.merged_at))
        if self.mapping.auto_sync is not None:
            self._set(
                values,
                self.mapping.auto_sync,
                _AUTO_SYNC_VALUE if row.is_auto_sync else "",
            )

        return values

    def format_datetime(self, value: datetime | None) -> str:
        """Format a UTC time in the display time zone."""
        if value is None:
            return ""

        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)

        local = value.astimezone(UTC).replace(tzinfo=None) + self.offset
        weekday = _WEEKDAYS[local.weekday()]
        return f"{local:%Y-%m-%d} ({weekday}) {local:%H:%M}"

    def parse_datetime(self, text: str) -> datetime | None:
        """Parse a displayed time back to UTC, or None when unparseable."""
        if not text or not text.strip():
            return None

        normalized = _WEEKDAY_PATTERN.sub(" ", text).strip()

        local: datetime | None = None
        for candidate in (normalized, text.strip()):
            try:
                local = datetime.strptime(candidate, "%Y-%m-%d %H:%M")
                break
            except ValueError:
                pass
            try:
                local = datetime.fromisoformat(candidate)
                break
            except ValueError:
                pass

        if local is None:
            logger.debug(f"Unparseable merge time in sheet: {text!r}")
            return None

        if local.tzinfo is not None:
            return local.astimezone(UTC)

        return (local - self.offset).replace(tzinfo=UTC)

    @staticmethod
    def _parse_feature(text: str) -> tuple[str, str]:
        match = _HYPERLINK_PATTERN.match(text.strip())
        if match is None:
            return text, ""
        return _unescape(match.group(2)), _unescape(match.group(1))

    @staticmethod
    def _cell(values: list[Any], column: str) -> str:
        index = column_to_index(column)
        if index >= len(values) or values[index] is None:
            return ""
        return str(values[index]).strip()

    @staticmethod
    def _set(values: list[Any], column: str, value: str) -> None:
        values[column_to_index(column)] = value
