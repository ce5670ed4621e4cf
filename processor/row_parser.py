"""Row parser converting raw data-source rows into reminder events."""
import re
from datetime import date, datetime
from typing import Any, Optional, Sequence

from processor.errors import EmptyField, InsufficientColumns, InvalidDateFormat
from processor.models import Event, Interval


class RowParser:
    """Parser for the four-cell reminder row: name, interval, start, end."""

    NAME_INDEX = 0
    INTERVAL_INDEX = 1
    START_DATE_INDEX = 2
    END_DATE_INDEX = 3
    COLUMN_COUNT = 4

    # strptime alone would also accept unpadded values such as 2025/1/5
    DATE_PATTERN = re.compile(r'\d{4}[/-]\d{2}[/-]\d{2}')
    DATE_FORMATS = [
        '%Y/%m/%d',      # Sheet format
        '%Y-%m-%d',      # ISO 8601
    ]

    def parse_row(self, row: Sequence[Any]) -> Event:
        """
        Parse one raw row into an Event.

        Cells may be of any type; they are converted to text and stripped.
        A blank end date means the event has no upper bound.

        Args:
            row: Sequence of cell values

        Returns:
            Parsed Event

        Raises:
            InsufficientColumns: If the row has fewer than four cells
            EmptyField: If the name, interval or start date is blank
            UnknownInterval: If the interval label is not recognized
            InvalidDateFormat: If a date cell cannot be parsed
        """
        if len(row) < self.COLUMN_COUNT:
            raise InsufficientColumns(
                f"Expected {self.COLUMN_COUNT} columns, got {len(row)}"
            )

        name = self._required_text(row, self.NAME_INDEX, 'name')
        interval = Interval.parse(
            self._required_text(row, self.INTERVAL_INDEX, 'interval')
        )
        start_date = self._parse_date(
            self._required_text(row, self.START_DATE_INDEX, 'start date')
        )

        end_text = self._cell_text(row, self.END_DATE_INDEX)
        end_date = self._parse_date(end_text) if end_text else None

        return Event(
            name=name,
            interval=interval,
            start_date=start_date,
            end_date=end_date
        )

    def _cell_text(self, row: Sequence[Any], index: int) -> str:
        value = row[index]
        if value is None:
            return ''
        return str(value).strip()

    def _required_text(self, row: Sequence[Any], index: int, field: str) -> str:
        text = self._cell_text(row, index)
        if not text:
            raise EmptyField(f"Missing required field: {field}")
        return text

    def _parse_date(self, date_str: str) -> date:
        """
        Parse a date cell in one of the supported formats.

        Args:
            date_str: Date text (YYYY/MM/DD or YYYY-MM-DD)

        Returns:
            Calendar date without a time component

        Raises:
            InvalidDateFormat: If no supported format matches
        """
        parsed = None
        if self.DATE_PATTERN.fullmatch(date_str):
            parsed = self._try_formats(date_str)
        if parsed is None:
            raise InvalidDateFormat(f"Invalid date: {date_str!r}")
        return parsed

    def _try_formats(self, date_str: str) -> Optional[date]:
        for fmt in self.DATE_FORMATS:
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                continue

        return None
