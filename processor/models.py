"""Data models for reminder events."""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

from processor.errors import EmptyField, ParseError, UnknownInterval

DATE_FORMAT = '%Y/%m/%d'


class Interval(Enum):
    """Recurrence kind of a reminder event."""
    ONE_TIME = 'Onetime'
    WEEKLY = 'Weekly'
    MONTHLY = 'Monthly'
    YEARLY = 'Yearly'

    @classmethod
    def parse(cls, label: str) -> 'Interval':
        """
        Parse an interval label case-insensitively.

        Args:
            label: Interval text from the data source (e.g. "weekly", "Oneshot")

        Returns:
            Matching Interval

        Raises:
            UnknownInterval: If the label is not a known interval
        """
        interval = _LABELS.get(label.strip().lower())
        if interval is None:
            raise UnknownInterval(f"Unknown interval: {label!r}")
        return interval

    def __str__(self) -> str:
        return self.value


_LABELS = {
    'onetime': Interval.ONE_TIME,
    'oneshot': Interval.ONE_TIME,
    'weekly': Interval.WEEKLY,
    'monthly': Interval.MONTHLY,
    'yearly': Interval.YEARLY,
}


@dataclass(frozen=True)
class Event:
    """Normalized reminder event."""
    name: str
    interval: Interval
    start_date: date
    end_date: Optional[date] = None

    def __post_init__(self):
        # Names must survive a to_row()/parse_row() round trip unchanged
        if not self.name or not self.name.strip():
            raise EmptyField("Event name must not be blank")
        if self.name != self.name.strip():
            raise ParseError(f"Event name has surrounding whitespace: {self.name!r}")

    def to_row(self) -> List[str]:
        """Serialize the event into the four-cell row shape of the sheet."""
        return [
            self.name,
            str(self.interval),
            self.start_date.strftime(DATE_FORMAT),
            self.end_date.strftime(DATE_FORMAT) if self.end_date else '',
        ]


@dataclass(frozen=True)
class Schedule:
    """Events due on a single date, in source row order."""
    date: date
    events: Tuple[Event, ...] = ()
