"""Event source pipeline: fetch raw rows, parse them, keep the due events."""
import logging
from datetime import date
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Tuple

from processor.errors import FetchError, ParseError
from processor.models import Event, Schedule
from processor.recurrence import is_due
from processor.row_parser import RowParser

logger = logging.getLogger(__name__)


class RawRowProvider(Protocol):
    """Interface for reading raw reminder rows from any backend."""

    def fetch_rows(
        self,
        target_date: Optional[date] = None,
        deadline: Optional[float] = None
    ) -> List[Sequence[Any]]:
        """Fetch all rows, header first, giving up once the monotonic deadline passes."""
        ...


class EventSource:
    """Reads reminder rows from a provider and selects the events due on a date."""

    def __init__(self, provider: RawRowProvider, parser: Optional[RowParser] = None):
        """
        Initialize the event source.

        Args:
            provider: Raw row provider (Google Sheets, Notion, ...)
            parser: Row parser (default: RowParser())
        """
        self.provider = provider
        self.parser = parser or RowParser()

    def fetch(self, target_date: date, deadline: Optional[float] = None) -> List[Event]:
        """
        Fetch the events due on a date.

        Rows that fail to parse are skipped; only a provider failure aborts
        the fetch.

        Args:
            target_date: Date to select events for
            deadline: Absolute time.monotonic() value the provider must
                finish by, or None for no overall limit

        Returns:
            Due events in source row order

        Raises:
            FetchError: If the provider call fails or the deadline passes
        """
        try:
            rows = self.provider.fetch_rows(target_date, deadline=deadline)
        except Exception as e:
            raise FetchError(
                f"Failed to fetch rows for {target_date.isoformat()}: {e}"
            ) from e

        # Header only or empty
        if len(rows) < 2:
            logger.info(f"No data rows available for {target_date.isoformat()}")
            return []

        events = []
        # Row numbers are 1-based and count the header, as shown in the sheet
        for row_number, row in enumerate(rows[1:], start=2):
            try:
                event = self.parser.parse_row(row)
            except ParseError as e:
                logger.debug(f"Skipping row {row_number}: {e}")
                continue

            if is_due(event, target_date):
                events.append(event)

        logger.info(
            f"Found {len(events)} due events for {target_date.isoformat()} "
            f"out of {len(rows) - 1} rows"
        )
        return events


def collect_schedules(
    source: EventSource,
    dates: Iterable[date],
    deadline: Optional[float] = None
) -> Tuple[List[Schedule], List[str]]:
    """
    Fetch due events for several dates, isolating failures per date.

    Args:
        source: EventSource to read from
        dates: Target dates, in the order the schedules should be reported
        deadline: Absolute time.monotonic() value shared by every fetch

    Returns:
        Tuple of (schedules for dates that were fetched, error messages for
        dates that failed)
    """
    schedules = []
    errors = []

    for target_date in dates:
        try:
            events = source.fetch(target_date, deadline=deadline)
        except FetchError as e:
            logger.error(
                f"Failed to get events: {e}",
                extra={'target_date': target_date.isoformat()}
            )
            errors.append(str(e))
            continue

        schedules.append(Schedule(date=target_date, events=tuple(events)))

    return schedules, errors
