"""Recurrence matching and validity-window checks for reminder events."""
import logging
from datetime import date

from processor.models import Event, Interval

logger = logging.getLogger(__name__)


def in_bounds(event: Event, day: date) -> bool:
    """
    Check whether a date falls inside the event's validity window.

    Both the start and end dates are inclusive. An event without an end
    date stays active indefinitely.

    Args:
        event: Event to check
        day: Target date

    Returns:
        True if start_date <= day <= end_date
    """
    if day < event.start_date:
        return False

    if event.end_date is not None and day > event.end_date:
        return False

    return True


def matches(event: Event, day: date) -> bool:
    """
    Check whether the event's recurrence pattern fires on a date.

    Month-end overflow is not adjusted: a monthly event starting on the
    31st never fires in a 30-day month.

    Args:
        event: Event to check, assumed to be in bounds for the date
        day: Target date

    Returns:
        True if the interval rule matches the date
    """
    start = event.start_date

    if event.interval is Interval.ONE_TIME:
        return day == start
    if event.interval is Interval.WEEKLY:
        return day.weekday() == start.weekday()
    if event.interval is Interval.MONTHLY:
        return day.day == start.day
    if event.interval is Interval.YEARLY:
        return day.month == start.month and day.day == start.day

    logger.warning(
        f"Event '{event.name}' has unknown interval {event.interval!r}; skipping"
    )
    return False


def is_due(event: Event, day: date) -> bool:
    """Return True if the event is both in bounds and matched on the date."""
    return in_bounds(event, day) and matches(event, day)
