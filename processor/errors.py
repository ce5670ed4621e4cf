"""Exceptions raised while reading reminder events."""


class ParseError(ValueError):
    """A raw row could not be converted into an Event."""


class InsufficientColumns(ParseError):
    """The row has fewer cells than the parser reads."""


class EmptyField(ParseError):
    """A required cell is blank."""


class UnknownInterval(ParseError):
    """The interval label is not one of the supported intervals."""


class InvalidDateFormat(ParseError):
    """A date cell does not use a supported date format."""


class FetchError(Exception):
    """The raw row provider failed; no events could be read for the date."""
