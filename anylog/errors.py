"""Exceptions raised by the timestamp extraction engine."""


class InvalidCalendarDate(ValueError):
    """Raised when timestamp fields cannot form a real calendar date/time."""
