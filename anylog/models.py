"""Timestamp and record dataclasses shared by every grammar."""

import calendar
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any

from anylog.errors import InvalidCalendarDate

# Used to check "Feb 29" when the year is not known yet.
_LEAP_YEAR = 2000
_MAX_OFFSET = timedelta(hours=24)


@dataclass(frozen=True)
class RawTimestamp:
    """Fields as written in the line, before year and zone are resolved.

    ``month`` and ``day`` are only absent for clock-only timestamps, which
    never carry a year either. ``fraction`` keeps the sub-second digits
    exactly as written so precision is not lost before resolution.
    """

    year: int | None
    month: int | None
    day: int | None
    hour: int
    minute: int
    second: int
    fraction: str | None = None
    offset: timedelta | None = None

    @property
    def has_date(self) -> bool:
        return self.month is not None

    @property
    def microsecond(self) -> int:
        """Sub-second digits as microseconds; extra digits are truncated."""
        if not self.fraction:
            return 0
        return int(self.fraction[:6].ljust(6, "0"))

    def validate(self) -> "RawTimestamp":
        """Check field ranges and return self, or raise InvalidCalendarDate."""
        if (self.month is None) != (self.day is None):
            raise InvalidCalendarDate("month and day must be given together")
        if self.month is None and self.year is not None:
            raise InvalidCalendarDate("a year requires a month and a day")

        if self.month is not None:
            if not 1 <= self.month <= 12:
                raise InvalidCalendarDate(f"month out of range: {self.month}")
            year = self.year if self.year is not None else _LEAP_YEAR
            if year < 1 or year > 9999:
                raise InvalidCalendarDate(f"year out of range: {year}")
            last_day = calendar.monthrange(year, self.month)[1]
            if not 1 <= self.day <= last_day:
                raise InvalidCalendarDate(
                    f"day {self.day} out of range for month {self.month}"
                )

        if not 0 <= self.hour <= 23:
            raise InvalidCalendarDate(f"hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise InvalidCalendarDate(f"minute out of range: {self.minute}")
        # Leap seconds are not modeled.
        if not 0 <= self.second <= 59:
            raise InvalidCalendarDate(f"second out of range: {self.second}")

        if self.fraction is not None and not self.fraction.isdigit():
            raise InvalidCalendarDate(f"bad fraction: {self.fraction!r}")
        if self.offset is not None and abs(self.offset) >= _MAX_OFFSET:
            raise InvalidCalendarDate(f"offset out of range: {self.offset}")
        return self


@dataclass(frozen=True)
class LogRecord:
    """A log line split into its resolved timestamp and the message.

    ``prefix + separator + message`` always reproduces the input line.
    """

    timestamp: datetime | None
    message: str
    grammar: str | None = None  # name of the grammar that matched
    prefix: str = ""
    separator: str = ""

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp is not None

    def utc_timestamp(self) -> datetime | None:
        if self.timestamp is None:
            return None
        return self.timestamp.astimezone(timezone.utc)

    def local_timestamp(self, tz: tzinfo) -> datetime | None:
        """Return the timestamp converted to ``tz``."""
        if self.timestamp is None:
            return None
        return self.timestamp.astimezone(tz)


def record_to_dict(record: LogRecord) -> dict[str, Any]:
    """Convert a LogRecord to a dict, dropping None values for cleaner JSON."""
    d = {k: v for k, v in asdict(record).items() if v is not None}
    if record.timestamp is not None:
        d["timestamp"] = record.timestamp.isoformat()
    return d
