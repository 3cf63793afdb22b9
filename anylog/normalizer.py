"""Resolves raw timestamp fields into an absolute, offset-aware datetime.

Two pieces of information are routinely missing from log timestamps:

- the zone: filled from the caller's fallback offset, never from the
  machine's ambient timezone;
- the year (syslog) or the whole date (bare clock times): taken from the
  caller's reference time, rolling back one year (or day) when the result
  would land too far in the future. This attributes "Dec 31 23:59:59"
  read on Jan 2 to the previous year, and "Feb 29" read in a common year
  to the latest leap year before it.
"""

import logging
from datetime import datetime, timedelta, timezone

from anylog.errors import InvalidCalendarDate
from anylog.models import RawTimestamp

logger = logging.getLogger(__name__)

# How far ahead of the reference time an inferred-year timestamp may land
# before it is attributed to the previous year.
DEFAULT_FUTURE_TOLERANCE = timedelta(days=3)

# Same rule for clock-only timestamps, rolling back a day instead.
CLOCK_FUTURE_TOLERANCE = timedelta(hours=1)

# Leap years are at most 8 years apart (e.g. 1896 and 1904), so "Feb 29"
# always resolves within this many years back.
_MAX_YEAR_ROLLBACK = 8


def to_timezone(offset: timezone | timedelta) -> timezone:
    """Accept a fixed timezone or a timedelta east of UTC."""
    if isinstance(offset, timezone):
        return offset
    if isinstance(offset, timedelta):
        return timezone(offset)
    raise TypeError(
        f"fallback offset must be a timezone or timedelta, got {type(offset).__name__}"
    )


def _build(year: int, month: int, day: int, raw: RawTimestamp, tz: timezone) -> datetime:
    try:
        return datetime(
            year, month, day,
            raw.hour, raw.minute, raw.second, raw.microsecond,
            tzinfo=tz,
        )
    except ValueError as e:
        raise InvalidCalendarDate(
            f"{year:04d}-{month:02d}-{day:02d} "
            f"{raw.hour:02d}:{raw.minute:02d}:{raw.second:02d}: {e}"
        ) from e


def resolve(
    raw: RawTimestamp,
    reference_now: datetime,
    fallback_offset: timezone | timedelta,
    future_tolerance: timedelta = DEFAULT_FUTURE_TOLERANCE,
) -> datetime:
    """Turn ``raw`` into an aware datetime.

    Args:
        raw: Fields extracted by a grammar.
        reference_now: The caller's notion of "now". A naive value is read
            as wall time in the resolved zone.
        fallback_offset: Zone used when ``raw`` has no explicit offset.
        future_tolerance: How far past ``reference_now`` an inferred-year
            timestamp may be before the previous year is used instead.

    Returns:
        A datetime with a fixed-offset tzinfo.

    Raises:
        InvalidCalendarDate: If the fields cannot form a real date and time,
            e.g. "Feb 29" with an explicit non-leap year. An inferred year
            steps back to the nearest year in which the date exists.
    """
    raw.validate()

    if raw.offset is not None:
        tz = timezone(raw.offset)
    else:
        tz = to_timezone(fallback_offset)

    if reference_now.tzinfo is None:
        ref = reference_now.replace(tzinfo=tz)
    else:
        ref = reference_now.astimezone(tz)

    if raw.year is not None:
        return _build(raw.year, raw.month, raw.day, raw, tz)

    if not raw.has_date:
        candidate = _build(ref.year, ref.month, ref.day, raw, tz)
        if candidate - ref > CLOCK_FUTURE_TOLERANCE:
            logger.debug("Clock time %s is ahead of %s, using previous day", candidate, ref)
            candidate -= timedelta(days=1)
        return candidate

    for year in range(ref.year, ref.year - _MAX_YEAR_ROLLBACK - 1, -1):
        try:
            candidate = _build(year, raw.month, raw.day, raw, tz)
        except InvalidCalendarDate as e:
            logger.debug("No such date in %d, trying previous year: %s", year, e)
            continue
        if candidate - ref <= future_tolerance:
            return candidate
        logger.debug("Inferred %s is ahead of %s, using previous year", candidate, ref)
    raise InvalidCalendarDate(
        f"no year in {ref.year - _MAX_YEAR_ROLLBACK}..{ref.year} has "
        f"{raw.month:02d}-{raw.day:02d} on or before {ref.isoformat()}"
    )
