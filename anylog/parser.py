"""Public entry points: split a log line into timestamp and message."""

from datetime import datetime, timedelta, timezone

from anylog.config import Config
from anylog.matcher import match_line
from anylog.models import LogRecord
from anylog.normalizer import DEFAULT_FUTURE_TOLERANCE, resolve

DEFAULT_CONFIG = Config()


def _decode(line: str | bytes) -> str:
    if isinstance(line, bytes):
        return line.decode("utf-8", errors="replace")
    return line


def parse_with(
    line: str | bytes,
    reference_now: datetime,
    fallback_offset: timezone | timedelta,
    future_tolerance: timedelta = DEFAULT_FUTURE_TOLERANCE,
) -> LogRecord:
    """Parse a single log line against an explicit clock and fallback zone.

    Returns a LogRecord with timestamp=None and the whole line as message
    if no grammar matched.

    Raises:
        InvalidCalendarDate: If a grammar matched but the fields cannot form
            a date once the year is resolved.
    """
    text = _decode(line)

    found = match_line(text)
    if found is None:
        return LogRecord(timestamp=None, message=text)

    grammar, match = found
    timestamp = resolve(match.raw, reference_now, fallback_offset, future_tolerance)
    prefix_end = match.consumed - len(match.separator)

    return LogRecord(
        timestamp=timestamp,
        message=text[match.consumed:],
        grammar=grammar.name,
        prefix=text[:prefix_end],
        separator=match.separator,
    )


def parse(line: str | bytes, config: Config | None = None) -> LogRecord:
    """Parse a single log line using the current time.

    The fallback zone and year tolerance come from ``config`` (UTC and three
    days when omitted).
    """
    config = config or DEFAULT_CONFIG
    return parse_with(
        line,
        reference_now=datetime.now(timezone.utc),
        fallback_offset=config.fallback_tz,
        future_tolerance=config.future_tolerance,
    )
