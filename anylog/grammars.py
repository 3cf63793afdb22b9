"""Timestamp grammars, tried in priority order by the line matcher.

Priority order (most specific first):
  1. iso8601         2024-06-01T12:00:00.250Z ...  /  2015-05-13 17:39:16 +0200: ...
  2. rfc5424         <34>1 2003-10-11T22:14:15.003Z ...
  3. common_log      [10/Oct/2000:13:55:36 -0700] ...
  4. ue4             [2018.10.29-16.56.37:542][  0]...
  5. ctime           Tue Nov 21 00:30:05 2017 ...
  6. month_day_year  Jan 03, 2016 22:29:55 ...
  7. syslog_pri      <13>Jan  5 14:30:01 ...
  8. syslog          Jun  1 12:00:00 ...
  9. iso8601_local   2024-06-01 12:00:00 ...
 10. clock           22:07:10 ...

Several of these are prefixes of each other: ctime must run before syslog
(or the year ends up in the message) and iso8601 before iso8601_local (or
the offset does). New grammars go at the lowest rank that keeps every line
matched by a higher-ranked grammar parsing exactly as before.
"""

import logging
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import NamedTuple

from anylog.errors import InvalidCalendarDate
from anylog.models import RawTimestamp

logger = logging.getLogger(__name__)

_MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

# ---------------------------------------------------------------------------
# Pattern building blocks
# ---------------------------------------------------------------------------

# A closing bracket is required exactly when the opening one was present.
_OPEN = r'(?P<open>\[)?'
_CLOSE = r'(?(open)\])'

_WEEKDAY = r'(?:(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun) )?'
_MONTH_NAME = r'(?P<mon>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)'
_PADDED_DAY = r' +(?P<day>\d{1,2})'
_TIME = r'(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})'
_FRAC = r'(?:\.(?P<frac>\d+))?'

_ISO_DATE = r'(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})'
_ISO_TIME = _TIME + r'(?:[.,](?P<frac>\d+))?'
# A bare '+HH' must touch the time; after a space only '+HHMM' or '+HH:MM'
# counts, so '12:00:00 -10 items' keeps '-10' in the message.
_ISO_ZONE = r'(?: (?=[+-]\d{2}:?\d{2}))?(?P<tz>Z|[+-]\d{2}(?::?\d{2})?):?'

_SEP = r'(?P<sep>[\t ]|$)'


def _anchored(prefix: str, sep: str = _SEP) -> re.Pattern:
    return re.compile(r'^(?P<prefix>' + prefix + r')' + sep, re.ASCII)


# ---------------------------------------------------------------------------
# Compiled regex patterns
# ---------------------------------------------------------------------------

_ISO8601_RE = _anchored(_OPEN + _ISO_DATE + r'[T ]' + _ISO_TIME + _ISO_ZONE + _CLOSE)

_RFC5424_RE = _anchored(
    r'<\d{1,3}>\d{1,2} '
    + _ISO_DATE + r'T' + _ISO_TIME
    + r'(?P<tz>Z|[+-]\d{2}:\d{2})'
)

_COMMON_LOG_RE = _anchored(
    _OPEN
    + r'(?P<day>\d{2})/' + _MONTH_NAME + r'/(?P<year>\d{4}):' + _TIME
    + r' (?P<tz>[+-]\d{4})'
    + _CLOSE
)

# The frame counter belongs to the prefix; the message follows it directly.
_UE4_RE = _anchored(
    r'\[(?P<year>\d{4})\.(?P<month>\d{2})\.(?P<day>\d{2})'
    r'-(?P<hour>\d{2})\.(?P<minute>\d{2})\.(?P<second>\d{2})'
    r':(?P<frac>\d+)\]'
    r'\[ *\d+\]',
    sep=r'(?P<sep>)',
)

_CTIME_RE = _anchored(
    _OPEN + _WEEKDAY + _MONTH_NAME + _PADDED_DAY + r' ' + _TIME + _FRAC
    + r' (?P<year>\d{4})' + _CLOSE
)

_MONTH_DAY_YEAR_RE = _anchored(
    _OPEN + _WEEKDAY + _MONTH_NAME + _PADDED_DAY + r',? (?P<year>\d{4}) '
    + _TIME + _FRAC + _CLOSE
)

_SYSLOG_PRI_RE = _anchored(
    r'<\d{1,3}>' + _MONTH_NAME + _PADDED_DAY + r' ' + _TIME + _FRAC
)

_SYSLOG_RE = _anchored(
    _OPEN + _WEEKDAY + _MONTH_NAME + _PADDED_DAY + r' ' + _TIME + _FRAC + _CLOSE
)

_ISO8601_LOCAL_RE = _anchored(_OPEN + _ISO_DATE + r'[T ]' + _ISO_TIME + _CLOSE)

_CLOCK_RE = _anchored(
    _OPEN + r'(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})' + _FRAC + _CLOSE
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _parse_tz(text: str) -> timedelta:
    """Convert 'Z', '+02:00', '+0200' or '-07' → timedelta east of UTC."""
    if text == "Z":
        return timedelta(0)
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:] or 0)
    if minutes > 59:
        raise InvalidCalendarDate(f"offset minutes out of range: {text}")
    return sign * timedelta(hours=hours, minutes=minutes)


def _int_or_none(value: str | None) -> int | None:
    return int(value) if value is not None else None


class GrammarMatch(NamedTuple):
    raw: RawTimestamp
    consumed: int    # index where the message starts
    separator: str   # exact text trimmed between prefix and message


@dataclass(frozen=True)
class Grammar:
    """One textual timestamp convention, anchored at the start of a line."""

    name: str
    pattern: re.Pattern
    implied_offset: timedelta | None = None

    def try_parse(self, line: str) -> GrammarMatch | None:
        """Return the parsed fields and consumed length, or None if no match.

        Lines that fit the shape but carry out-of-range fields (month 13,
        second 60, ...) are a non-match, not an error.
        """
        m = self.pattern.match(line)
        if not m:
            return None
        g = m.groupdict()

        if g.get("mon"):
            month = _MONTHS[g["mon"]]
        else:
            month = _int_or_none(g.get("month"))

        try:
            offset = _parse_tz(g["tz"]) if g.get("tz") else self.implied_offset
            raw = RawTimestamp(
                year=_int_or_none(g.get("year")),
                month=month,
                day=_int_or_none(g.get("day")),
                hour=int(g["hour"]),
                minute=int(g["minute"]),
                second=int(g["second"]),
                fraction=g.get("frac"),
                offset=offset,
            ).validate()
        except InvalidCalendarDate as e:
            logger.debug("Grammar %s rejected %r: %s", self.name, m.group("prefix"), e)
            return None

        return GrammarMatch(raw=raw, consumed=m.end(), separator=m.group("sep"))


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

ISO8601 = Grammar("iso8601", _ISO8601_RE)
RFC5424 = Grammar("rfc5424", _RFC5424_RE)
COMMON_LOG = Grammar("common_log", _COMMON_LOG_RE)
UE4 = Grammar("ue4", _UE4_RE, implied_offset=timedelta(0))
CTIME = Grammar("ctime", _CTIME_RE)
MONTH_DAY_YEAR = Grammar("month_day_year", _MONTH_DAY_YEAR_RE)
SYSLOG_PRI = Grammar("syslog_pri", _SYSLOG_PRI_RE)
SYSLOG = Grammar("syslog", _SYSLOG_RE)
ISO8601_LOCAL = Grammar("iso8601_local", _ISO8601_LOCAL_RE)
CLOCK = Grammar("clock", _CLOCK_RE)

CATALOG: tuple[Grammar, ...] = (
    ISO8601,
    RFC5424,
    COMMON_LOG,
    UE4,
    CTIME,
    MONTH_DAY_YEAR,
    SYSLOG_PRI,
    SYSLOG,
    ISO8601_LOCAL,
    CLOCK,
)


def get_grammar(name: str) -> Grammar:
    """Look up a catalog grammar by name."""
    for grammar in CATALOG:
        if grammar.name == name:
            return grammar
    raise KeyError(name)
