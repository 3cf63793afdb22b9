"""Split free-form log lines into a timezone-aware timestamp and a message."""

from anylog.config import Config, load_config
from anylog.errors import InvalidCalendarDate
from anylog.grammars import CATALOG, Grammar
from anylog.matcher import match_line
from anylog.models import LogRecord, RawTimestamp, record_to_dict
from anylog.normalizer import DEFAULT_FUTURE_TOLERANCE, resolve
from anylog.parser import parse, parse_with

__all__ = [
    "CATALOG",
    "Config",
    "DEFAULT_FUTURE_TOLERANCE",
    "Grammar",
    "InvalidCalendarDate",
    "LogRecord",
    "RawTimestamp",
    "load_config",
    "match_line",
    "parse",
    "parse_with",
    "record_to_dict",
    "resolve",
]
