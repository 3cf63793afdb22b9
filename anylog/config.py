"""Configuration loading from env vars and an optional YAML file.

The extraction engine itself never reads configuration; callers load a
Config here and pass its resolved values in.
"""

import logging
import os
import re
from dataclasses import dataclass
from datetime import timedelta, timezone

import yaml

logger = logging.getLogger(__name__)

_OFFSET_RE = re.compile(r'^(?P<sign>[+-])(?P<hours>\d{2})(?::?(?P<minutes>\d{2}))?$', re.ASCII)


def parse_offset(text: str) -> timezone:
    """Convert 'UTC', 'Z', '+02:00', '+0200' or '-07' → fixed timezone."""
    value = str(text).strip()
    if value.upper() in ("Z", "UTC"):
        return timezone.utc

    m = _OFFSET_RE.match(value)
    if not m:
        raise ValueError(f"Invalid UTC offset: {text!r}")

    hours = int(m.group("hours"))
    minutes = int(m.group("minutes") or 0)
    if minutes > 59:
        raise ValueError(f"Invalid UTC offset: {text!r}")
    delta = timedelta(hours=hours, minutes=minutes)
    if m.group("sign") == "-":
        delta = -delta
    # timezone() itself rejects offsets of 24h or more
    return timezone(delta)


@dataclass(frozen=True)
class Config:
    fallback_offset: str = "+00:00"
    future_tolerance_days: float = 3

    @property
    def fallback_tz(self) -> timezone:
        return parse_offset(self.fallback_offset)

    @property
    def future_tolerance(self) -> timedelta:
        return timedelta(days=self.future_tolerance_days)


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from env vars, then YAML data, then defaults."""
    yaml_data = yaml_data or {}

    fallback_offset = os.environ.get(
        "ANYLOG_FALLBACK_OFFSET",
        yaml_data.get("fallback_offset", Config.fallback_offset),
    )
    future_tolerance_days = float(os.environ.get(
        "ANYLOG_FUTURE_TOLERANCE_DAYS",
        yaml_data.get("future_tolerance_days", Config.future_tolerance_days),
    ))

    # Fail at load time rather than on the first parsed line.
    parse_offset(fallback_offset)
    if future_tolerance_days < 0:
        raise ValueError(f"future_tolerance_days must be >= 0, got {future_tolerance_days}")

    return Config(
        fallback_offset=str(fallback_offset),
        future_tolerance_days=future_tolerance_days,
    )
