"""Shared pytest fixtures for the anylog test suite."""

from datetime import datetime, timezone

import pytest


@pytest.fixture()
def reference_now() -> datetime:
    """Mid-year reference clock, far from any year boundary."""
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
