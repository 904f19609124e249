"""
Shared fixtures.

Every test runs against a FixedClock so creation stamps, expiry and
overdue checks are deterministic. Tests move time with
clock.advance(days=...).
"""

from datetime import datetime, timezone

import pytest

from core.time.clock import FixedClock, get_default_clock, set_default_clock

NOW = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clock():
    original = get_default_clock()
    fixed = FixedClock(NOW)
    set_default_clock(fixed)
    try:
        yield fixed
    finally:
        set_default_clock(original)
