"""
Front Office Core Time — Explicit Clock Protocol
================================================
Doctrine: NO datetime.now() inside domain logic.

Every "now" an aggregate needs (creation stamps, quote expiry,
overdue checks, scheduling guards) is read from the default clock,
which tests replace with a FixedClock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


# ══════════════════════════════════════════════════════════════
# PORT
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Anything that can say what time it is, in UTC."""

    def now_utc(self) -> datetime:
        """Timezone-aware current time."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# CLOCKS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Reads the host clock."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock — returns a fixed timestamp until told to move.

    Usage:
        clock = FixedClock(datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc))
        clock.advance(days=31)
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float = 0, days: float = 0) -> None:
        """Move the fixed time forward (multi-step test scenarios)."""
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds, days=days)

    def set(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt


# ══════════════════════════════════════════════════════════════
# DEFAULT CLOCK
# ══════════════════════════════════════════════════════════════

_default_clock: Clock = SystemClock()


def set_default_clock(clock: Clock) -> None:
    """Swap the clock domain code reads. Tests install a FixedClock here."""
    global _default_clock
    _default_clock = clock


def get_default_clock() -> Clock:
    """The clock domain code is currently reading."""
    return _default_clock


def now_utc() -> datetime:
    """now_utc() of the installed clock."""
    return _default_clock.now_utc()


def today_utc() -> date:
    """Calendar date of now_utc()."""
    return _default_clock.now_utc().date()
