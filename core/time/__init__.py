"""
Front Office Core Time — Public API
===================================
Explicit clock protocol.
Doctrine: NO datetime.now() in domain logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    now_utc,
    set_default_clock,
    today_utc,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "today_utc",
]
