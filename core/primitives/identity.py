"""
Front Office Identity Primitive — Time-Ordered Entity Ids
=========================================================
Entity ids are RFC 9562 version-7 UUIDs:

    | 48 bits unix_ts_ms | ver=7 | 12 bits counter | var=10 | 62 bits random |

Ids generated by one process sort in creation order: the 12-bit
counter field increases within a millisecond and is re-seeded when
the millisecond changes. Counter overflow borrows the next millisecond.

Event ids stay uuid4; only entities need ordering.
"""

from __future__ import annotations

import secrets
import time
import uuid
from threading import Lock

from core.primitives.errors import ValidationError

_MAX_COUNTER = 0xFFF

_lock = Lock()
_last_ms = 0
_counter = 0


def new_entity_id() -> uuid.UUID:
    """Return a new, monotonically increasing version-7 UUID."""
    global _last_ms, _counter

    with _lock:
        ms = time.time_ns() // 1_000_000
        if ms > _last_ms:
            _last_ms = ms
            # Seed low so the counter has room to grow within the ms
            _counter = secrets.randbits(10)
        else:
            _counter += 1
            if _counter > _MAX_COUNTER:
                _last_ms += 1
                _counter = 0
        timestamp = _last_ms
        counter = _counter

    value = (timestamp & 0xFFFF_FFFF_FFFF) << 80
    value |= 0x7 << 76
    value |= counter << 64
    value |= 0b10 << 62
    value |= secrets.randbits(62)
    return uuid.UUID(int=value)


def timestamp_ms(entity_id: uuid.UUID) -> int:
    """Extract the millisecond timestamp embedded in a version-7 id."""
    if entity_id.version != 7:
        raise ValueError(f"Not a version-7 UUID: {entity_id}.")
    return entity_id.int >> 80


def require_id(value: uuid.UUID, field: str) -> uuid.UUID:
    """Reject None, non-UUID and the nil UUID as references."""
    if not isinstance(value, uuid.UUID) or value.int == 0:
        raise ValidationError(f"{field} must be a non-empty UUID.", field)
    return value
