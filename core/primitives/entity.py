"""
Front Office Entity Primitive — Identity, Aggregates and Domain Events
======================================================================
Engine: Core Primitives

Base types shared by every aggregate (Customer, Vehicle, WorkOrder)
and owned entity (Quote).

RULES (NON-NEGOTIABLE):
- Entities are equal iff same concrete type and same id
- Ids are time-ordered (version-7 UUIDs)
- updated_at stays None until the first successful mutation
- Soft delete only; nothing is ever hard-deleted here
- Domain events are buffered in order on the aggregate and are
  only released by an explicit drain/clear (collect, commit,
  dispatch, clear)

This file contains NO persistence logic.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, List, Optional, Tuple

from core.primitives.identity import new_entity_id
from core.time.clock import now_utc


# ══════════════════════════════════════════════════════════════
# DOMAIN EVENT
# ══════════════════════════════════════════════════════════════

_EVENT_ENVELOPE_FIELDS = frozenset({"event_id", "occurred_on", "version"})


def _serialize(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """
    Something that happened to an aggregate.

    Subclasses declare `event_type` (engine.domain.action) and their
    payload fields. The envelope fields are keyword-only so payload
    fields can stay positional.

    Fields:
        event_id:    uuid4, unique per event
        occurred_on: UTC time the event was raised
        version:     payload schema version
    """
    event_type: ClassVar[str] = ""

    event_id: uuid.UUID = field(default_factory=uuid.uuid4)
    occurred_on: datetime = field(default_factory=now_utc)
    version: int = 1

    def payload(self) -> dict:
        return {
            f.name: _serialize(getattr(self, f.name))
            for f in fields(self)
            if f.name not in _EVENT_ENVELOPE_FIELDS
        }

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "event_id": str(self.event_id),
            "occurred_on": self.occurred_on.isoformat(),
            "version": self.version,
            "payload": self.payload(),
        }


# ══════════════════════════════════════════════════════════════
# ENTITY
# ══════════════════════════════════════════════════════════════

class Entity:
    """
    Identity + lifecycle timestamps + soft delete.
    """

    def __init__(self, entity_id: Optional[uuid.UUID] = None) -> None:
        if entity_id is not None and not isinstance(entity_id, uuid.UUID):
            raise TypeError("entity_id must be UUID.")
        self._id: uuid.UUID = entity_id or new_entity_id()
        self._created_at: datetime = now_utc()
        self._updated_at: Optional[datetime] = None
        self._is_deleted = False

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at

    @property
    def is_deleted(self) -> bool:
        return self._is_deleted

    def update(self) -> None:
        """Stamp updated_at with the current clock time."""
        self._updated_at = now_utc()

    def mark_as_deleted(self) -> None:
        self._is_deleted = True
        self.update()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return type(self) is type(other) and self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id})"


# ══════════════════════════════════════════════════════════════
# AGGREGATE ROOT
# ══════════════════════════════════════════════════════════════

class AggregateRoot(Entity):
    """
    Consistency boundary. Owns an ordered buffer of domain events.
    """

    def __init__(self, entity_id: Optional[uuid.UUID] = None) -> None:
        super().__init__(entity_id)
        self._domain_events: List[DomainEvent] = []

    @property
    def domain_events(self) -> Tuple[DomainEvent, ...]:
        return tuple(self._domain_events)

    @property
    def has_domain_events(self) -> bool:
        return bool(self._domain_events)

    def add_domain_event(self, event: DomainEvent) -> None:
        if event is None:
            raise TypeError("Domain event cannot be None.")
        if not isinstance(event, DomainEvent):
            raise TypeError(f"Expected DomainEvent, got {type(event).__name__}.")
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        self._domain_events.clear()
