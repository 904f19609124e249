"""
Front Office Engine — Unit of Work
==================================
The boundary a multi-aggregate orchestration runs in.

Cycle: collect → commit → dispatch → clear.

- Services wrap their repository writes in `with uow.atomic():`
  and hand every touched aggregate to `uow.collect(...)`.
- When the outermost block exits cleanly, the collected aggregates'
  buffered events are dispatched (if a SubscriberRegistry is
  configured) and their buffers cleared.
- When a block raises, nothing it collected is dispatched, even when
  an enclosing block goes on to exit cleanly. Buffers stay on the
  aggregates so the caller can retry or compensate.

BestEffortUnitOfWork has no transaction: writes made before a failure
stay written. DjangoUnitOfWork (adapters.django_orm) makes the writes
commit together and dispatches only after commit.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import ContextManager, Iterator, List, Optional, Protocol

from core.events.dispatcher import DispatchResult
from core.events.publisher import publish_pending_events
from core.events.registry import SubscriberRegistry
from core.primitives.entity import AggregateRoot

logger = logging.getLogger("front_office.uow")


class UnitOfWork(Protocol):
    def atomic(self) -> ContextManager[None]:
        ...  # pragma: no cover

    def collect(self, *aggregates: AggregateRoot) -> None:
        ...  # pragma: no cover


class CollectingUnitOfWork:
    """
    Shared bookkeeping: nesting depth and the collected aggregates.
    Subclasses provide atomic().
    """

    def __init__(self, subscriber_registry: Optional[SubscriberRegistry] = None) -> None:
        self._registry = subscriber_registry
        self._collected: List[AggregateRoot] = []
        self._depth = 0

    @property
    def in_progress(self) -> bool:
        return self._depth > 0

    def collect(self, *aggregates: AggregateRoot) -> None:
        for aggregate in aggregates:
            if aggregate is None:
                continue
            if not any(existing is aggregate for existing in self._collected):
                self._collected.append(aggregate)

    def _take_collected(self) -> List[AggregateRoot]:
        collected, self._collected = self._collected, []
        return collected

    def _discard_since(self, mark: int) -> List[AggregateRoot]:
        """Forget what a failed block collected; earlier blocks keep theirs."""
        dropped = self._collected[mark:]
        del self._collected[mark:]
        return dropped

    def _publish(self, aggregates: List[AggregateRoot]) -> List[DispatchResult]:
        if self._registry is None:
            logger.debug(
                f"No subscriber registry; {len(aggregates)} aggregate(s) "
                f"keep their events for the caller to drain"
            )
            return []
        return publish_pending_events(aggregates, self._registry)


class BestEffortUnitOfWork(CollectingUnitOfWork):
    """
    Sequential, non-atomic writes. Each repository call stands alone;
    a failure part-way leaves earlier writes in place.
    """

    def __init__(self, subscriber_registry: Optional[SubscriberRegistry] = None) -> None:
        super().__init__(subscriber_registry)
        self.last_results: List[DispatchResult] = []

    @contextmanager
    def atomic(self) -> Iterator[None]:
        outermost = self._depth == 0
        mark = len(self._collected)
        self._depth += 1
        try:
            yield
        except Exception:
            dropped = self._discard_since(mark)
            logger.warning(
                f"Unit of work block failed; {len(dropped)} aggregate(s) not "
                f"dispatched. Earlier writes were not rolled back."
            )
            raise
        finally:
            self._depth -= 1

        if outermost:
            self.last_results = self._publish(self._take_collected())
