"""
Front Office Django Adapter — Transactional Unit of Work
========================================================
Runs an orchestration inside django.db.transaction.atomic() and
dispatches the collected aggregates' events via
transaction.on_commit(), so subscribers hear only what committed.

Nested atomic() blocks are savepoints inside the outermost
transaction, and the outermost block schedules the dispatch. A
nested block that rolls back forgets the aggregates it collected.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from django.db import transaction

from core.events.registry import SubscriberRegistry
from core.primitives.entity import AggregateRoot
from engines.front_office.unit_of_work import CollectingUnitOfWork

logger = logging.getLogger("front_office.uow")


class DjangoUnitOfWork(CollectingUnitOfWork):
    def __init__(
        self,
        subscriber_registry: Optional[SubscriberRegistry] = None,
        using: Optional[str] = None,
    ) -> None:
        super().__init__(subscriber_registry)
        self._using = using

    @contextmanager
    def atomic(self) -> Iterator[None]:
        outermost = self._depth == 0
        mark = len(self._collected)
        self._depth += 1
        try:
            with transaction.atomic(using=self._using):
                yield
                if outermost:
                    collected = self._take_collected()
                    transaction.on_commit(
                        lambda: self._dispatch_after_commit(collected),
                        using=self._using,
                    )
        except Exception:
            dropped = self._discard_since(mark)
            logger.warning(
                f"{'Transaction' if outermost else 'Savepoint'} rolled back; "
                f"{len(dropped)} aggregate(s) not dispatched."
            )
            raise
        finally:
            self._depth -= 1

    def _dispatch_after_commit(self, aggregates: List[AggregateRoot]) -> None:
        """
        Called via transaction.on_commit(). Dispatch failure must
        NEVER affect the committed writes.
        """
        try:
            self._publish(aggregates)
        except Exception as exc:
            logger.error(
                f"Post-commit dispatch failed for {len(aggregates)} "
                f"aggregate(s): {exc}",
                exc_info=True,
            )
