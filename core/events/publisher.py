"""
Front Office Event Bus — Aggregate Event Publisher
==================================================
Drains the event buffers of aggregates that have been persisted.

Order:
- aggregates in the order given
- within an aggregate, events in the order they were raised

Each aggregate's buffer is cleared after its events are handed
to the dispatcher. Call this only after the writes are committed.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from core.events.dispatcher import DispatchResult, dispatch
from core.events.registry import SubscriberRegistry
from core.primitives.entity import AggregateRoot

logger = logging.getLogger("front_office.events")


def publish_pending_events(
    aggregates: Iterable[AggregateRoot],
    registry: SubscriberRegistry,
) -> List[DispatchResult]:
    """
    Dispatch and clear every buffered event.

    Returns the dispatch result of each event, in dispatch order.
    Aggregates appearing more than once are drained once.
    """
    results: List[DispatchResult] = []
    seen: set = set()

    for aggregate in aggregates:
        if id(aggregate) in seen:
            continue
        seen.add(id(aggregate))

        events = aggregate.domain_events
        for event in events:
            results.append(dispatch(event, registry))
        aggregate.clear_domain_events()

        if events:
            logger.debug(
                f"Published {len(events)} event(s) from "
                f"{type(aggregate).__name__} {aggregate.id}"
            )

    return results
