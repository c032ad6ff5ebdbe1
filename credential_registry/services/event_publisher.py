"""Notification fan-out for committed registry writes.

The registry calls publish() only after its store transaction has
committed, so every notification corresponds to a durable change.  Each
event goes to:

  1. in-process subscribers (plain callables, invoked synchronously in
     subscription order), and
  2. the registry_events background queue, for the worker process.

A subscriber that raises is logged and skipped, and so is a failed queue
push (Redis down).  Neither can undo the write that already happened, so
publish() never raises: the caller still gets its result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from credential_registry.core.metrics import EVENTS_PUBLISHED
from credential_registry.models.events import RegistryEvent
from credential_registry.services.task_queue import (
    REGISTRY_EVENTS_QUEUE,
    TaskQueue,
)

logger = logging.getLogger(__name__)

Subscriber = Callable[[RegistryEvent], None]


class EventPublisher:
    def __init__(self, queue: TaskQueue) -> None:
        self._queue = queue
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    async def publish(self, event: RegistryEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on %s", callback, event.event_name
                )

        try:
            await self._queue.enqueue(REGISTRY_EVENTS_QUEUE, event.to_payload())
        except Exception:
            logger.exception(
                "Queue push failed for %s; worker will not see it", event.event_name
            )
            return

        EVENTS_PUBLISHED.labels(event=event.event_name).inc()
        logger.debug("Published %s", event.event_name)
