"""Notification worker.

RUN:  python -m credential_registry.worker

Drains the registry_events queue and hands each notification to the
handler registered for its event name.  The API has already committed
the write by the time a notification is queued, so handlers are for
downstream effects only (indexers, webhooks, mail); a handler failure is
logged and never touches registry state.

Same image as the API, different command:
  api:    uvicorn credential_registry.main:app --host 0.0.0.0 --port 8000
  worker: python -m credential_registry.worker
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from credential_registry.core.config import SETTINGS
from credential_registry.core.logging import setup_logging
from credential_registry.core.metrics import QUEUE_DEPTH
from credential_registry.services.task_queue import (
    REGISTRY_EVENTS_QUEUE,
    Task,
    TaskQueue,
    task_queue,
)

EventHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("worker")


# ---------------------------------------------------------------------------
# Handler registry
# ---------------------------------------------------------------------------

HANDLERS: dict[str, EventHandler] = {}


def register_handler(event_name: str):
    """Decorator: register a coroutine as the handler for an event name."""

    def decorator(func):
        HANDLERS[event_name] = func
        return func

    return decorator


@register_handler("TypeRegistered")
async def handle_type_registered(payload: dict) -> None:
    logger.info(
        "TypeRegistered type_id=%s name=%r creator=%s",
        payload.get("type_id"),
        payload.get("name"),
        payload.get("creator"),
    )


@register_handler("CredentialAssigned")
async def handle_credential_assigned(payload: dict) -> None:
    logger.info(
        "CredentialAssigned recipient=%s type_id=%s metadata_hash=%s issuer=%s",
        payload.get("recipient"),
        payload.get("type_id"),
        payload.get("metadata_hash"),
        payload.get("issuer"),
    )


# ---------------------------------------------------------------------------
# Dispatch loop
# ---------------------------------------------------------------------------


async def process_task(task: Task) -> bool:
    """Dispatch one queued notification.  Returns True if a handler ran OK."""
    event_name = task.payload.get("event")
    handler = HANDLERS.get(event_name) if isinstance(event_name, str) else None
    if handler is None:
        logger.warning("Task %s has no handler for event=%r", task.id, event_name)
        return False

    try:
        await handler(task.payload)
    except Exception:
        # No dead-letter queue; the failure is logged and the loop moves on.
        logger.exception("Task %s (%s) failed", task.id, event_name)
        return False

    logger.debug("Task %s (%s) completed", task.id, event_name)
    return True


async def run_worker(queue: TaskQueue = task_queue) -> None:
    logger.info(
        "Worker started, listening on %s for %s",
        REGISTRY_EVENTS_QUEUE,
        sorted(HANDLERS),
    )

    while True:
        task = await queue.dequeue(REGISTRY_EVENTS_QUEUE, timeout=1)
        QUEUE_DEPTH.labels(queue_name=REGISTRY_EVENTS_QUEUE).set(
            await queue.queue_length(REGISTRY_EVENTS_QUEUE)
        )
        if task is None:
            # In-memory queue returns immediately; avoid a hot loop.
            await asyncio.sleep(0.5)
            continue
        await process_task(task)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
