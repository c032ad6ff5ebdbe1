"""Background queue for registry notifications, using Redis lists.

The API process is the producer: after a write commits, the
EventPublisher enqueues the notification payload and returns.  The worker
process (credential_registry.worker) is the consumer.

  Producer: LPUSH onto tasks:<queue>  (head)
  Consumer: BRPOP from tasks:<queue>  (tail)

Head-in, tail-out gives FIFO, so consumers see notifications in commit
order for a single API process.

Delivery is at-most-once: a worker that crashes mid-task loses that
notification.  The registry state itself is unaffected; a consumer that
needs every notification can rebuild from the read endpoints.
"""

from __future__ import annotations

import json
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from credential_registry.db.redis import redis_pool

REGISTRY_EVENTS_QUEUE = "registry_events"
DEFAULT_IN_MEMORY_MAXLEN = 1000


@dataclass(frozen=True, slots=True)
class Task:
    """A unit of background work.

    id:      Unique identifier for tracking and logging.
    queue:   Queue the task was pushed onto.
    payload: JSON-serializable body (a notification's to_payload()).
    """

    id: str
    queue: str
    payload: dict


@runtime_checkable
class TaskQueue(Protocol):
    async def enqueue(self, queue: str, payload: dict) -> Task: ...
    async def dequeue(self, queue: str, timeout: int = 0) -> Task | None: ...
    async def queue_length(self, queue: str) -> int: ...


class InMemoryTaskQueue:
    """In-memory task queue for dev and tests.

    Without Redis the worker runs in another process and never sees this
    queue, so each list is capped at `maxlen`; past that the oldest task
    is dropped.
    """

    def __init__(self, maxlen: int = DEFAULT_IN_MEMORY_MAXLEN) -> None:
        self._maxlen = maxlen
        self._queues: dict[str, deque[Task]] = {}

    async def enqueue(self, queue: str, payload: dict) -> Task:
        task = Task(id=str(uuid.uuid4()), queue=queue, payload=payload)
        self._queues.setdefault(queue, deque(maxlen=self._maxlen)).append(task)
        return task

    async def dequeue(self, queue: str, timeout: int = 0) -> Task | None:
        tasks = self._queues.get(queue)
        if tasks:
            return tasks.popleft()
        return None

    async def queue_length(self, queue: str) -> int:
        return len(self._queues.get(queue, []))


class RedisTaskQueue:
    """Redis-backed task queue using LPUSH/BRPOP."""

    _PREFIX = "tasks:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def enqueue(self, queue: str, payload: dict) -> Task:
        task = Task(id=str(uuid.uuid4()), queue=queue, payload=payload)
        task_json = json.dumps(
            {
                "id": task.id,
                "queue": task.queue,
                "payload": task.payload,
            }
        )
        await self._redis.lpush(f"{self._PREFIX}{queue}", task_json)
        return task

    async def dequeue(self, queue: str, timeout: int = 5) -> Task | None:
        # Blocks up to `timeout` seconds; None when nothing arrived.
        result = await self._redis.brpop(f"{self._PREFIX}{queue}", timeout=timeout)
        if result is None:
            return None
        _, task_json = result
        data = json.loads(task_json)
        return Task(**data)

    async def queue_length(self, queue: str) -> int:
        return await self._redis.llen(f"{self._PREFIX}{queue}")


if redis_pool is not None:
    task_queue: TaskQueue = RedisTaskQueue(redis_pool)
else:
    task_queue = InMemoryTaskQueue()
