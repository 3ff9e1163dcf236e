"""Periodic driver draining the clone check request queue."""

from __future__ import annotations

import asyncio
import enum
from typing import Awaitable, Callable, Iterable

from clone_check.core.config import Settings
from clone_check.core.errors import NotReadyYet, TransientTaskFailure
from clone_check.core.logging import get_logger, task_context
from clone_check.core.metrics import QUEUE_DEPTH, TASKS_TOTAL
from clone_check.scheduler.requests import KloneRequest, RequestQueue

logger = get_logger(__name__)

TaskHandler = Callable[[KloneRequest], Awaitable[bool]]


class Outcome(str, enum.Enum):
    IDLE = "idle"
    SUCCEEDED = "succeeded"
    RETRY = "retry"
    ERROR = "error"
    FAILED = "failed"


class Scheduler:
    """Pop one request per tick, run it, and re-enqueue it when not ready.

    Between pops the driver sleeps ``busy_interval_ms``; after an empty queue
    or an exception it sleeps ``idle_interval_ms``. Requests are retried until
    they succeed unless ``max_attempts`` is configured.
    """

    def __init__(self, handler: TaskHandler, settings: Settings, queue: RequestQueue | None = None) -> None:
        self.handler = handler
        self.settings = settings
        self.queue = queue or RequestQueue()
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def pending(self) -> int:
        return len(self.queue)

    def submit(self, requests: Iterable[KloneRequest]) -> int:
        count = 0
        for request in requests:
            self.queue.push(request)
            count += 1
        QUEUE_DEPTH.set(len(self.queue))
        return count

    async def drain_once(self) -> Outcome:
        left = len(self.queue)
        if left and (left - 1) % self.settings.log_every == 0:
            logger.debug("%d clone requests left", left)

        queued = self.queue.pop()
        if queued is None:
            return Outcome.IDLE
        request, attempts = queued.request, queued.attempts + 1
        try:
            done = await self.handler(request)
        except NotReadyYet as exc:
            logger.debug("%s, retrying later", exc, extra=task_context(task=request.kind, attempt=attempts))
            outcome = self._retry(request, attempts, Outcome.RETRY)
        except Exception as exc:
            failure = TransientTaskFailure(request, exc)
            logger.error(
                "Clone check task failed: %s",
                failure,
                exc_info=exc,
                extra=task_context(task=request.kind, attempt=attempts),
            )
            outcome = self._retry(request, attempts, Outcome.ERROR)
        else:
            outcome = Outcome.SUCCEEDED if done else self._retry(request, attempts, Outcome.RETRY)
        TASKS_TOTAL.labels(kind=request.kind, outcome=outcome.value).inc()
        QUEUE_DEPTH.set(len(self.queue))
        return outcome

    def _retry(self, request: KloneRequest, attempts: int, outcome: Outcome) -> Outcome:
        limit = self.settings.max_attempts
        if limit is not None and attempts >= limit:
            logger.error("Giving up on %r after %d attempts", request, attempts)
            return Outcome.FAILED
        self.queue.push(request, attempts)
        return outcome

    def _delay_after(self, outcome: Outcome) -> float:
        if outcome in (Outcome.IDLE, Outcome.ERROR):
            return self.settings.idle_interval_ms / 1000
        return self.settings.busy_interval_ms / 1000

    async def run(self) -> None:
        if await self._sleep(self.settings.initial_delay_ms / 1000):
            return
        while True:
            outcome = await self.drain_once()
            if await self._sleep(self._delay_after(outcome)):
                return

    async def _sleep(self, seconds: float) -> bool:
        """Sleep unless asked to stop; return True when stopping."""
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.get_running_loop().create_task(self.run(), name="clone-check-scheduler")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None


__all__ = ["Scheduler", "Outcome", "TaskHandler"]
