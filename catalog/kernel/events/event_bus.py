"""
In-process event bus.

Operations publish domain events; subscribed handlers run later on a small
pool of worker tasks. ``publish`` only enqueues, so a slow or failing handler
never delays or fails the operation that published.

Guarantees:
- jobs are dispatched in ``publish`` order (completion order is not promised)
- a handler exception or timeout is logged and counted, never re-raised
- one failing handler does not stop other handlers of the same event
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from catalog.kernel.events.event_types import DomainEvent
from catalog.logging_config import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class _Job:
    event: DomainEvent
    handler: EventHandler


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventBus:
    """
    Publish/subscribe over an asyncio queue drained by worker tasks.

    Usage:
        bus = EventBus(workers=4)
        bus.subscribe(ProjectApproved, on_project_approved)
        await bus.start()
        bus.publish(ProjectApproved(...))   # returns immediately
        await bus.join()                     # wait for handlers (tests, shutdown)
        await bus.stop()
    """

    def __init__(self, workers: int = 4, handler_timeout: Optional[float] = 10.0):
        if workers < 1:
            raise ValueError("EventBus needs at least one worker")
        self._worker_count = workers
        self._handler_timeout = handler_timeout
        self._handlers: Dict[Type[Any], List[EventHandler]] = defaultdict(list)
        self._queue: asyncio.Queue[_Job] = asyncio.Queue()
        self._workers: List[asyncio.Task] = []

        self._processed_jobs = 0
        self._failed_jobs = 0

    # ------------------------------------------------------------------
    # Subscription and publication
    # ------------------------------------------------------------------

    def subscribe(self, event_type: Type[Any], handler: EventHandler) -> None:
        """Register ``handler`` for one event variant. Several handlers may share a variant."""
        self._handlers[event_type].append(handler)
        logger.debug(
            "Subscribed %s to %s", _handler_name(handler), event_type.__name__
        )

    def publish(self, event: DomainEvent) -> int:
        """
        Schedule every handler subscribed to the event's variant.

        Does not wait for any handler to run.

        Returns:
            Number of handler jobs scheduled
        """
        handlers = self._handlers.get(type(event), [])
        if not handlers:
            logger.debug("No handlers for %s", event.kind)
            return 0

        for handler in handlers:
            self._queue.put_nowait(_Job(event=event, handler=handler))

        if not self.is_running:
            logger.warning(
                "Event queued while bus is stopped",
                extra={"event_kind": event.kind, "queued_jobs": self._queue.qsize()},
            )
        return len(handlers)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._workers)

    async def start(self) -> None:
        """Spawn the worker tasks on the running loop. Idempotent."""
        if self.is_running:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"event-bus-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info("Event bus started with %d workers", self._worker_count)

    async def join(self) -> None:
        """Wait until every job queued so far has finished. Requires a started bus."""
        await self._queue.join()

    async def stop(self, drain: bool = True) -> None:
        """
        Stop the workers.

        Args:
            drain: finish queued jobs first; otherwise pending jobs are dropped
        """
        if drain and self.is_running:
            await self.join()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info(
            "Event bus stopped",
            extra={"processed_jobs": self._processed_jobs, "failed_jobs": self._failed_jobs},
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._run(job)
            finally:
                self._queue.task_done()

    async def _run(self, job: _Job) -> None:
        event = job.event
        context = {
            "event_kind": event.kind,
            "recipient_id": str(event.recipient_id),
            "handler": _handler_name(job.handler),
        }
        try:
            if self._handler_timeout is not None:
                await asyncio.wait_for(job.handler(event), timeout=self._handler_timeout)
            else:
                await job.handler(event)
            self._processed_jobs += 1
        except asyncio.TimeoutError:
            self._failed_jobs += 1
            logger.error(
                "Event handler timed out after %.1fs",
                self._handler_timeout,
                extra={**context, "event": event.model_dump(mode="json")},
            )
        except Exception:
            self._failed_jobs += 1
            # Full payload logged so the event can be replayed via parse_event()
            logger.exception(
                "Event handler failed",
                extra={**context, "event": event.model_dump(mode="json")},
            )

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def processed_jobs(self) -> int:
        return self._processed_jobs

    @property
    def failed_jobs(self) -> int:
        return self._failed_jobs

    @property
    def pending_jobs(self) -> int:
        return self._queue.qsize()

    def handler_count(self, event_type: Type[Any]) -> int:
        return len(self._handlers.get(event_type, []))
