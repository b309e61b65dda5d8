"""Best-effort remote mirroring of event sessions."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from snap_merch.domain.sessions import CarSession, EventSession, GeneratedStyle, Order

_logger = logging.getLogger(__name__)


class EventMirrorRepository(Protocol):
    """Persistence interface for the remote copy of event sessions."""

    def upsert_event(self, session: EventSession, user_id: str) -> None:
        """Insert or update an event row."""

    def upsert_car(self, car: CarSession, event_id: str) -> None:
        """Insert or update a car row."""

    def upsert_style(self, car_id: str, style: GeneratedStyle) -> None:
        """Insert or update a style row keyed by car and style id."""

    def upsert_order(self, order: Order) -> None:
        """Insert or update an order row."""

    def load_event(self, user_id: str, day: str) -> EventSession | None:
        """Return the latest event for a user and day, if present."""


@dataclass(frozen=True)
class SyncJob:
    label: str
    run: Callable[[], None]


class RemoteSyncQueue:
    """Bounded background queue that retries sync jobs and then gives up.

    Jobs are blocking callables executed in a worker thread. When the queue is
    full the oldest job is dropped; every job is a full idempotent upsert, so a
    later job for the same event supersedes it.
    """

    def __init__(
        self,
        max_size: int = 32,
        retry_attempts: int = 2,
        retry_delay_seconds: float = 1.0,
    ) -> None:
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self._queue: asyncio.Queue[SyncJob] = asyncio.Queue(maxsize=max_size)
        self._worker: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, label: str, run: Callable[[], None]) -> None:
        """Enqueue a job without waiting."""
        job = SyncJob(label=label, run=run)
        if self._queue.full():
            dropped = self._queue.get_nowait()
            self._queue.task_done()
            _logger.warning("Sync queue full, dropping %s", dropped.label)
        self._queue.put_nowait(job)

    def start(self) -> None:
        """Start the background worker on the running loop."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run_forever())

    async def close(self) -> None:
        """Stop the background worker."""
        if self._worker is None:
            return
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

    async def drain(self) -> None:
        """Process every queued job in the calling task."""
        while not self._queue.empty():
            job = self._queue.get_nowait()
            try:
                await self._process(job)
            finally:
                self._queue.task_done()

    async def _run_forever(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._process(job)
            finally:
                self._queue.task_done()

    async def _process(self, job: SyncJob) -> bool:
        attempt = 0
        while True:
            try:
                await asyncio.to_thread(job.run)
            except Exception as exc:
                attempt += 1
                if attempt > self.retry_attempts:
                    _logger.warning(
                        "Remote sync %s failed after %s attempts: %s",
                        job.label,
                        attempt,
                        exc,
                    )
                    return False
                _logger.info(
                    "Remote sync %s failed (attempt %s/%s): %s",
                    job.label,
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                await asyncio.sleep(self.retry_delay_seconds)
            else:
                return True


def mirror_event_session(
    repository: EventMirrorRepository, session: EventSession, user_id: str
) -> None:
    """Upsert an event, its cars, their started styles and their orders."""
    repository.upsert_event(session, user_id)
    for car in session.cars:
        repository.upsert_car(car, session.id)
        for style in car.styles:
            if style.status == "idle":
                continue
            repository.upsert_style(car.id, style)
        for order in car.orders:
            repository.upsert_order(order)


@dataclass
class EventMirror:
    """Schedules remote upserts and performs remote hydration."""

    repository: EventMirrorRepository
    queue: RemoteSyncQueue

    def schedule_event_sync(self, session: EventSession, user_id: str) -> None:
        self.queue.submit(
            f"event:{session.id}",
            lambda: mirror_event_session(self.repository, session, user_id),
        )

    def schedule_order_sync(self, order: Order) -> None:
        self.queue.submit(
            f"order:{order.id}", lambda: self.repository.upsert_order(order)
        )

    async def load_event_session(self, user_id: str, day: str) -> EventSession | None:
        """Load an event from the remote store, or None on any failure."""
        try:
            return await asyncio.to_thread(self.repository.load_event, user_id, day)
        except Exception:
            _logger.warning("Remote event load failed", exc_info=True)
            return None
