from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from services.floorplan.app.logging import logger
from services.floorplan.app.observability import JOB_EVENTS_TOTAL, JOB_LATENCY


@dataclass
class Job:
    name: str
    data: dict[str, Any] = field(default_factory=dict)
    # Carried for producers; workers drain strictly FIFO.
    priority: int = 0


JobProcessor = Callable[[Job], Awaitable[None]]


class Notifier(Protocol):
    def notify(self, job: Job) -> None: ...


class NullNotifier:
    """Used when no workers are configured: notifications are discarded at the source."""

    def notify(self, job: Job) -> None:
        logger.debug("job_discarded", job=job.name, reason="no_workers")


async def log_job(job: Job) -> None:
    # Placeholder side effect; real consumers pass their own processor to JobQueue.
    logger.info("job_processing", job=job.name, data=job.data)


class JobQueue:
    """
    Bounded in-memory queue drained by a fixed number of worker tasks.

    Enqueue never blocks: a full queue drops the job. A job whose processing exceeds
    `timeout_s` is abandoned. Nothing is retried or persisted.
    """

    def __init__(
        self,
        *,
        capacity: int = 100,
        workers: int = 1,
        timeout_s: float = 10.0,
        processor: JobProcessor = log_job,
    ):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self._queue: asyncio.Queue[Job] = asyncio.Queue(maxsize=capacity)
        self._workers = workers
        self._timeout_s = timeout_s
        self._processor = processor
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    def qsize(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def notify(self, job: Job) -> None:
        self.enqueue(job)

    def enqueue(self, job: Job) -> bool:
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            JOB_EVENTS_TOTAL.labels(job.name, "dropped").inc()
            logger.warning("job_dropped", job=job.name, reason="queue_full", capacity=self.capacity)
            return False
        JOB_EVENTS_TOTAL.labels(job.name, "enqueued").inc()
        logger.info("job_enqueued", job=job.name, queued=self._queue.qsize())
        return True

    def start(self) -> None:
        if self.running:
            return
        self._tasks = [asyncio.create_task(self._work(i), name=f"job-worker-{i}") for i in range(self._workers)]

    async def stop(self) -> None:
        for t in self._tasks:
            t.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        dropped = self._queue.qsize()
        if dropped:
            logger.warning("job_queue_stopped", pending_discarded=dropped)

    async def join(self) -> None:
        """Wait until every job enqueued so far has been processed, dropped or timed out."""
        await self._queue.join()

    async def _work(self, worker_id: int) -> None:
        logger.info("job_worker_started", worker_id=worker_id)
        while True:
            job = await self._queue.get()
            try:
                await self._process(job, worker_id)
            finally:
                self._queue.task_done()

    async def _process(self, job: Job, worker_id: int) -> None:
        start = time.perf_counter()
        try:
            await asyncio.wait_for(self._processor(job), timeout=self._timeout_s)
        except TimeoutError:
            JOB_EVENTS_TOTAL.labels(job.name, "timed_out").inc()
            logger.warning("job_timed_out", job=job.name, worker_id=worker_id, timeout_s=self._timeout_s)
        except Exception:  # noqa: BLE001
            JOB_EVENTS_TOTAL.labels(job.name, "failed").inc()
            logger.exception("job_failed", job=job.name, worker_id=worker_id)
        else:
            JOB_LATENCY.labels(job.name).observe((time.perf_counter() - start) * 1000)
            JOB_EVENTS_TOTAL.labels(job.name, "processed").inc()
            logger.info("job_processed", job=job.name, worker_id=worker_id)
