"""
Job Queue Service
Bounded async queue with worker concurrency, backpressure and a failure boundary.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set

from ..utils.logger import get_logger

logger = get_logger()

JobProcessor = Callable[[str], Awaitable[None]]
FailureHandler = Callable[[str, Exception], Awaitable[None]]


class JobQueue:
    """Worker queue for processing jobs with controlled concurrency.

    A job id stays marked in flight from enqueue until its run finishes,
    so the same record can never be processed by two workers at once.
    When the processor raises, the failure handler is invoked exactly once
    for that run.
    """

    def __init__(self, name: str = "jobs"):
        self.name = name
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=10)
        self._workers: list[asyncio.Task] = []
        self._processor: Optional[JobProcessor] = None
        self._failure_handler: Optional[FailureHandler] = None
        self._running = False
        self._worker_count = 1
        self._max_pending = 10
        self._queued_ids: Set[str] = set()
        self._active_ids: Set[str] = set()

    def configure(
        self,
        processor: JobProcessor,
        worker_count: int,
        max_pending: int,
        failure_handler: Optional[FailureHandler] = None
    ):
        """Configure queue processor and capacity before start."""
        if self._running:
            return

        self._processor = processor
        self._failure_handler = failure_handler
        self._worker_count = max(1, worker_count)
        self._max_pending = max(1, max_pending)
        self._queue = asyncio.Queue(maxsize=self._max_pending)

    async def start(self):
        """Start worker tasks."""
        if self._running:
            return
        if self._processor is None:
            raise RuntimeError(f"JobQueue '{self.name}' processor is not configured")

        self._running = True
        self._workers = [
            asyncio.create_task(self._worker_loop(index + 1))
            for index in range(self._worker_count)
        ]
        logger.info(
            f"Job queue '{self.name}' started "
            f"(workers={self._worker_count}, max_pending={self._max_pending})"
        )

    async def stop(self):
        """Stop worker tasks after the jobs already queued have run."""
        if not self._running:
            return

        self._running = False
        for _ in self._workers:
            await self._queue.put(None)

        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()
        self._queued_ids.clear()
        self._active_ids.clear()
        logger.info(f"Job queue '{self.name}' stopped")

    async def enqueue(self, job_id: str) -> bool:
        """Enqueue a job if capacity allows."""
        if not self._running:
            raise RuntimeError(f"Job queue '{self.name}' is not running")

        if self.is_in_flight(job_id):
            return True

        if self._queue.full():
            return False

        self._queued_ids.add(job_id)
        await self._queue.put(job_id)
        return True

    def is_in_flight(self, job_id: str) -> bool:
        """True while a job is waiting in the queue or running."""
        return job_id in self._queued_ids or job_id in self._active_ids

    def can_accept(self) -> bool:
        """Check if queue has free pending capacity."""
        return not self._queue.full()

    async def join(self):
        """Wait until every queued job has been processed."""
        await self._queue.join()

    def stats(self) -> dict:
        """Current queue statistics."""
        return {
            "name": self.name,
            "pending": self._queue.qsize(),
            "active": len(self._active_ids),
            "max_pending": self._max_pending,
            "workers": self._worker_count,
            "running": self._running,
        }

    async def _worker_loop(self, worker_id: int):
        while True:
            job_id = await self._queue.get()
            if job_id is None:
                self._queue.task_done()
                return

            self._queued_ids.discard(job_id)
            self._active_ids.add(job_id)
            try:
                await self._processor(job_id)  # type: ignore[misc]
            except Exception as exc:
                logger.exception(f"[{self.name}] worker {worker_id} failed job {job_id}: {exc}")
                await self._handle_failure(job_id, exc)
            finally:
                self._active_ids.discard(job_id)
                self._queue.task_done()

    async def _handle_failure(self, job_id: str, exc: Exception):
        if self._failure_handler is None:
            return
        try:
            await self._failure_handler(job_id, exc)
        except Exception as handler_exc:
            logger.exception(
                f"[{self.name}] failure handler raised for job {job_id}: {handler_exc}"
            )
