"""
Post Scheduler
Dispatches scheduled posts to the publish queue once they are due
"""

import asyncio
from datetime import datetime
from typing import Optional

from ..utils.logger import get_logger
from .job_queue import JobQueue
from .record_store import RecordStore

logger = get_logger()


class PostScheduler:
    """Polls for due SCHEDULED posts and enqueues them for publishing"""

    def __init__(self, store: RecordStore, queue: JobQueue, check_interval: int = 60):
        self.store = store
        self.queue = queue
        self.check_interval = check_interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Start the background scheduler"""
        if self.running:
            logger.warning("Scheduler already running")
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Scheduler started (interval: {self.check_interval}s)")

    async def stop(self):
        """Stop the background scheduler"""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Scheduler stopped")

    async def _loop(self):
        while True:
            try:
                await self.dispatch_due()
            except Exception as exc:
                logger.exception(f"Scheduler error: {exc}")
            await asyncio.sleep(self.check_interval)

    async def dispatch_due(self, now: Optional[datetime] = None) -> int:
        """Enqueue every post whose scheduled time has passed"""
        due_posts = await self.store.list_due_posts(now)
        dispatched = 0
        for post in due_posts:
            if self.queue.is_in_flight(post.id):
                continue
            if not await self.queue.enqueue(post.id):
                logger.warning("Publish queue full, deferring remaining scheduled posts")
                break
            dispatched += 1

        if dispatched:
            logger.info(f"Dispatched {dispatched} scheduled post(s)")
        return dispatched
