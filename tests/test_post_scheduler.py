from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from clipforge.models.clip import ClipStatus
from clipforge.models.post import Post, PostStatus
from clipforge.services.post_scheduler import PostScheduler

from conftest import add_account, add_clip, add_video


class _RecordingQueue:
    def __init__(self, capacity: int = 10, in_flight=()):
        self.capacity = capacity
        self.in_flight = set(in_flight)
        self.enqueued = []

    def is_in_flight(self, job_id):
        return job_id in self.in_flight

    async def enqueue(self, job_id):
        if len(self.enqueued) >= self.capacity:
            return False
        self.enqueued.append(job_id)
        return True


async def _scheduled_post(store, clip, account, minutes_from_now):
    post = Post(
        clip_id=clip.id,
        social_account_id=account.id,
        user_id=clip.user_id,
        title=clip.title,
        status=PostStatus.SCHEDULED,
        scheduled_at=datetime.utcnow() + timedelta(minutes=minutes_from_now),
    )
    return await store.create_post(post)


@pytest_asyncio.fixture
async def scheduled(store):
    video = await add_video(store)
    clip = await add_clip(store, video, status=ClipStatus.COMPLETED)
    account = await add_account(store)
    older = await _scheduled_post(store, clip, account, -30)
    newer = await _scheduled_post(store, clip, account, -1)
    future = await _scheduled_post(store, clip, account, 60)
    return older, newer, future


@pytest.mark.asyncio
async def test_dispatches_due_posts_oldest_first(store, scheduled):
    older, newer, _ = scheduled
    queue = _RecordingQueue()

    dispatched = await PostScheduler(store, queue).dispatch_due()

    assert dispatched == 2
    assert queue.enqueued == [older.id, newer.id]


@pytest.mark.asyncio
async def test_skips_posts_already_in_flight(store, scheduled):
    older, newer, _ = scheduled
    queue = _RecordingQueue(in_flight={older.id})

    assert await PostScheduler(store, queue).dispatch_due() == 1
    assert queue.enqueued == [newer.id]


@pytest.mark.asyncio
async def test_stops_when_queue_is_full(store, scheduled):
    older, _, _ = scheduled
    queue = _RecordingQueue(capacity=1)

    assert await PostScheduler(store, queue).dispatch_due() == 1
    assert queue.enqueued == [older.id]


@pytest.mark.asyncio
async def test_scheduled_post_is_published_by_pipeline(pipeline, fake_automator):
    video = await add_video(pipeline.store)
    clip = await add_clip(pipeline.store, video, status=ClipStatus.COMPLETED)
    pipeline.storage.clip_path(clip.id).write_bytes(b"clip")
    account = await add_account(pipeline.store)
    post = await _scheduled_post(pipeline.store, clip, account, -1)

    assert await pipeline.scheduler.dispatch_due() == 1
    await pipeline.publish_queue.join()

    assert (await pipeline.store.get_post(post.id)).status == PostStatus.POSTED
    assert len(fake_automator.uploads) == 1


@pytest.mark.asyncio
async def test_start_and_stop(store):
    scheduler = PostScheduler(store, _RecordingQueue(), check_interval=3600)

    scheduler.start()
    assert scheduler.running
    await scheduler.stop()
    assert not scheduler.running
