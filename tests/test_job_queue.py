import asyncio

import pytest

from clipforge.services.job_queue import JobQueue
from clipforge.services.locks import KeyedLock


@pytest.mark.asyncio
async def test_failure_handler_called_once_per_failed_job():
    processed = []
    failures = []

    async def processor(job_id):
        if job_id == "bad":
            raise RuntimeError("boom")
        processed.append(job_id)

    async def on_failure(job_id, exc):
        failures.append((job_id, str(exc)))

    queue = JobQueue("test")
    queue.configure(processor, worker_count=2, max_pending=10, failure_handler=on_failure)
    await queue.start()
    for job_id in ("a", "bad", "b"):
        assert await queue.enqueue(job_id)
    await queue.join()
    await queue.stop()

    assert sorted(processed) == ["a", "b"]
    assert failures == [("bad", "boom")]


@pytest.mark.asyncio
async def test_failing_failure_handler_does_not_stop_workers():
    processed = []

    async def processor(job_id):
        if job_id == "bad":
            raise RuntimeError("boom")
        processed.append(job_id)

    async def on_failure(job_id, exc):
        raise RuntimeError("handler broke")

    queue = JobQueue("test")
    queue.configure(processor, worker_count=1, max_pending=10, failure_handler=on_failure)
    await queue.start()
    await queue.enqueue("bad")
    await queue.enqueue("good")
    await queue.join()
    await queue.stop()

    assert processed == ["good"]


@pytest.mark.asyncio
async def test_enqueue_returns_false_when_full():
    started = asyncio.Event()
    release = asyncio.Event()

    async def processor(job_id):
        started.set()
        await release.wait()

    queue = JobQueue("test")
    queue.configure(processor, worker_count=1, max_pending=1)
    await queue.start()

    assert await queue.enqueue("running")
    await started.wait()
    assert await queue.enqueue("waiting")
    assert not queue.can_accept()
    assert await queue.enqueue("rejected") is False

    release.set()
    await queue.join()
    await queue.stop()


@pytest.mark.asyncio
async def test_in_flight_job_is_not_queued_twice():
    calls = []
    release = asyncio.Event()

    async def processor(job_id):
        calls.append(job_id)
        await release.wait()

    queue = JobQueue("test")
    queue.configure(processor, worker_count=2, max_pending=5)
    await queue.start()

    assert await queue.enqueue("clip-1")
    assert await queue.enqueue("clip-1")
    assert queue.is_in_flight("clip-1")

    release.set()
    await queue.join()
    assert calls == ["clip-1"]
    assert not queue.is_in_flight("clip-1")
    await queue.stop()


@pytest.mark.asyncio
async def test_enqueue_before_start_raises():
    async def processor(job_id):
        pass

    queue = JobQueue("test")
    queue.configure(processor, worker_count=1, max_pending=1)

    with pytest.raises(RuntimeError):
        await queue.enqueue("job")


@pytest.mark.asyncio
async def test_stats_reports_configuration():
    async def processor(job_id):
        pass

    queue = JobQueue("clips")
    queue.configure(processor, worker_count=3, max_pending=7)
    await queue.start()
    stats = queue.stats()
    await queue.stop()

    assert stats["name"] == "clips"
    assert stats["workers"] == 3
    assert stats["max_pending"] == 7
    assert stats["running"] is True


@pytest.mark.asyncio
async def test_keyed_lock_serializes_same_key():
    locks = KeyedLock()
    order = []

    async def task(name, key):
        async with locks.hold(key):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(task("a", "video:1"), task("b", "video:1"))

    assert order in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])
    assert not locks.is_locked("video:1")
    assert locks._locks == {}


@pytest.mark.asyncio
async def test_keyed_lock_allows_different_keys_concurrently():
    locks = KeyedLock()
    both_inside = asyncio.Event()
    inside = []

    async def task(key):
        async with locks.hold(key):
            inside.append(key)
            if len(inside) == 2:
                both_inside.set()
            await asyncio.wait_for(both_inside.wait(), timeout=1)

    await asyncio.gather(task("video:1"), task("video:2"))

    assert sorted(inside) == ["video:1", "video:2"]
