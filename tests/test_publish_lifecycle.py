import pytest

from clipforge.models.clip import ClipStatus
from clipforge.models.post import Post, PostStatus
from clipforge.models.social_account import Platform
from clipforge.services.publishers import TikTokPublisher, UploadResult

from conftest import FakePage, add_account, add_clip, add_video, make_page_automator


async def _completed_clip(pipeline, with_file=True):
    video = await add_video(pipeline.store)
    clip = await add_clip(pipeline.store, video, status=ClipStatus.COMPLETED, description="Watch till the end")
    if with_file:
        pipeline.storage.clip_path(clip.id).write_bytes(b"clip")
    return clip


async def _post(pipeline, clip, account, status=PostStatus.PENDING):
    post = Post(
        clip_id=clip.id,
        social_account_id=account.id,
        user_id=clip.user_id,
        title=clip.title,
        description=clip.description,
        status=status,
    )
    return await pipeline.store.create_post(post)


async def _publish(pipeline, post):
    assert await pipeline.publish_queue.enqueue(post.id)
    await pipeline.publish_queue.join()
    return await pipeline.store.get_post(post.id)


@pytest.mark.asyncio
async def test_successful_publish_records_url(pipeline, fake_automator):
    clip = await _completed_clip(pipeline)
    account = await add_account(pipeline.store, Platform.TIKTOK)
    post = await _post(pipeline, clip, account)

    published = await _publish(pipeline, post)

    assert published.status == PostStatus.POSTED
    assert published.platform_url == "https://www.tiktok.com/@demo/video/1"
    assert published.posted_at is not None
    assert published.error_message is None

    upload = fake_automator.uploads[0]
    assert upload["platform"] == Platform.TIKTOK
    assert upload["file_existed"]
    assert upload["file_path"].endswith(f"optimized_tiktok_{clip.id}_TIKTOK.mp4")
    assert upload["description"] == "Watch till the end"
    assert upload["username"] == "creator"
    assert fake_automator.opened == fake_automator.closed == 1
    assert list(pipeline.storage.root.glob("optimized_*")) == []
    assert (await pipeline.store.get_social_account(account.id)).last_used is not None


@pytest.mark.asyncio
async def test_missing_clip_file_fails_without_automator(pipeline, fake_automator):
    clip = await _completed_clip(pipeline, with_file=False)
    account = await add_account(pipeline.store)
    post = await _post(pipeline, clip, account)

    failed = await _publish(pipeline, post)

    assert failed.status == PostStatus.FAILED
    assert failed.error_message.startswith("Clip file not found")
    assert fake_automator.opened == 0
    assert fake_automator.uploads == []


@pytest.mark.asyncio
async def test_rejected_upload_marks_post_failed(pipeline, fake_automator):
    fake_automator.result = UploadResult(success=False, error_message="publish: timed out")
    clip = await _completed_clip(pipeline)
    account = await add_account(pipeline.store, Platform.INSTAGRAM)
    post = await _post(pipeline, clip, account)

    failed = await _publish(pipeline, post)

    assert failed.status == PostStatus.FAILED
    assert failed.error_message == "publish: timed out"
    assert failed.platform_url is None
    assert fake_automator.closed == 1
    assert list(pipeline.storage.root.glob("optimized_*")) == []
    assert (await pipeline.store.get_social_account(account.id)).last_used is not None


@pytest.mark.asyncio
async def test_optimize_failure_cleans_up_and_skips_upload(pipeline, fake_automator, fake_ffmpeg):
    fake_ffmpeg.fail_on = "optimized_"
    clip = await _completed_clip(pipeline)
    account = await add_account(pipeline.store)
    post = await _post(pipeline, clip, account)

    failed = await _publish(pipeline, post)

    assert failed.status == PostStatus.FAILED
    assert fake_automator.uploads == []
    assert list(pipeline.storage.root.glob("optimized_*")) == []


@pytest.mark.asyncio
async def test_login_timeout_fails_post_and_updates_last_used(pipeline, settings):
    page = FakePage(signed_in=False, timeout_selectors={TikTokPublisher.signed_in_selector})
    pipeline.publishing.automator_factory = lambda: make_page_automator(settings, page)
    clip = await _completed_clip(pipeline)
    account = await add_account(pipeline.store, Platform.TIKTOK)
    post = await _post(pipeline, clip, account)

    failed = await _publish(pipeline, post)

    assert failed.status == PostStatus.FAILED
    assert failed.error_message.startswith("login")
    assert "timed out" in failed.error_message
    assert TikTokPublisher.login_url in page.visited
    assert page.filled[TikTokPublisher.password_selector] == "hunter2"
    assert (await pipeline.store.get_social_account(account.id)).last_used is not None


@pytest.mark.asyncio
async def test_post_already_published_is_left_alone(pipeline, fake_automator):
    clip = await _completed_clip(pipeline)
    account = await add_account(pipeline.store)
    post = await _post(pipeline, clip, account, status=PostStatus.POSTED)

    unchanged = await _publish(pipeline, post)

    assert unchanged.status == PostStatus.POSTED
    assert fake_automator.opened == 0
