"""
Publish Lifecycle Controller
Platform optimization + browser upload for one post, with status tracking and cleanup
"""

import os
from datetime import datetime
from typing import Callable, Optional

from ..models.clip import ClipStatus
from ..models.post import PostStatus
from ..utils.exceptions import (
    ClipFileMissingError,
    ClipNotFoundError,
    SocialAccountNotFoundError,
)
from ..utils.logger import get_logger
from .automator import BrowserAutomator
from .publishers import Credentials
from .record_store import RecordStore
from .storage import TempStorage
from .transcoder import Transcoder

logger = get_logger()

AutomatorFactory = Callable[[], BrowserAutomator]


class PublishLifecycle:
    """
    Owns a post's PENDING | SCHEDULED -> POSTING -> POSTED | FAILED transition

    Upload failures come back from the automator as results and are
    recorded here; anything raised escapes to the queue, which calls
    `mark_failed`. The browser session and the optimized file are always
    released.
    """

    def __init__(
        self,
        store: RecordStore,
        storage: TempStorage,
        transcoder: Transcoder,
        automator_factory: AutomatorFactory
    ):
        self.store = store
        self.storage = storage
        self.transcoder = transcoder
        self.automator_factory = automator_factory

    async def run(self, post_id: str):
        post = await self.store.get_post(post_id)
        if post is None:
            logger.warning(f"Post {post_id} vanished before publishing")
            return

        claimed = await self.store.transition_post(
            post.id, [PostStatus.PENDING, PostStatus.SCHEDULED], PostStatus.POSTING
        )
        if not claimed:
            logger.warning(f"Post {post.id} is {post.status.value}, skipping")
            return

        clip = await self.store.get_clip(post.clip_id, user_id=post.user_id)
        if clip is None:
            raise ClipNotFoundError(post.clip_id)
        clip_path = str(self.storage.clip_path(clip.id))
        if clip.status != ClipStatus.COMPLETED or not os.path.exists(clip_path):
            raise ClipFileMissingError(clip.id)

        account = await self.store.get_social_account(post.social_account_id, user_id=post.user_id)
        if account is None:
            raise SocialAccountNotFoundError(post.social_account_id)

        optimized_path: Optional[str] = None
        try:
            optimized_path = await self.transcoder.optimize_for_platform(
                clip_path, account.platform, f"{clip.id}_{account.platform.value}"
            )

            automator = self.automator_factory()
            try:
                await automator.open()
                result = await automator.upload_to(
                    account.platform,
                    optimized_path,
                    post.title,
                    post.description,
                    Credentials(
                        username=account.username,
                        password=account.password,
                        platform=account.platform,
                    ),
                )
            finally:
                await automator.close()
                await self.store.touch_social_account(account.id)
        finally:
            self.storage.remove(optimized_path)

        if result.success:
            await self.store.record_post_result(
                post.id,
                PostStatus.POSTED,
                platform_url=result.platform_url,
                posted_at=datetime.utcnow(),
            )
            logger.info(f"Post {post.id} published to {account.platform.value}: {result.platform_url}")
        else:
            await self.store.record_post_result(
                post.id,
                PostStatus.FAILED,
                error_message=result.error_message,
            )
            logger.warning(f"Post {post.id} failed on {account.platform.value}: {result.error_message}")

    async def mark_failed(self, post_id: str, exc: Exception):
        message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
        await self.store.record_post_result(post_id, PostStatus.FAILED, error_message=message)
        logger.error(f"Post {post_id} failed: {message}")
