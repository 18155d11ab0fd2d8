"""
Posts Router
Publishes clips to social accounts, immediately or at a scheduled time.
"""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth import get_current_user
from ..models.clip import ClipStatus
from ..models.post import Post, PostCreate, PostStatus
from ..pipeline import Pipeline, get_pipeline
from ..utils.exceptions import (
    ClipNotFoundError,
    InvalidStateError,
    PostNotFoundError,
    QueueFullError,
    SocialAccountNotFoundError,
)
from ..utils.logger import get_logger

router = APIRouter(prefix="/api", tags=["posts"])
logger = get_logger()


def _to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@router.post("/upload", response_model=Post, status_code=status.HTTP_201_CREATED)
async def upload_clip(
    request: PostCreate,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Publish a completed clip to a connected account."""
    clip = await pipeline.store.get_clip(request.clip_id, user_id=user_id)
    if clip is None:
        raise ClipNotFoundError(request.clip_id)
    account = await pipeline.store.get_social_account(request.social_account_id, user_id=user_id)
    if account is None:
        raise SocialAccountNotFoundError(request.social_account_id)

    if clip.status != ClipStatus.COMPLETED:
        raise InvalidStateError(
            "Clip must be processed before publishing",
            clip_id=clip.id,
            status=clip.status.value,
        )
    if not account.is_connected:
        raise InvalidStateError("Social account is not connected", social_account_id=account.id)

    scheduled_at = _to_utc_naive(request.scheduled_at)
    if scheduled_at is not None and scheduled_at <= datetime.utcnow():
        raise HTTPException(400, "Scheduled time must be in the future")

    post = Post(
        clip_id=clip.id,
        social_account_id=account.id,
        user_id=user_id,
        title=clip.title,
        description=clip.description or "",
        status=PostStatus.SCHEDULED if scheduled_at else PostStatus.PENDING,
        scheduled_at=scheduled_at,
    )
    await pipeline.store.create_post(post)

    if post.status == PostStatus.SCHEDULED:
        logger.info(f"Post {post.id} scheduled for {scheduled_at.isoformat()}")
        return post

    try:
        enqueued = await pipeline.publish_queue.enqueue(post.id)
    except RuntimeError as exc:
        await pipeline.store.record_post_result(
            post.id, PostStatus.FAILED, error_message="Publish queue unavailable"
        )
        raise HTTPException(503, f"Publish queue unavailable: {exc}") from exc

    if not enqueued:
        await pipeline.store.record_post_result(
            post.id, PostStatus.FAILED, error_message="Publish queue is full"
        )
        raise QueueFullError(pipeline.publish_queue.name)

    logger.info(f"Post {post.id} queued for {account.platform.value}")
    return post


@router.get("/posts", response_model=List[Post])
async def list_posts(
    clip_id: Optional[str] = None,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    return await pipeline.store.list_posts(user_id, clip_id=clip_id)


@router.get("/posts/{post_id}", response_model=Post)
async def get_post(
    post_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    post = await pipeline.store.get_post(post_id, user_id=user_id)
    if post is None:
        raise PostNotFoundError(post_id)
    return post
