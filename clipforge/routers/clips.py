"""
Clips Router
Handles clip editing, processing and file delivery.
"""

import os
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse
from pydantic import BaseModel

from ..auth import get_current_user
from ..models.clip import Clip, ClipCreate, ClipStatus, ClipUpdate
from ..models.post import PostStatus
from ..pipeline import Pipeline, get_pipeline
from ..utils.exceptions import (
    ClipFileMissingError,
    ClipNotFoundError,
    InvalidStateError,
    QueueFullError,
    VideoNotFoundError,
)
from ..utils.logger import get_logger

router = APIRouter(prefix="/api/clips", tags=["clips"])
logger = get_logger()


class ProcessRequest(BaseModel):
    """Request to start processing a clip"""
    clip_id: str


def _download_filename(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title) + ".mp4"


async def _get_owned_clip(pipeline: Pipeline, clip_id: str, user_id: str) -> Clip:
    clip = await pipeline.store.get_clip(clip_id, user_id=user_id)
    if clip is None:
        raise ClipNotFoundError(clip_id)
    return clip


async def ensure_clip_idle(pipeline: Pipeline, clip: Clip, action: str, include_posts: bool = True):
    """Reject with 409 while a worker may still read or write the clip's files."""
    if clip.status == ClipStatus.PROCESSING or pipeline.clip_queue.is_in_flight(clip.id):
        raise InvalidStateError(
            f"Clip is being processed and cannot be {action}",
            status_code=status.HTTP_409_CONFLICT,
            clip_id=clip.id,
        )
    if not include_posts:
        return

    for post in await pipeline.store.list_posts(clip.user_id, clip_id=clip.id):
        if post.status == PostStatus.POSTING or pipeline.publish_queue.is_in_flight(post.id):
            raise InvalidStateError(
                f"Clip is being published and cannot be {action}",
                status_code=status.HTTP_409_CONFLICT,
                clip_id=clip.id,
                post_id=post.id,
            )


async def _check_range(pipeline: Pipeline, video_id: str, user_id: str, end_time: float):
    video = await pipeline.store.get_video(video_id, user_id=user_id)
    if video is None:
        raise VideoNotFoundError(video_id)
    if video.duration and end_time > video.duration:
        raise HTTPException(400, f"End time cannot exceed video duration ({video.duration}s)")


@router.post("/", response_model=Clip, status_code=201)
async def create_clip(
    request: ClipCreate,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Create a clip of a source video; it stays PENDING until processed."""
    await _check_range(pipeline, request.video_id, user_id, request.end_time)

    clip = Clip(
        video_id=request.video_id,
        user_id=user_id,
        title=request.title,
        description=request.description,
        start_time=request.start_time,
        end_time=request.end_time,
    )
    await pipeline.store.create_clip(clip)
    logger.info(f"Clip created: {clip.id} ({clip.start_time}-{clip.end_time}s)")
    return clip


@router.get("/", response_model=List[Clip])
async def list_clips(
    video_id: Optional[str] = None,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """List clips, optionally for one video."""
    return await pipeline.store.list_clips(user_id, video_id=video_id)


@router.post("/process", response_model=Clip, status_code=status.HTTP_202_ACCEPTED)
async def process_clip(
    request: ProcessRequest,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Claim a PENDING clip and queue it for download, trim and thumbnail."""
    clip = await _get_owned_clip(pipeline, request.clip_id, user_id)

    if pipeline.clip_queue.is_in_flight(clip.id):
        raise InvalidStateError(
            "Clip is already being processed",
            status_code=status.HTTP_409_CONFLICT,
            clip_id=clip.id,
        )

    claimed = await pipeline.store.transition_clip(
        clip.id, [ClipStatus.PENDING], ClipStatus.PROCESSING
    )
    if not claimed:
        raise InvalidStateError(
            f"Clip is {clip.status.value}; only PENDING clips can be processed",
            clip_id=clip.id,
            status=clip.status.value,
        )

    try:
        enqueued = await pipeline.clip_queue.enqueue(clip.id)
    except RuntimeError as exc:
        await pipeline.store.set_clip_status(clip.id, ClipStatus.PENDING)
        raise HTTPException(503, f"Clip queue unavailable: {exc}") from exc

    if not enqueued:
        await pipeline.store.set_clip_status(clip.id, ClipStatus.PENDING)
        raise QueueFullError(pipeline.clip_queue.name)

    logger.info(f"Clip queued for processing: {clip.id}")
    return await pipeline.store.get_clip(clip.id)


@router.get("/{clip_id}", response_model=Clip)
async def get_clip(
    clip_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    return await _get_owned_clip(pipeline, clip_id, user_id)


@router.put("/{clip_id}", response_model=Clip)
async def update_clip(
    clip_id: str,
    request: ClipUpdate,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Edit a clip.

    A new range on a finished clip discards its outputs, and any edit of a
    FAILED clip returns it to PENDING so it can be processed again.
    """
    clip = await _get_owned_clip(pipeline, clip_id, user_id)
    range_changed = (request.start_time, request.end_time) != (clip.start_time, clip.end_time)
    await ensure_clip_idle(pipeline, clip, "edited", include_posts=range_changed)

    if range_changed:
        await _check_range(pipeline, clip.video_id, user_id, request.end_time)

    clip.title = request.title
    clip.description = request.description
    clip.start_time = request.start_time
    clip.end_time = request.end_time

    if clip.status == ClipStatus.FAILED or (range_changed and clip.status != ClipStatus.PENDING):
        pipeline.storage.remove_clip_outputs(clip.id)
        clip.status = ClipStatus.PENDING
        clip.error_message = None

    return await pipeline.store.update_clip(clip)


@router.delete("/{clip_id}")
async def delete_clip(
    clip_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Delete a clip and associated files."""
    clip = await _get_owned_clip(pipeline, clip_id, user_id)
    await ensure_clip_idle(pipeline, clip, "deleted")

    await pipeline.store.delete_clip(clip.id)
    pipeline.storage.remove_clip_outputs(clip.id)
    return {"status": "deleted"}


@router.get("/{clip_id}/download")
async def download_clip(
    clip_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Stream the processed clip as an attachment."""
    clip = await _get_owned_clip(pipeline, clip_id, user_id)
    path = pipeline.storage.clip_path(clip.id)
    if clip.status != ClipStatus.COMPLETED or not os.path.exists(path):
        raise ClipFileMissingError(clip.id)

    return FileResponse(
        path,
        media_type="video/mp4",
        filename=_download_filename(clip.title),
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/{clip_id}/thumbnail")
async def get_thumbnail(
    clip_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    clip = await _get_owned_clip(pipeline, clip_id, user_id)
    path = pipeline.storage.thumbnail_path(clip.id)
    if not os.path.exists(path):
        raise HTTPException(404, "Thumbnail not found")
    return FileResponse(path, media_type="image/jpeg")
