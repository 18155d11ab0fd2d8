"""
Videos Router
Registers source videos and proposes clips for them.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..auth import get_current_user
from ..models.video import SourceVideo, SourceVideoCreate
from ..pipeline import Pipeline, get_pipeline
from ..utils.exceptions import DuplicateVideoError, VideoNotFoundError
from ..utils.logger import get_logger
from .clips import ensure_clip_idle

router = APIRouter(prefix="/api/videos", tags=["videos"])
logger = get_logger()


class SuggestionRequest(BaseModel):
    """Request for AI clip suggestions"""
    count: int = Field(default=5, ge=1, le=10)


class SuggestionResponse(BaseModel):
    start_time: float
    end_time: float
    title: str
    description: str
    reason: str


@router.post("/", response_model=SourceVideo, status_code=201)
async def create_video(
    request: SourceVideoCreate,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Resolve a video URL and register it as a clip source."""
    url = request.url.strip()
    if await pipeline.store.get_video_by_url(url):
        raise DuplicateVideoError(url)

    info = await pipeline.resolver.resolve_info(url)
    video = SourceVideo(
        url=url,
        title=request.title or info.title,
        description=info.description,
        duration=info.duration,
        thumbnail=info.thumbnail,
        user_id=user_id,
    )
    await pipeline.store.create_video(video)
    logger.info(f"Video registered: {video.id} ({video.title}, {video.duration}s)")
    return video


@router.get("/", response_model=List[SourceVideo])
async def list_videos(
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    return await pipeline.store.list_videos(user_id)


@router.get("/{video_id}", response_model=SourceVideo)
async def get_video(
    video_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    video = await pipeline.store.get_video(video_id, user_id=user_id)
    if video is None:
        raise VideoNotFoundError(video_id)
    return video


@router.delete("/{video_id}")
async def delete_video(
    video_id: str,
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Delete a video together with its clips, their posts and output files."""
    video = await pipeline.store.get_video(video_id, user_id=user_id)
    if video is None:
        raise VideoNotFoundError(video_id)

    for clip in await pipeline.store.list_clips(user_id, video_id=video.id):
        await ensure_clip_idle(pipeline, clip, "deleted")

    clip_ids = await pipeline.store.delete_video(video.id)
    for clip_id in clip_ids:
        pipeline.storage.remove_clip_outputs(clip_id)

    logger.info(f"Video deleted: {video.id} ({len(clip_ids)} clip(s))")
    return {"status": "deleted", "clips_deleted": len(clip_ids)}


@router.post("/{video_id}/suggestions", response_model=List[SuggestionResponse])
async def suggest_clips(
    video_id: str,
    request: SuggestionRequest = SuggestionRequest(),
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Ask Gemini for the most engaging moments of a video."""
    video = await pipeline.store.get_video(video_id, user_id=user_id)
    if video is None:
        raise VideoNotFoundError(video_id)

    suggestions = await pipeline.suggester.suggest(video, request.count)
    return [SuggestionResponse(**vars(suggestion)) for suggestion in suggestions]
