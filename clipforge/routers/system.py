"""
System Router
Health and worker queue status.
"""

from fastapi import APIRouter, Depends

from ..auth import get_current_user
from ..config import get_settings
from ..pipeline import Pipeline, get_pipeline

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    settings = get_settings()
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/api/queue")
async def queue_stats(
    user_id: str = Depends(get_current_user),
    pipeline: Pipeline = Depends(get_pipeline),
):
    """Pending and active work of both worker queues"""
    return {
        "clips": pipeline.clip_queue.stats(),
        "posts": pipeline.publish_queue.stats(),
        "scheduler_running": pipeline.scheduler.running,
    }
