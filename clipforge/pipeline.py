"""
Pipeline
Constructs the processing services from settings and owns their lifecycle
"""

from pathlib import Path
from typing import Optional

from fastapi import Request

from .config import Settings
from .services.automator import BrowserAutomator
from .services.clip_lifecycle import ClipLifecycle
from .services.clip_suggester import ClipSuggester
from .services.job_queue import JobQueue
from .services.locks import KeyedLock
from .services.post_scheduler import PostScheduler
from .services.publish_lifecycle import AutomatorFactory, PublishLifecycle
from .services.record_store import RecordStore
from .services.source_resolver import SourceResolver
from .services.storage import TempStorage
from .services.transcoder import EncodeConfig, Transcoder
from .utils.logger import get_logger

logger = get_logger()


class Pipeline:
    """All collaborators of the clip and publish pipelines, wired together.

    Built once at startup and handed to the routers; tests build one with
    fakes for the resolver, transcoder and automator.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        store: Optional[RecordStore] = None,
        resolver: Optional[SourceResolver] = None,
        transcoder: Optional[Transcoder] = None,
        automator_factory: Optional[AutomatorFactory] = None,
        suggester: Optional[ClipSuggester] = None
    ):
        self.settings = settings
        self.storage = TempStorage(settings.temp_dir)
        self.store = store or RecordStore(str(Path(settings.data_dir) / settings.database_name))
        self.resolver = resolver or SourceResolver(self.storage)
        self.transcoder = transcoder or Transcoder(
            self.storage,
            EncodeConfig(
                preset=settings.ffmpeg_preset,
                crf=settings.ffmpeg_crf,
                thumbnail_size=settings.thumbnail_size,
            ),
            ffmpeg=settings.ffmpeg_binary,
            ffprobe=settings.ffprobe_binary,
        )
        self.suggester = suggester or ClipSuggester(settings.gemini_api_key, settings.gemini_model)
        self.locks = KeyedLock()

        self.clips = ClipLifecycle(
            self.store, self.storage, self.resolver, self.transcoder, self.locks
        )
        self.publishing = PublishLifecycle(
            self.store,
            self.storage,
            self.transcoder,
            automator_factory or (lambda: BrowserAutomator(settings)),
        )

        self.clip_queue = JobQueue("clips")
        self.clip_queue.configure(
            processor=self.clips.run,
            worker_count=settings.clip_worker_concurrency,
            max_pending=settings.max_pending_jobs,
            failure_handler=self.clips.mark_failed,
        )
        self.publish_queue = JobQueue("posts")
        self.publish_queue.configure(
            processor=self.publishing.run,
            worker_count=settings.publish_worker_concurrency,
            max_pending=settings.max_pending_jobs,
            failure_handler=self.publishing.mark_failed,
        )
        self.scheduler = PostScheduler(
            self.store, self.publish_queue, settings.scheduler_interval_seconds
        )

    async def start(self, run_scheduler: bool = True):
        await self.store.initialize()
        interrupted = await self.store.fail_interrupted()
        if interrupted["clips"] or interrupted["posts"]:
            logger.warning(
                f"Marked {interrupted['clips']} clip(s) and {interrupted['posts']} post(s) "
                "interrupted by restart as failed"
            )

        await self.clip_queue.start()
        await self.publish_queue.start()
        if run_scheduler:
            self.scheduler.start()

    async def stop(self):
        await self.scheduler.stop()
        await self.clip_queue.stop()
        await self.publish_queue.stop()


def get_pipeline(request: Request) -> Pipeline:
    """Dependency returning the pipeline built by the app lifespan"""
    return request.app.state.pipeline
