"""
Clip Lifecycle Controller
Download -> trim -> thumbnail for one clip, with status tracking and cleanup
"""

from typing import List

from ..models.clip import ClipStatus
from ..utils.exceptions import VideoNotFoundError
from ..utils.logger import get_logger
from .locks import KeyedLock
from .record_store import RecordStore
from .source_resolver import SourceResolver
from .storage import TempStorage
from .transcoder import Transcoder

logger = get_logger()


class ClipLifecycle:
    """
    Owns a clip's PROCESSING -> COMPLETED | FAILED transition

    The request surface moves a clip from PENDING to PROCESSING and queues
    it; `run` does the work and writes COMPLETED. Any exception escapes to
    the queue, which calls `mark_failed` exactly once.
    """

    def __init__(
        self,
        store: RecordStore,
        storage: TempStorage,
        resolver: SourceResolver,
        transcoder: Transcoder,
        locks: KeyedLock
    ):
        self.store = store
        self.storage = storage
        self.resolver = resolver
        self.transcoder = transcoder
        self.locks = locks

    async def run(self, clip_id: str):
        clip = await self.store.get_clip(clip_id)
        if clip is None:
            logger.warning(f"Clip {clip_id} vanished before processing")
            return
        if clip.status != ClipStatus.PROCESSING:
            logger.warning(f"Clip {clip_id} is {clip.status.value}, skipping")
            return

        video = await self.store.get_video(clip.video_id)
        if video is None:
            raise VideoNotFoundError(clip.video_id)

        outputs: List[str] = []
        try:
            # Clips of the same video share the downloaded source file
            async with self.locks.hold(f"video:{video.id}"):
                source_path = None
                try:
                    source_path = await self.resolver.download(video.url, video.id)
                    clip_path = await self.transcoder.trim(
                        source_path, clip.start_time, clip.end_time, clip.id
                    )
                    outputs.append(clip_path)
                finally:
                    self.storage.remove(source_path)

            thumbnail_path = await self.transcoder.thumbnail(clip_path, clip.id, clip.duration)
            outputs.append(thumbnail_path)

            stored = await self.store.set_clip_status(clip.id, ClipStatus.COMPLETED)
        except Exception:
            for path in outputs:
                self.storage.remove(path)
            raise

        if not stored:
            for path in outputs:
                self.storage.remove(path)
            logger.warning(f"Clip {clip.id} was deleted while processing, discarded its outputs")
            return

        logger.info(f"Clip {clip.id} processed successfully ({clip.duration:.2f}s)")

    async def mark_failed(self, clip_id: str, exc: Exception):
        message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
        await self.store.set_clip_status(clip_id, ClipStatus.FAILED, error_message=message)
        logger.error(f"Clip {clip_id} processing failed: {message}")
