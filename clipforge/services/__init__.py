"""Services package initialization"""
from .storage import TempStorage
from .locks import KeyedLock
from .job_queue import JobQueue
from .record_store import RecordStore
from .source_resolver import SourceInfo, SourceResolver
from .transcoder import EncodeConfig, PLATFORM_GEOMETRY, PlatformGeometry, Transcoder
from .automator import BrowserAutomator
from .clip_lifecycle import ClipLifecycle
from .publish_lifecycle import PublishLifecycle
from .post_scheduler import PostScheduler
from .clip_suggester import ClipSuggester, ClipSuggestion

__all__ = [
    "TempStorage",
    "KeyedLock",
    "JobQueue",
    "RecordStore",
    "SourceInfo",
    "SourceResolver",
    "EncodeConfig",
    "PLATFORM_GEOMETRY",
    "PlatformGeometry",
    "Transcoder",
    "BrowserAutomator",
    "ClipLifecycle",
    "PublishLifecycle",
    "PostScheduler",
    "ClipSuggester",
    "ClipSuggestion"
]
