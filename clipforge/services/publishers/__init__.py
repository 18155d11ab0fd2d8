"""Platform publishers, selected by platform"""
from typing import Dict, Type

from ...models.social_account import Platform
from .base import Credentials, Publisher, StepTimeouts, UploadResult
from .instagram import InstagramPublisher
from .tiktok import TikTokPublisher
from .youtube import YouTubeShortsPublisher

PUBLISHERS: Dict[Platform, Type[Publisher]] = {
    Platform.TIKTOK: TikTokPublisher,
    Platform.INSTAGRAM: InstagramPublisher,
    Platform.YOUTUBE_SHORTS: YouTubeShortsPublisher,
}

__all__ = [
    "PUBLISHERS",
    "Credentials",
    "Publisher",
    "StepTimeouts",
    "UploadResult",
    "TikTokPublisher",
    "InstagramPublisher",
    "YouTubeShortsPublisher",
]
