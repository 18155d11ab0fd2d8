"""
Source Resolver Service
Fetches source video metadata and downloads media using yt-dlp
"""

import asyncio
import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import yt_dlp

from ..utils.exceptions import DownloadError, ResolutionError
from ..utils.logger import get_logger
from .storage import TempStorage

logger = get_logger()

# Prefer a single file carrying both streams so no merge step is needed
_COMBINED_FORMAT = (
    "best[ext=mp4][vcodec!=none][acodec!=none]"
    "/best[vcodec!=none][acodec!=none]"
    "/best"
)


@dataclass
class SourceInfo:
    """Descriptive metadata for a source video"""
    title: str
    description: str
    duration: int
    thumbnail: str


class SourceResolver:
    """Resolves and downloads source videos"""

    def __init__(self, storage: TempStorage):
        self.storage = storage

    @staticmethod
    def _check_url(url: str):
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ResolutionError(f"Invalid source URL: {url}", url=url)

    async def resolve_info(self, url: str) -> SourceInfo:
        """Get video info without downloading"""
        self._check_url(url)
        logger.info(f"Fetching video info: {url}")

        ydl_opts = {
            'quiet': True,
            'no_warnings': True,
            'extract_flat': False,
            'noplaylist': True,
        }

        def do_extract():
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                return ydl.extract_info(url, download=False)

        loop = asyncio.get_event_loop()
        try:
            info = await loop.run_in_executor(None, do_extract)
        except Exception as exc:
            raise ResolutionError(f"Failed to get video info: {exc}", url=url) from exc

        if not info:
            raise ResolutionError("Failed to get video info: empty response", url=url)

        thumbnail = info.get('thumbnail') or ''
        if not thumbnail and info.get('thumbnails'):
            thumbnail = info['thumbnails'][0].get('url', '')

        return SourceInfo(
            title=info.get('title') or 'Untitled',
            description=info.get('description') or '',
            duration=max(0, int(info.get('duration') or 0)),
            thumbnail=thumbnail,
        )

    async def download(self, url: str, destination_key: str) -> str:
        """
        Download a source video to <temp>/<destination_key>.mp4

        yt-dlp streams into a .part file and renames it once complete, so
        the returned path is always a finished file. Any failure removes
        what was written and raises DownloadError.
        """
        self._check_url(url)
        output_path = str(self.storage.source_path(destination_key))
        logger.info(f"Starting download: {url} -> {output_path}")

        ydl_opts = {
            'format': _COMBINED_FORMAT,
            'outtmpl': output_path,
            'quiet': True,
            'no_warnings': True,
            'noplaylist': True,
            'overwrites': True,
        }

        def do_download():
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                return ydl.extract_info(url, download=True)

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, do_download)
        except Exception as exc:
            self._discard(output_path)
            raise DownloadError(f"Download failed: {exc}", url=url) from exc

        if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
            self._discard(output_path)
            raise DownloadError("Download failed: no media was written", url=url)

        logger.info(f"Video downloaded: {output_path}")
        return output_path

    def _discard(self, output_path: Optional[str]):
        self.storage.remove(output_path)
        self.storage.remove(f"{output_path}.part")
