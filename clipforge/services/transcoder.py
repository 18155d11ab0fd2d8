"""
Transcoder Service
FFmpeg-based trimming, thumbnails and per-platform re-encoding
"""

import asyncio
import shutil
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models.social_account import Platform
from ..utils.exceptions import TranscodeError
from ..utils.logger import get_logger
from .storage import TempStorage

logger = get_logger()


@dataclass(frozen=True)
class PlatformGeometry:
    """Output raster for a publishing platform"""
    width: int
    height: int
    aspect: str

    @property
    def size(self) -> str:
        return f"{self.width}x{self.height}"


PLATFORM_GEOMETRY: Dict[Platform, PlatformGeometry] = {
    Platform.TIKTOK: PlatformGeometry(1080, 1920, "9:16"),
    Platform.INSTAGRAM: PlatformGeometry(1080, 1080, "1:1"),
    Platform.YOUTUBE_SHORTS: PlatformGeometry(1080, 1920, "9:16"),
}


@dataclass
class EncodeConfig:
    """Encoder settings shared by every video output"""
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    preset: str = "fast"  # Fast encode over maximum compression
    crf: int = 23
    thumbnail_size: str = "320x240"
    thumbnail_position: float = 0.10

    def output_options(self) -> List[str]:
        return [
            "-c:v", self.video_codec,
            "-c:a", self.audio_codec,
            "-preset", self.preset,
            "-crf", str(self.crf),
            "-movflags", "+faststart",
        ]


class Transcoder:
    """Produces clip, thumbnail and platform files under the temp root"""

    def __init__(
        self,
        storage: TempStorage,
        config: Optional[EncodeConfig] = None,
        ffmpeg: str = "ffmpeg",
        ffprobe: str = "ffprobe"
    ):
        self.storage = storage
        self.config = config or EncodeConfig()
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe

    def check_available(self) -> bool:
        """Verify FFmpeg is available"""
        if shutil.which(self.ffmpeg) is None:
            logger.error("FFmpeg not installed. Please install FFmpeg.")
            return False
        logger.info("FFmpeg available")
        return True

    async def trim(self, input_path: str, start_time: float, end_time: float, output_key: str) -> str:
        """
        Extract [start_time, end_time) from the input

        Seeks on the input then encodes a fixed duration, so the output
        length does not depend on keyframe placement at the end point.
        """
        if start_time < 0 or end_time <= start_time:
            raise TranscodeError(
                f"Invalid clip range: start={start_time}, end={end_time}"
            )

        output_path = str(self.storage.clip_path(output_key))
        duration = end_time - start_time
        logger.info(f"Trimming clip {output_key}: {start_time:.2f}s +{duration:.2f}s")

        cmd = [
            self.ffmpeg, "-y",
            "-ss", str(start_time),
            "-i", input_path,
            "-t", str(duration),
            *self.config.output_options(),
            output_path
        ]
        await self._run(cmd, output_path)
        return output_path

    async def thumbnail(
        self,
        input_path: str,
        output_key: str,
        duration: Optional[float] = None
    ) -> str:
        """Grab one frame at 10% of the input's running time"""
        output_path = str(self.storage.thumbnail_path(output_key))
        if duration is None:
            duration = await self.probe_duration(input_path)
        position = max(0.0, duration * self.config.thumbnail_position)

        cmd = [
            self.ffmpeg, "-y",
            "-ss", f"{position:.3f}",
            "-i", input_path,
            "-frames:v", "1",
            "-s", self.config.thumbnail_size,
            output_path
        ]
        await self._run(cmd, output_path)
        return output_path

    async def optimize_for_platform(self, input_path: str, platform: Platform, output_key: str) -> str:
        """Re-encode to the platform's fixed resolution and aspect ratio"""
        geometry = PLATFORM_GEOMETRY[platform]
        output_path = str(self.storage.optimized_path(platform.slug, output_key))
        logger.info(f"Optimizing {output_key} for {platform.value} ({geometry.size}, {geometry.aspect})")

        cmd = [
            self.ffmpeg, "-y",
            "-i", input_path,
            "-s", geometry.size,
            "-aspect", geometry.aspect,
            *self.config.output_options(),
            output_path
        ]
        await self._run(cmd, output_path)
        return output_path

    async def probe_duration(self, input_path: str) -> float:
        """Read the container duration in seconds with ffprobe"""
        cmd = [
            self.ffprobe,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            input_path
        ]
        loop = asyncio.get_event_loop()
        result = await loop.run_in_executor(None, self._execute, cmd)
        if result.returncode != 0:
            raise TranscodeError(
                "ffprobe failed to read duration",
                command=" ".join(cmd),
                stderr=result.stderr
            )
        try:
            return float(result.stdout.strip())
        except ValueError as exc:
            raise TranscodeError(
                f"ffprobe returned no duration for {input_path}",
                command=" ".join(cmd),
                stderr=result.stdout
            ) from exc

    async def _run(self, cmd: List[str], output_path: str):
        logger.debug(f"FFmpeg command: {' '.join(cmd)}")
        loop = asyncio.get_event_loop()
        result = await loop.run_in_executor(None, self._execute, cmd)

        if result.returncode != 0:
            self.storage.remove(output_path)
            error_msg = "".join(result.stderr.splitlines(keepends=True)[-10:])
            logger.error(f"FFmpeg failed: {error_msg}")
            raise TranscodeError(
                f"FFmpeg encoding failed: {error_msg}",
                command=" ".join(cmd),
                stderr=result.stderr
            )

    @staticmethod
    def _execute(cmd: List[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise TranscodeError(f"{cmd[0]} is required but not installed") from exc
