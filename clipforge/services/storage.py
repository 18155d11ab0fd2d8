"""
Temporary Storage
Deterministic file layout under the shared temp root
"""

import os
from pathlib import Path
from typing import List, Optional

from ..utils.logger import get_logger

logger = get_logger()


class TempStorage:
    """Names and removes media files under one temporary root.

    Every file is keyed by a record identifier so concurrent tasks working
    on different records never share a path:

        <root>/<video_id>.mp4                          downloaded source
        <root>/clip_<clip_id>.mp4                      trimmed clip
        <root>/thumb_<clip_id>.jpg                     clip thumbnail
        <root>/optimized_<slug>_<clip_id>_<PLATFORM>.mp4
    """

    def __init__(self, root: str = "temp"):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def source_path(self, key: str) -> Path:
        return self.root / f"{key}.mp4"

    def clip_path(self, key: str) -> Path:
        return self.root / f"clip_{key}.mp4"

    def thumbnail_path(self, key: str) -> Path:
        return self.root / f"thumb_{key}.jpg"

    def optimized_path(self, slug: str, key: str) -> Path:
        return self.root / f"optimized_{slug}_{key}.mp4"

    def remove(self, path: Optional[str]) -> bool:
        """Delete a file if present; returns True when something was removed"""
        if not path:
            return False
        try:
            if os.path.exists(path):
                os.remove(path)
                return True
        except OSError as exc:
            logger.warning(f"Failed to remove file {path}: {exc}")
        return False

    def remove_clip_outputs(self, clip_id: str) -> List[str]:
        """Delete the clip file, its thumbnail and any platform variants"""
        candidates = [self.clip_path(clip_id), self.thumbnail_path(clip_id)]
        candidates.extend(self.root.glob(f"optimized_*_{clip_id}_*.mp4"))

        removed = [str(path) for path in candidates if self.remove(str(path))]
        if removed:
            logger.info(f"Removed {len(removed)} output file(s) for clip {clip_id}")
        return removed
