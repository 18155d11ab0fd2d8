"""
Custom Exceptions for ClipForge
Structured error handling with recovery hints
"""

from typing import Optional, Dict, Any


class ClipForgeError(Exception):
    """Base exception for all ClipForge errors"""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to JSON-serializable dict"""
        return {
            "error": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
            "recovery_hint": self.recovery_hint,
            "details": self.details
        }


# ============================================================================
# Pipeline Errors
# ============================================================================

class ResolutionError(ClipForgeError):
    """Source URL is not a supported video or its metadata cannot be fetched"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(
            message=message,
            code="RESOLUTION_ERROR",
            recoverable=True,
            recovery_hint="Check that the URL points to a public video on a supported site.",
            details={"url": url},
            status_code=400
        )


class DownloadError(ClipForgeError):
    """Network or stream failure while downloading a source video"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(
            message=message,
            code="DOWNLOAD_ERROR",
            recoverable=True,
            recovery_hint="The source may be temporarily unavailable. Retry the clip later.",
            details={"url": url},
            status_code=502
        )


class TranscodeError(ClipForgeError):
    """FFmpeg failure or invalid input range"""

    def __init__(self, message: str, command: Optional[str] = None, stderr: Optional[str] = None):
        super().__init__(
            message=message,
            code="TRANSCODE_ERROR",
            recoverable=True,
            recovery_hint="Ensure FFmpeg is installed and the clip range lies within the source video.",
            details={"command": command, "stderr": stderr[-500:] if stderr else None}
        )


class AutomatorError(ClipForgeError):
    """Browser session could not be brought up"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            code="AUTOMATOR_ERROR",
            recoverable=False,
            recovery_hint="Run `playwright install chromium` and check the browser can start headless.",
            details=kwargs
        )


class PublishStepError(ClipForgeError):
    """A single step of a platform upload flow failed"""

    def __init__(self, step: str, reason: str):
        super().__init__(
            message=f"{step}: {reason}",
            code="PUBLISH_STEP_ERROR",
            recoverable=True,
            details={"step": step}
        )
        self.step = step


class ClipFileMissingError(ClipForgeError):
    """Completed clip has no output file on storage"""

    def __init__(self, clip_id: str):
        super().__init__(
            message="Clip file not found. Please ensure the clip is processed first.",
            code="CLIP_FILE_MISSING",
            recoverable=True,
            recovery_hint="Reprocess the clip before publishing it.",
            details={"clip_id": clip_id},
            status_code=404
        )


class SuggestionError(ClipForgeError):
    """AI clip suggestions unavailable"""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="SUGGESTION_ERROR",
            recoverable=True,
            recovery_hint="Configure GEMINI_API_KEY to enable clip suggestions.",
            status_code=503
        )


# ============================================================================
# Request Errors
# ============================================================================

class NotFoundError(ClipForgeError):
    """Record does not exist or belongs to another user"""

    def __init__(self, kind: str, record_id: str):
        super().__init__(
            message=f"{kind} not found",
            code=f"{kind.upper().replace(' ', '_')}_NOT_FOUND",
            recoverable=False,
            details={"id": record_id},
            status_code=404
        )


class VideoNotFoundError(NotFoundError):
    def __init__(self, video_id: str):
        super().__init__("Video", video_id)


class ClipNotFoundError(NotFoundError):
    def __init__(self, clip_id: str):
        super().__init__("Clip", clip_id)


class SocialAccountNotFoundError(NotFoundError):
    def __init__(self, account_id: str):
        super().__init__("Social account", account_id)


class PostNotFoundError(NotFoundError):
    def __init__(self, post_id: str):
        super().__init__("Post", post_id)


class InvalidStateError(ClipForgeError):
    """Operation not allowed in the record's current status"""

    def __init__(self, message: str, status_code: int = 400, **kwargs):
        super().__init__(
            message=message,
            code="INVALID_STATE",
            recoverable=True,
            details=kwargs,
            status_code=status_code
        )


class DuplicateVideoError(ClipForgeError):
    """Source URL already registered"""

    def __init__(self, url: str):
        super().__init__(
            message="Video already exists",
            code="DUPLICATE_VIDEO",
            recoverable=False,
            details={"url": url},
            status_code=400
        )


class DuplicateSocialAccountError(ClipForgeError):
    """User already has an account for this platform"""

    def __init__(self, platform: str):
        super().__init__(
            message="Account already exists for this platform",
            code="DUPLICATE_SOCIAL_ACCOUNT",
            recoverable=False,
            recovery_hint="Remove the existing account before connecting another one.",
            details={"platform": platform},
            status_code=400
        )


class QueueFullError(ClipForgeError):
    """Worker queue has no free capacity"""

    def __init__(self, queue_name: str):
        super().__init__(
            message=f"The {queue_name} queue is full. Try again in a few minutes.",
            code="QUEUE_FULL",
            recoverable=True,
            details={"queue": queue_name},
            status_code=429
        )
