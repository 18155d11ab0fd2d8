"""Utils package initialization"""
from .logger import setup_logger, get_logger
from .exceptions import (
    ClipForgeError,
    ResolutionError,
    DownloadError,
    TranscodeError,
    AutomatorError,
    PublishStepError,
    ClipFileMissingError,
    SuggestionError,
    NotFoundError,
    VideoNotFoundError,
    ClipNotFoundError,
    SocialAccountNotFoundError,
    PostNotFoundError,
    InvalidStateError,
    DuplicateVideoError,
    DuplicateSocialAccountError,
    QueueFullError
)

__all__ = [
    "setup_logger",
    "get_logger",
    "ClipForgeError",
    "ResolutionError",
    "DownloadError",
    "TranscodeError",
    "AutomatorError",
    "PublishStepError",
    "ClipFileMissingError",
    "SuggestionError",
    "NotFoundError",
    "VideoNotFoundError",
    "ClipNotFoundError",
    "SocialAccountNotFoundError",
    "PostNotFoundError",
    "InvalidStateError",
    "DuplicateVideoError",
    "DuplicateSocialAccountError",
    "QueueFullError"
]
