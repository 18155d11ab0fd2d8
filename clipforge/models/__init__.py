"""Models package initialization"""
from .video import SourceVideo, SourceVideoCreate
from .clip import Clip, ClipCreate, ClipUpdate, ClipStatus
from .social_account import Platform, SocialAccount, SocialAccountCreate, StoredSocialAccount
from .post import Post, PostCreate, PostStatus

__all__ = [
    "SourceVideo",
    "SourceVideoCreate",
    "Clip",
    "ClipCreate",
    "ClipUpdate",
    "ClipStatus",
    "Platform",
    "SocialAccount",
    "SocialAccountCreate",
    "StoredSocialAccount",
    "Post",
    "PostCreate",
    "PostStatus",
]
