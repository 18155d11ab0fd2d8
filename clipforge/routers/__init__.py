"""Routers package initialization"""
from .videos import router as videos_router
from .clips import router as clips_router
from .social_accounts import router as social_accounts_router
from .posts import router as posts_router
from .system import router as system_router

__all__ = ["videos_router", "clips_router", "social_accounts_router", "posts_router", "system_router"]
