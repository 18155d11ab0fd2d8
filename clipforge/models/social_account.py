"""
Social Account Models
Credential binding for one publishing platform
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum
from datetime import datetime
import uuid


class Platform(str, Enum):
    """Supported publishing platforms"""
    TIKTOK = "TIKTOK"
    INSTAGRAM = "INSTAGRAM"
    YOUTUBE_SHORTS = "YOUTUBE_SHORTS"

    @property
    def slug(self) -> str:
        """Short lowercase name used in file names"""
        return _PLATFORM_SLUGS[self]


_PLATFORM_SLUGS = {
    Platform.TIKTOK: "tiktok",
    Platform.INSTAGRAM: "instagram",
    Platform.YOUTUBE_SHORTS: "youtube",
}


class SocialAccountCreate(BaseModel):
    """Request model for connecting a social account"""
    platform: Platform
    username: str = Field(..., min_length=1, description="Username is required")
    password: str = Field(..., min_length=1, description="Password is required")


class SocialAccount(BaseModel):
    """Social account as exposed by the API"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    platform: Platform
    username: str
    user_id: str
    is_connected: bool = True
    last_used: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class StoredSocialAccount(SocialAccount):
    """Social account including the login secret, never returned by the API"""
    password: str = ""

    def public(self) -> SocialAccount:
        return SocialAccount(**self.model_dump(exclude={"password"}))
