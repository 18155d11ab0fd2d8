"""
Post Data Models
One attempt to publish a clip to a social account
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum
from datetime import datetime
import uuid


class PostStatus(str, Enum):
    """Publish attempt status"""
    PENDING = "PENDING"
    SCHEDULED = "SCHEDULED"
    POSTING = "POSTING"
    POSTED = "POSTED"
    FAILED = "FAILED"


class PostCreate(BaseModel):
    """Request model for publishing a clip"""
    clip_id: str
    social_account_id: str
    scheduled_at: Optional[datetime] = Field(None, description="Publish time (UTC); immediate when omitted")


class Post(BaseModel):
    """Complete post model"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    clip_id: str
    social_account_id: str
    user_id: str
    title: str
    description: str = ""
    status: PostStatus = PostStatus.PENDING
    scheduled_at: Optional[datetime] = None
    platform_url: Optional[str] = None
    error_message: Optional[str] = None
    posted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
