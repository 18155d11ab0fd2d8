"""
Source Video Models
Represents an origin media asset that clips are cut from
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid


class SourceVideoCreate(BaseModel):
    """Request model for registering a source video"""
    url: str = Field(..., min_length=1, description="Source video URL")
    title: Optional[str] = Field(None, description="Overrides the resolved title")


class SourceVideo(BaseModel):
    """Complete source video model"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    url: str
    title: str
    description: str = ""
    duration: int = Field(default=0, ge=0, description="Duration in seconds")
    thumbnail: str = ""
    user_id: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
