"""
Clip Data Models
Represents a time-bounded excerpt of a source video
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional
from enum import Enum
from datetime import datetime
import uuid


class ClipStatus(str, Enum):
    """Clip processing status"""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ClipRange(BaseModel):
    """Editable fields shared by create and update requests"""
    title: str = Field(..., min_length=1, description="Title is required")
    description: Optional[str] = None
    start_time: float = Field(..., ge=0, description="Start time must be 0 or greater")
    end_time: float = Field(..., gt=0)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be greater than start time")
        return self


class ClipCreate(ClipRange):
    """Request model for creating a clip"""
    video_id: str


class ClipUpdate(ClipRange):
    """Request model for editing a clip"""


class Clip(BaseModel):
    """Complete clip model"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    video_id: str
    user_id: str
    title: str
    description: Optional[str] = None
    start_time: float = Field(ge=0)
    end_time: float
    duration: float = 0
    status: ClipStatus = ClipStatus.PENDING
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def __init__(self, **data):
        super().__init__(**data)
        self.duration = self.end_time - self.start_time
