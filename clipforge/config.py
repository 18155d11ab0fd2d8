"""
ClipForge Configuration
Centralized settings management using Pydantic Settings
"""

from pydantic_settings import BaseSettings, NoDecode
from pydantic import Field, field_validator
from typing import Annotated, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==========================================================================
    # Application
    # ==========================================================================
    app_name: str = "ClipForge"
    debug: bool = False
    app_version: str = "1.0.0"

    # ==========================================================================
    # Paths
    # ==========================================================================
    temp_dir: str = Field(default="temp", description="Temporary storage root for media files")
    data_dir: str = Field(default="data", description="Persistent application data directory")
    database_name: str = Field(default="clipforge.db", description="SQLite database file name")

    # ==========================================================================
    # Workers & Scheduling
    # ==========================================================================
    clip_worker_concurrency: int = Field(default=2, ge=1, le=8, description="Concurrent clip workers")
    publish_worker_concurrency: int = Field(default=1, ge=1, le=4, description="Concurrent browser sessions")
    max_pending_jobs: int = Field(default=20, ge=1, le=500, description="Max queued pending jobs per queue")
    scheduler_interval_seconds: int = Field(default=60, ge=1, le=3600, description="Scheduled post poll interval")

    # ==========================================================================
    # Transcoding
    # ==========================================================================
    ffmpeg_binary: str = Field(default="ffmpeg")
    ffprobe_binary: str = Field(default="ffprobe")
    ffmpeg_preset: str = Field(default="fast", description="x264 preset (speed over compression)")
    ffmpeg_crf: int = Field(default=23, ge=0, le=51)
    thumbnail_size: str = Field(default="320x240")

    # ==========================================================================
    # Browser Automation
    # ==========================================================================
    browser_headless: bool = True
    browser_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
        )
    )
    browser_viewport_width: int = 1366
    browser_viewport_height: int = 768
    element_timeout_ms: int = Field(default=10_000, ge=100)
    navigation_timeout_ms: int = Field(default=30_000, ge=100)
    upload_timeout_ms: int = Field(default=60_000, ge=100)
    publish_timeout_ms: int = Field(default=30_000, ge=100)
    login_timeout_ms: int = Field(default=30_000, ge=100)

    # ==========================================================================
    # Google Gemini
    # ==========================================================================
    gemini_api_key: str = Field(default="", description="Google Gemini API Key")
    gemini_model: str = Field(default="gemini-2.0-flash")

    # ==========================================================================
    # Security
    # ==========================================================================
    session_secret: str = Field(default="change-me", description="Secret used to sign session tokens")
    session_algorithm: str = "HS256"
    session_expiration_hours: int = Field(default=24, ge=1)
    cors_allowed_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
