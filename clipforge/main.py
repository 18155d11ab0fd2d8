"""
ClipForge - Clip Production & Publishing Pipeline
Main FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .pipeline import Pipeline
from .routers import clips_router, posts_router, social_accounts_router, system_router, videos_router
from .utils.exceptions import ClipForgeError
from .utils.logger import setup_logger


# Set up logging
logger = setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    settings = get_settings()

    # Create required directories
    Path(settings.temp_dir).mkdir(parents=True, exist_ok=True)
    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)

    pipeline = Pipeline(settings)
    await pipeline.start()
    app.state.pipeline = pipeline

    logger.info("=" * 60)
    logger.info("ClipForge - Clip Production & Publishing Pipeline")
    logger.info("=" * 60)
    logger.info(f"Temp directory: {settings.temp_dir}")
    logger.info(f"Data directory: {settings.data_dir}")
    logger.info(f"Clip workers: {settings.clip_worker_concurrency}")
    logger.info(f"Publish workers: {settings.publish_worker_concurrency}")
    logger.info(f"Queue max pending jobs: {settings.max_pending_jobs}")

    # Check service configurations
    if pipeline.transcoder.check_available():
        logger.info("[OK] FFmpeg found")
    else:
        logger.warning(f"[!] FFmpeg not found ({settings.ffmpeg_binary}), clip processing will fail")

    if settings.gemini_api_key:
        logger.info("[OK] Gemini AI configured")
    else:
        logger.info("[-] Gemini API key not set (clip suggestions disabled)")

    if settings.session_secret == "change-me":
        logger.warning("[!] SESSION_SECRET is the default value, set it before deploying")

    logger.info(f"[OK] Scheduler polling every {settings.scheduler_interval_seconds}s")
    logger.info("=" * 60)
    logger.info("Server started successfully!")
    logger.info("API Docs: http://localhost:8000/docs")
    logger.info("=" * 60)

    yield

    # Cleanup on shutdown
    await pipeline.stop()
    logger.info("Shutting down ClipForge...")


# Create FastAPI app
app = FastAPI(
    title="ClipForge",
    description="Cut clips from online videos and publish them to TikTok, Instagram and YouTube Shorts",
    version=get_settings().app_version,
    lifespan=lifespan
)

# CORS middleware
settings = get_settings()
cors_origins = settings.cors_allowed_origins or ["http://localhost:8000", "http://127.0.0.1:8000"]
cors_allow_credentials = "*" not in cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Global Exception Handlers
# ============================================================================

@app.exception_handler(ClipForgeError)
async def clipforge_exception_handler(request: Request, exc: ClipForgeError):
    """Handle all ClipForge custom exceptions"""
    if exc.status_code >= 500:
        logger.error(f"ClipForgeError [{exc.code}]: {exc.message}")
    else:
        logger.warning(f"ClipForgeError [{exc.code}]: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(ValueError)
async def validation_exception_handler(request: Request, exc: ValueError):
    """Handle validation errors"""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": str(exc),
            "recoverable": True,
            "recovery_hint": "Check your input parameters and try again."
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle any unhandled exceptions"""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "recoverable": False,
            "recovery_hint": "Check the server logs for details."
        }
    )


# Include routers
app.include_router(system_router)
app.include_router(videos_router)
app.include_router(clips_router)
app.include_router(social_accounts_router)
app.include_router(posts_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clipforge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug
    )
