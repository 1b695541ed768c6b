"""
FastAPI entrypoint for the Promo Shorts Engine.

* POST /api/generate runs one job and answers once the video is published
* Rendered files are served under /videos
* Startup aborts when the ffmpeg binary cannot be found
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from promo_shorts.api.routes_video import router as videos_router
from promo_shorts.core.config import settings
from promo_shorts.core.logging_config import get_logger, setup_logging
from promo_shorts.services.compositor import resolve_ffmpeg_binary

# Setup logging
setup_logging(log_level=settings.log_level, log_file=Path(settings.log_file) if settings.log_file else None)
logger = get_logger(__name__)

videos_dir = Path(settings.output_dir) / "videos"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: DependencyUnavailable propagates and aborts the server
    ffmpeg_path = resolve_ffmpeg_binary(settings.ffmpeg_binary)
    videos_dir.mkdir(parents=True, exist_ok=True)
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"FFmpeg: {ffmpeg_path}")
    logger.info(f"Output directory: {videos_dir.resolve()}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info("=" * 60)
    yield
    # Shutdown
    logger.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Promo Shorts Engine - turns a product name into a vertical promo video",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(videos_router)
app.mount("/videos", StaticFiles(directory=str(videos_dir), check_dir=False), name="videos")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "endpoints": {
            "generate_video": "/api/generate",
            "health": "/api/health",
            "videos": "/videos/{filename}",
            "docs": "/docs",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "promo_shorts.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
