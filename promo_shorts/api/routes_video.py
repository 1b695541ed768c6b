"""FastAPI routes for promo video generation."""

import shutil
from functools import lru_cache

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from promo_shorts.core.config import settings
from promo_shorts.core.logging_config import get_logger
from promo_shorts.models.schemas import (
    ErrorResponse,
    GenerateVideoRequest,
    GenerateVideoResponse,
    Job,
    VideoMetadata,
)
from promo_shorts.pipelines.orchestrator import PipelineOrchestrator
from promo_shorts.utils.error_handler import classify_error, debug_detail

router = APIRouter(prefix="/api", tags=["videos"])


@lru_cache(maxsize=1)
def get_orchestrator() -> PipelineOrchestrator:
    """Process-wide orchestrator; it holds no per-job state."""
    return PipelineOrchestrator(settings, get_logger("promo_shorts.pipeline"))


@router.post(
    "/generate",
    response_model=GenerateVideoResponse,
    responses={500: {"model": ErrorResponse}},
)
def generate_video(request: GenerateVideoRequest):
    """
    Generate a promo video.

    Pipeline:
    ScriptGenerator → AssetResolver (+ VoiceSynthesizer) → TimingPlanner → RenderGraphBuilder → Compositor

    Runs in the server's thread pool; the response is sent once the video is published.
    """
    job = Job(
        product_label=request.product_label,
        mood=request.mood,
        language=request.language,
        audio_mode=request.audio_option,
        captions_enabled=request.include_subtitles,
    )
    logger = get_logger(__name__, job_id=job.job_id)
    logger.info("=" * 60)
    logger.info(f"🎬 Generate request: {job.product_label} ({job.mood}, {job.language})")
    logger.info("=" * 60)

    try:
        result = get_orchestrator().run(job)
    except Exception as e:
        _, message = classify_error(e)
        error = ErrorResponse(
            message=message,
            error=debug_detail(e),
            kind=type(e).__name__,
            timestamp=job.job_id,
        )
        return JSONResponse(status_code=500, content=error.model_dump())

    render = result.render
    return GenerateVideoResponse(
        video_url=f"{settings.public_base_url.rstrip('/')}{render.output_locator}",
        script=result.script.raw_text,
        script_lines=result.script.texts,
        metadata=VideoMetadata(
            duration=render.duration,
            resolution=render.resolution,
            voice=result.voice_id,
            mood=job.mood,
            audio=job.audio_mode,
            audio_tracks=list(render.audio_tracks),
            subtitles=job.captions_enabled,
        ),
    )


@router.get("/health")
def health() -> dict:
    """Health check with the configured external capabilities."""
    orchestrator = get_orchestrator()
    return {
        "status": "healthy",
        "providers": {
            "text": orchestrator.script_generator.llm_client.provider_names,
            "stock_search": orchestrator.asset_resolver.search_client.is_configured,
            "voice": orchestrator.voice_synthesizer.is_configured,
            "render_engine": shutil.which(settings.ffmpeg_binary) is not None,
        },
    }
