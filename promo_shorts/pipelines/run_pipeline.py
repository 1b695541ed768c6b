"""Command-line runner - generates one promo video without the HTTP server."""

import argparse
import sys
from pathlib import Path

from promo_shorts.core.config import settings
from promo_shorts.core.exceptions import DependencyUnavailable, PipelineError
from promo_shorts.core.logging_config import get_logger, setup_logging
from promo_shorts.models.schemas import AudioMode, Job
from promo_shorts.pipelines.orchestrator import PipelineOrchestrator
from promo_shorts.services.compositor import resolve_ffmpeg_binary
from promo_shorts.services.script_generator import MOOD_DIRECTIONS
from promo_shorts.utils.error_handler import classify_error, debug_detail


def main() -> int:
    """Main entrypoint for a single pipeline run."""
    parser = argparse.ArgumentParser(
        description="Promo Shorts Engine - generate one vertical promo video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--product",
        type=str,
        default="Amazing Product",
        help="Product name the script is written for (default: Amazing Product)",
    )
    parser.add_argument(
        "--mood",
        type=str,
        default="exciting",
        choices=sorted(MOOD_DIRECTIONS),
        help="Mood of the script (default: exciting)",
    )
    parser.add_argument(
        "--language",
        type=str,
        default="English",
        help="Spoken language of the script and voiceover (default: English)",
    )
    parser.add_argument(
        "--audio",
        type=str,
        default=AudioMode.VOICE_AND_MUSIC.value,
        choices=[mode.value for mode in AudioMode],
        help="Audio tracks to include (default: voice-and-music)",
    )
    parser.add_argument(
        "--captions",
        action="store_true",
        help="Burn the script lines in as captions",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    args = parser.parse_args()

    setup_logging(args.log_level, Path(settings.log_file) if settings.log_file else None)
    logger = get_logger(__name__)

    try:
        resolve_ffmpeg_binary(settings.ffmpeg_binary)
    except DependencyUnavailable as e:
        logger.error(f"❌ {e.message} ({e.debug})")
        return 1

    job = Job(
        product_label=args.product.strip() or "Amazing Product",
        mood=args.mood,
        language=args.language,
        audio_mode=AudioMode(args.audio),
        captions_enabled=args.captions,
    )
    orchestrator = PipelineOrchestrator(settings, logger)

    try:
        result = orchestrator.run(job)
    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        return 1
    except PipelineError as e:
        _, message = classify_error(e)
        logger.error(f"❌ {message}")
        logger.debug(f"Detail: {debug_detail(e)}")
        return 1

    logger.info("=" * 60)
    logger.info("VIDEO READY")
    logger.info("=" * 60)
    logger.info(f"File: {result.render.output_path}")
    logger.info(f"URL: {settings.public_base_url.rstrip('/')}{result.render.output_locator}")
    logger.info(f"Duration: {result.render.duration:.1f}s at {result.render.resolution}")
    logger.info(f"Voice: {result.voice_id}")
    for line in result.script.lines:
        logger.info(f"  {line.index + 1}. {line.text}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
