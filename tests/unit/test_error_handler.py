"""Tests for error classification."""

import pytest

from promo_shorts.core.exceptions import (
    ContentGenerationFailed,
    DependencyUnavailable,
    InsufficientAssets,
    InsufficientScriptLines,
    RenderEngineError,
    RenderGraphError,
    VoiceSynthesisFailed,
)
from promo_shorts.utils.error_handler import classify_error, debug_detail, format_error_message


@pytest.mark.parametrize(
    "error,category,message",
    [
        (
            InsufficientAssets("no clips"),
            "assets",
            "Video generation failed: Could not find suitable videos. Try a different product or mood.",
        ),
        (
            VoiceSynthesisFailed("quota"),
            "voice",
            "Video generation failed: Voice generation failed. Check ElevenLabs API key and quota.",
        ),
        (
            ContentGenerationFailed("providers down"),
            "script",
            "Video generation failed: Script generation failed. Try again with different parameters.",
        ),
        (
            InsufficientScriptLines("2 lines"),
            "script",
            "Video generation failed: Script generation failed. Try again with different parameters.",
        ),
        (
            RenderEngineError("exit 1"),
            "render",
            "Video generation failed: Video processing failed. Check FFmpeg installation.",
        ),
        (
            RenderGraphError("unescaped quote"),
            "render",
            "Video generation failed: Video processing failed. Check FFmpeg installation.",
        ),
    ],
)
def test_classify_pipeline_errors(error, category, message):
    assert classify_error(error) == (category, message)


def test_provider_details_stay_out_of_the_message():
    error = VoiceSynthesisFailed("Failed to create voiceover", debug="ElevenLabs API returned status 401: bad key")

    _, message = classify_error(error)

    assert "401" not in message
    assert debug_detail(error) == "Failed to create voiceover: ElevenLabs API returned status 401: bad key"


def test_unknown_errors_fall_back_to_raw_message():
    assert classify_error(ValueError("boom")) == ("internal", "Video generation failed: boom")


def test_dependency_error_is_config():
    assert classify_error(DependencyUnavailable("ffmpeg missing"))[0] == "config"
    assert DependencyUnavailable("ffmpeg missing").kind == "DependencyUnavailable"


def test_format_error_message():
    error = InsufficientAssets("Could not find any suitable videos.", debug="product='Serum'")

    message = format_error_message(
        "Resolving assets",
        error,
        context={"job_id": "1700000000000"},
        suggestion="Try a different mood",
    )

    assert "Resolving assets failed (job_id=1700000000000)" in message
    assert "InsufficientAssets: Could not find any suitable videos." in message
    assert "Detail: product='Serum'" in message
    assert "Suggestion: Try a different mood" in message
