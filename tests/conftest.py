"""Shared pytest fixtures and configuration."""

import pytest

from promo_shorts.core.config import Settings
from promo_shorts.core.logging_config import get_logger
from promo_shorts.models.schemas import AssetCandidate, QualityTier


@pytest.fixture
def settings(tmp_path):
    """Create test settings isolated from the environment and the working directory."""
    return Settings(
        _env_file=None,
        google_api_key=None,
        openai_api_key=None,
        pexels_api_key="test-pexels-key",
        elevenlabs_api_key="test-elevenlabs-key",
        output_dir=str(tmp_path / "public"),
        music_dir=str(tmp_path / "public" / "music"),
        scratch_dir=str(tmp_path / "scratch"),
        enable_rate_limiting=False,
        max_parallel_api_calls=4,
    )


@pytest.fixture
def logger():
    """Create test logger instance."""
    return get_logger(__name__)


@pytest.fixture
def make_candidate():
    """Factory for admissible stock clips."""

    def _make(name: str, duration: float = 15.0, quality: QualityTier = QualityTier.HD) -> AssetCandidate:
        return AssetCandidate(locator=f"https://videos.example.com/{name}.mp4", duration=duration, quality=quality)

    return _make
