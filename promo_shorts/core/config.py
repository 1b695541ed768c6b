"""Application configuration using pydantic-settings."""

import tempfile
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Ordered (keyword, voice_id) pairs; the first keyword found in the product label wins.
DEFAULT_VOICE_MAPPING: list[tuple[str, str]] = [
    # Male voices
    ("tech", "EXAVITQu4vr4xnSDxMaL"),  # Antoni
    ("gadgets", "pNInz6obpgDQGcFmaJgB"),  # Adam
    ("electronics", "VR6AewLTigWG4xSOukaG"),  # Richard
    ("automotive", "nPczCjzI2devNBz1zQrb"),  # Brian
    ("sports", "EXAVITQu4vr4xnSDxMaL"),  # Antoni
    # Female voices
    ("beauty", "21m00Tcm4TlvDq8ikWAM"),  # Rachel
    ("skincare", "21m00Tcm4TlvDq8ikWAM"),  # Rachel
    ("fashion", "LcfcDJNUP1GQjkzn1xUU"),  # Emily
    ("clothing", "LcfcDJNUP1GQjkzn1xUU"),  # Emily
    ("jewelry", "21m00Tcm4TlvDq8ikWAM"),  # Rachel
    ("food", "LcfcDJNUP1GQjkzn1xUU"),  # Emily
    ("snacks", "LcfcDJNUP1GQjkzn1xUU"),  # Emily
    ("health", "21m00Tcm4TlvDq8ikWAM"),  # Rachel
    ("fitness", "LcfcDJNUP1GQjkzn1xUU"),  # Emily
    ("home", "LcfcDJNUP1GQjkzn1xUU"),  # Emily
    ("kitchen", "21m00Tcm4TlvDq8ikWAM"),  # Rachel
]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via environment variables or a .env file.
    See .env.example for a template.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================================================
    # Application Settings
    # ========================================================================
    app_name: str = Field(default="Promo Shorts Engine", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_file: Optional[str] = Field(default=None, description="Optional path of a rotating log file")
    host: str = Field(default="0.0.0.0", description="Bind address of the HTTP server")
    port: int = Field(default=3001, description="Port of the HTTP server")
    public_base_url: str = Field(
        default="http://localhost:3001",
        description="Base URL prepended to output locators in API responses",
    )
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    # ========================================================================
    # Text Generation (primary: Gemini, backup: OpenAI)
    # ========================================================================
    google_api_key: Optional[str] = Field(default=None, description="Google Gemini API key (primary)")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model name")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key (backup)")
    openai_model: str = Field(default="gpt-3.5-turbo", description="OpenAI chat model name")
    llm_timeout_seconds: float = Field(default=60.0, description="Timeout for one text-generation call")

    # ========================================================================
    # Stock Footage Search (Pexels)
    # ========================================================================
    pexels_api_key: Optional[str] = Field(default=None, description="Pexels API key")
    pexels_per_page: int = Field(default=10, description="Result page size requested per search")
    pexels_orientation: str = Field(default="portrait", description="Requested clip orientation")
    search_query_suffix: str = Field(
        default="aesthetic", description="Word appended to every stock search query (empty to disable)"
    )
    min_clip_duration: float = Field(default=10.0, description="Shortest admissible clip in seconds")
    max_clip_duration: float = Field(default=30.0, description="Longest admissible clip in seconds")
    min_clip_quality: str = Field(default="hd", description="Minimum quality tier: 'sd', 'hd' or 'uhd'")
    min_assets: int = Field(default=3, description="Distinct assets wanted before the generic fallback pass")
    max_assets: int = Field(default=4, description="Asset count at which the generic fallback pass stops")

    # ========================================================================
    # Speech Synthesis (ElevenLabs)
    # ========================================================================
    elevenlabs_api_key: Optional[str] = Field(default=None, description="ElevenLabs API key")
    elevenlabs_model: str = Field(default="eleven_multilingual_v2", description="ElevenLabs model id")
    voice_stability: float = Field(default=0.75, description="ElevenLabs voice stability")
    voice_similarity_boost: float = Field(default=0.75, description="ElevenLabs similarity boost")
    voice_style: float = Field(default=0.5, description="ElevenLabs style exaggeration")
    voice_speaker_boost: bool = Field(default=True, description="ElevenLabs speaker boost")
    voice_mapping: list[tuple[str, str]] = Field(
        default_factory=lambda: list(DEFAULT_VOICE_MAPPING),
        description="Ordered (category keyword, voice id) pairs, first match wins",
    )
    default_voice_id: str = Field(default="21m00Tcm4TlvDq8ikWAM", description="Voice used when no keyword matches")

    # ========================================================================
    # Timing & Rendering
    # ========================================================================
    max_total_duration: float = Field(default=30.0, description="Hard ceiling of the output duration in seconds")
    max_segment_duration: float = Field(default=8.0, description="Longest single segment in seconds")
    video_width: int = Field(default=1080, description="Output width in pixels (vertical format)")
    video_height: int = Field(default=1920, description="Output height in pixels (vertical format)")
    video_fps: int = Field(default=30, description="Output frame rate")
    video_crf: int = Field(default=23, description="libx264 constant rate factor")
    video_preset: str = Field(default="fast", description="libx264 preset")
    audio_bitrate: str = Field(default="192k", description="AAC bitrate")
    caption_font_file: Optional[str] = Field(default=None, description="Font file used for captions")
    caption_font_size: int = Field(default=60, description="Caption font size")
    caption_font_color: str = Field(default="white", description="Caption font colour")
    caption_border_width: int = Field(default=3, description="Caption outline width")
    caption_border_color: str = Field(default="black", description="Caption outline colour")
    caption_bottom_margin: int = Field(default=200, description="Distance of the caption from the bottom edge")
    caption_max_chars_per_line: int = Field(default=24, description="Captions wrap after this many characters (0 disables)")
    voice_volume: float = Field(default=1.0, description="Voice level")
    mixed_music_volume: float = Field(default=0.2, description="Music level when mixed under voice")
    solo_music_volume: float = Field(default=0.3, description="Music level when music is the only track")

    # ========================================================================
    # Resources & Timeouts
    # ========================================================================
    output_dir: str = Field(default="public", description="Public directory; rendered files go under videos/")
    music_dir: str = Field(default="public/music", description="Background music library")
    scratch_dir: str = Field(default_factory=tempfile.gettempdir, description="Private directory for job temp files")
    ffmpeg_binary: str = Field(default="ffmpeg", description="ffmpeg executable name or path")
    api_timeout_seconds: float = Field(default=30.0, description="Timeout for search and speech API calls")
    download_timeout_seconds: float = Field(default=60.0, description="Timeout for one asset download")
    render_timeout_seconds: float = Field(default=600.0, description="Render engine is killed after this long")

    # ========================================================================
    # Parallelism & Rate Limiting
    # ========================================================================
    max_parallel_api_calls: int = Field(
        default=4,
        description="Maximum number of parallel API calls within a single job (per-line resolution)",
    )
    enable_rate_limiting: bool = Field(
        default=True,
        description="Enable rate limiting for API calls to prevent hitting limits (default: true)",
    )
    llm_rate_limit: int = Field(default=60, description="Text-generation calls per minute")
    pexels_rate_limit: int = Field(default=100, description="Pexels calls per minute")
    elevenlabs_rate_limit: int = Field(default=100, description="ElevenLabs calls per minute")


# Global settings instance
settings = Settings()
