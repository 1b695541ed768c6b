"""Pydantic models and schemas for the promo video pipeline."""

import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================


class AudioMode(str, Enum):
    """Which audio tracks a job should carry."""

    VOICE_AND_MUSIC = "voice-and-music"
    VOICE_ONLY = "voice-only"
    MUSIC_ONLY = "music-only"
    NONE = "none"

    @property
    def includes_voice(self) -> bool:
        return self in (AudioMode.VOICE_AND_MUSIC, AudioMode.VOICE_ONLY)

    @property
    def includes_music(self) -> bool:
        return self in (AudioMode.VOICE_AND_MUSIC, AudioMode.MUSIC_ONLY)


class QualityTier(str, Enum):
    """Declared quality of a stock clip rendition, ordered by rank."""

    SD = "sd"
    HD = "hd"
    UHD = "uhd"

    @property
    def rank(self) -> int:
        return _QUALITY_RANKS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["QualityTier"]:
        """Map a provider quality label to a tier, None when unknown."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_QUALITY_RANKS = {QualityTier.SD: 0, QualityTier.HD: 1, QualityTier.UHD: 2}


class JobState(str, Enum):
    """Lifecycle of one video job."""

    RECEIVED = "received"
    SCRIPT_VALIDATED = "script_validated"
    ASSETS_RESOLVING = "assets_resolving"
    ASSETS_RESOLVED = "assets_resolved"
    AUDIO_PREPARING = "audio_preparing"
    AUDIO_READY = "audio_ready"
    COMPOSING = "composing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


# ============================================================================
# Job & Script Models
# ============================================================================


class Job(BaseModel):
    """One video-generation request."""

    product_label: str = Field(..., min_length=1, description="Product name shown to the script writer")
    mood: str = Field(default="exciting", description="Mood/tone tag")
    language: str = Field(default="English", description="Spoken language of the script")
    audio_mode: AudioMode = Field(default=AudioMode.VOICE_AND_MUSIC, description="Audio tracks to include")
    captions_enabled: bool = Field(default=False, description="Burn script lines in as captions")
    created_at: int = Field(
        default_factory=lambda: int(time.time() * 1000),
        description="Creation timestamp in milliseconds, used as the correlation id",
    )

    @property
    def job_id(self) -> str:
        return str(self.created_at)


class ScriptLine(BaseModel):
    """One caption/narration fragment of the script."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Position in the script (0-indexed)")
    text: str = Field(..., min_length=1, description="Line text")

    @property
    def word_count(self) -> int:
        return len(self.text.split())


class Script(BaseModel):
    """Generated script: raw model output plus the parsed lines."""

    raw_text: str = Field(..., description="Raw text returned by the text-generation capability")
    lines: list[ScriptLine] = Field(default_factory=list, description="Validated, ordered lines")

    @property
    def texts(self) -> list[str]:
        return [line.text for line in self.lines]

    @property
    def narration_text(self) -> str:
        """Lines joined into one narration paragraph."""
        return ". ".join(line.text.rstrip(".") for line in self.lines) + "."


# ============================================================================
# Asset Models
# ============================================================================


class SearchFilters(BaseModel):
    """Filters forwarded to the stock-footage search capability."""

    min_duration: float = Field(default=10.0, description="Minimum clip duration in seconds")
    max_duration: float = Field(default=30.0, description="Maximum clip duration in seconds")
    orientation: str = Field(default="portrait", description="Clip orientation")


class AssetCandidate(BaseModel):
    """Reference to an externally hosted video clip."""

    model_config = ConfigDict(frozen=True)

    locator: str = Field(..., min_length=1, description="Direct media URL")
    duration: float = Field(..., ge=0, description="Declared duration in seconds")
    quality: Optional[QualityTier] = Field(default=None, description="Declared quality tier")


# ============================================================================
# Timing Models
# ============================================================================


class SegmentTiming(BaseModel):
    """Placement of one script line on the output timeline."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Script line index")
    segment_start: float = Field(..., ge=0, description="Segment start in seconds")
    segment_end: float = Field(..., ge=0, description="Segment end in seconds")
    caption_visible_from: float = Field(..., ge=0, description="Caption window start in seconds")
    caption_visible_to: float = Field(..., ge=0, description="Caption window end in seconds")

    @property
    def duration(self) -> float:
        return self.segment_end - self.segment_start


class TimingPlan(BaseModel):
    """Per-segment timing of one job, read-only once computed."""

    model_config = ConfigDict(frozen=True)

    segments: tuple[SegmentTiming, ...] = Field(..., description="Contiguous segments in line order")
    segment_duration: float = Field(..., gt=0, description="Duration of every segment in seconds")
    total_duration: float = Field(..., gt=0, description="Sum of all segment durations")
    duration_ceiling: float = Field(..., gt=0, description="Hard ceiling the plan was computed against")


# ============================================================================
# Render Result
# ============================================================================


class RenderResult(BaseModel):
    """A completed, published render."""

    model_config = ConfigDict(frozen=True)

    output_locator: str = Field(..., description="Public relative locator, e.g. /videos/final-video-<id>.mp4")
    output_path: str = Field(..., description="Absolute path of the published file")
    duration: float = Field(..., gt=0, description="Output duration in seconds")
    width: int = Field(..., description="Output width in pixels")
    height: int = Field(..., description="Output height in pixels")
    audio_tracks: tuple[str, ...] = Field(default=(), description="Audio tracks included (voice, music)")

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


class JobResult(BaseModel):
    """Everything a successful job hands back to its caller."""

    job: Job
    script: Script
    voice_id: str
    render: RenderResult


# ============================================================================
# API Models
# ============================================================================


class GenerateVideoRequest(BaseModel):
    """Request body of POST /api/generate (accepts the web form's camelCase names)."""

    model_config = ConfigDict(populate_by_name=True)

    product_name: Optional[str] = Field(default=None, alias="productName", description="Product name")
    product_url: Optional[str] = Field(default=None, alias="productUrl", description="Product page URL")
    mood: str = Field(default="exciting", description="Mood/tone of the video")
    language: str = Field(default="English", description="Spoken language")
    audio_option: AudioMode = Field(default=AudioMode.VOICE_AND_MUSIC, alias="audioOption", description="Audio mode")
    include_subtitles: bool = Field(default=False, alias="includeSubtitles", description="Burn in captions")

    @property
    def product_label(self) -> str:
        return (self.product_name or "").strip() or (self.product_url or "").strip() or "Amazing Product"


class VideoMetadata(BaseModel):
    """Descriptive metadata of a rendered video."""

    model_config = ConfigDict(populate_by_name=True)

    duration: float = Field(..., description="Duration in seconds")
    format: str = Field(default="TikTok Ready (9:16)", description="Target format")
    resolution: str = Field(..., description="WIDTHxHEIGHT")
    voice: str = Field(..., description="Selected voice id")
    mood: str = Field(..., description="Mood tag")
    audio: AudioMode = Field(..., description="Audio mode requested")
    audio_tracks: list[str] = Field(default_factory=list, alias="audioTracks", description="Tracks included")
    subtitles: bool = Field(..., description="Whether captions were burned in")


class GenerateVideoResponse(BaseModel):
    """Successful response of POST /api/generate."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    video_url: str = Field(..., alias="videoUrl", description="Public URL of the rendered video")
    script: str = Field(..., description="Raw script text")
    script_lines: list[str] = Field(..., alias="scriptLines", description="Parsed script lines")
    metadata: VideoMetadata


class ErrorResponse(BaseModel):
    """Failure response of POST /api/generate."""

    success: bool = Field(default=False)
    message: str = Field(..., description="User-facing, category-specific message")
    error: Optional[str] = Field(default=None, description="Debug detail")
    kind: str = Field(..., description="Error kind, e.g. InsufficientAssets")
    timestamp: str = Field(..., description="Job correlation id")
