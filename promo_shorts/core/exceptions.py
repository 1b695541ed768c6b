"""Classified pipeline errors."""

from typing import Optional


class PipelineError(Exception):
    """Base class for failures that end a job with a classified reason."""

    category = "internal"

    def __init__(self, message: str, debug: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.debug = debug

    @property
    def kind(self) -> str:
        return type(self).__name__


class ContentGenerationFailed(PipelineError):
    """Every configured text-generation provider failed."""

    category = "script"


class InsufficientScriptLines(PipelineError):
    """The generated script has fewer than the minimum number of usable lines."""

    category = "script"


class InsufficientAssets(PipelineError):
    """No stock clip could be resolved for the job."""

    category = "assets"


class VoiceSynthesisFailed(PipelineError):
    """Speech synthesis failed (quota, network, unknown voice)."""

    category = "voice"


class RenderEngineError(PipelineError):
    """The render engine failed, timed out, or its inputs could not be materialized."""

    category = "render"


class RenderGraphError(RenderEngineError):
    """The render graph is malformed, e.g. a caption value is not escaped."""


class DependencyUnavailable(PipelineError):
    """A required external capability is missing at startup."""

    category = "config"


class AssetResolutionError(Exception):
    """A stock search call failed; retryable, absorbed by the fallback chain."""
