"""Pipeline orchestrators for the Promo Shorts Engine."""

from promo_shorts.pipelines.orchestrator import JobTracker, PipelineOrchestrator

__all__ = ["JobTracker", "PipelineOrchestrator"]
