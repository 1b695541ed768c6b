"""Timing Planner - lays out equal, back-to-back segments on the output timeline."""

from typing import Any

from promo_shorts.core.config import Settings
from promo_shorts.models.schemas import SegmentTiming, TimingPlan


def plan_timing(line_count: int, total_duration_ceiling: float, max_segment: float = 8.0) -> TimingPlan:
    """
    Compute per-segment timing.

    segment_duration = min(max_segment, ceiling / line_count); segments start at
    0 and follow each other without gaps. Each caption is visible for exactly
    its segment's span.

    Args:
        line_count: Number of segments (one per script line / clip)
        total_duration_ceiling: Hard ceiling of the total duration in seconds
        max_segment: Longest single segment in seconds

    Returns:
        Timing plan whose total duration never exceeds the ceiling
    """
    if line_count < 1:
        raise ValueError(f"line_count must be at least 1, got {line_count}")
    if total_duration_ceiling <= 0 or max_segment <= 0:
        raise ValueError("durations must be positive")

    segment_duration = min(max_segment, total_duration_ceiling / line_count)
    # Shared boundaries keep neighbouring segments exactly contiguous
    boundaries = [i * segment_duration for i in range(line_count + 1)]
    boundaries[-1] = min(boundaries[-1], total_duration_ceiling)

    segments = tuple(
        SegmentTiming(
            index=i,
            segment_start=boundaries[i],
            segment_end=boundaries[i + 1],
            caption_visible_from=boundaries[i],
            caption_visible_to=boundaries[i + 1],
        )
        for i in range(line_count)
    )
    return TimingPlan(
        segments=segments,
        segment_duration=segment_duration,
        total_duration=boundaries[-1],
        duration_ceiling=total_duration_ceiling,
    )


class TimingPlanner:
    """Settings-bound wrapper around plan_timing."""

    def __init__(self, settings: Settings, logger: Any):
        self.settings = settings
        self.logger = logger

    def plan(self, line_count: int) -> TimingPlan:
        timing_plan = plan_timing(
            line_count,
            self.settings.max_total_duration,
            self.settings.max_segment_duration,
        )
        self.logger.info(
            f"Timing: {line_count} segments x {timing_plan.segment_duration:.2f}s "
            f"= {timing_plan.total_duration:.2f}s"
        )
        return timing_plan
