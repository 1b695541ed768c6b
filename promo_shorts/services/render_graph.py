"""Render Graph - engine-independent composition plan of one job."""

from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from promo_shorts.core.config import Settings
from promo_shorts.core.exceptions import RenderGraphError
from promo_shorts.models.schemas import AssetCandidate, SegmentTiming, TimingPlan
from promo_shorts.utils.text_utils import escape_filter_text, is_round_trip_safe, wrap_caption

VIDEO_OUTPUT = "outv"
AUDIO_OUTPUT = "outa"


# ============================================================================
# Nodes
# ============================================================================


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    inputs: tuple[str, ...] = Field(..., min_length=1, description="Input stream labels")
    output: str = Field(..., description="Output stream label")


class ScaleNode(_Node):
    """Scale so the frame covers width x height (aspect preserved, overflow cropped later)."""

    kind: Literal["scale"] = "scale"
    width: int
    height: int


class CropNode(_Node):
    """Centre-crop to exactly width x height."""

    kind: Literal["crop"] = "crop"
    width: int
    height: int


class PixelAspectNode(_Node):
    """Normalize the sample aspect ratio to square pixels."""

    kind: Literal["pixel_aspect"] = "pixel_aspect"
    ratio: str = "1"


class TrimNode(_Node):
    """Keep the first ``duration`` seconds and restart timestamps at zero."""

    kind: Literal["trim"] = "trim"
    duration: float = Field(..., gt=0)


class DrawTextNode(_Node):
    """Bottom-centred caption, gated to its window on the output timeline."""

    kind: Literal["drawtext"] = "drawtext"
    text: str = Field(..., description="Caption text as displayed")
    escaped_text: str = Field(..., description="Caption text escaped for the filter graph")
    segment_start: float = Field(..., ge=0, description="Output time at which this segment starts")
    visible_from: float = Field(..., ge=0, description="Caption window start on the output timeline")
    visible_to: float = Field(..., ge=0, description="Caption window end on the output timeline")
    font_file: Optional[str] = None
    font_size: int = 60
    font_color: str = "white"
    border_width: int = 3
    border_color: str = "black"
    bottom_margin: int = 200

    @property
    def local_window(self) -> tuple[float, float]:
        """Caption window in the segment's own time base (segments start at t=0)."""
        return self.visible_from - self.segment_start, self.visible_to - self.segment_start


class PassthroughNode(_Node):
    """Forward a stream unchanged."""

    kind: Literal["passthrough"] = "passthrough"


class ConcatNode(_Node):
    """Concatenate video segments in input order."""

    kind: Literal["concat"] = "concat"


class AudioTrimNode(_Node):
    """Set one audio source's level and trim it to ``duration`` seconds."""

    kind: Literal["audio_trim"] = "audio_trim"
    volume: float = Field(..., ge=0)
    duration: float = Field(..., gt=0)


class AudioMixNode(_Node):
    """Mix leveled audio streams; the shortest stream decides the length."""

    kind: Literal["audio_mix"] = "audio_mix"
    duration_mode: Literal["shortest", "longest", "first"] = "shortest"


RenderNode = Annotated[
    Union[
        ScaleNode,
        CropNode,
        PixelAspectNode,
        TrimNode,
        DrawTextNode,
        PassthroughNode,
        ConcatNode,
        AudioTrimNode,
        AudioMixNode,
    ],
    Field(discriminator="kind"),
]


class GraphInput(BaseModel):
    """One engine input; its position in RenderGraph.inputs is its stream index."""

    model_config = ConfigDict(frozen=True)

    role: Literal["video", "voice", "music"]
    locator: str = Field(..., description="Remote URL or local file path")

    @property
    def is_remote(self) -> bool:
        return self.locator.startswith(("http://", "https://"))


class RenderGraph(BaseModel):
    """Ordered nodes with explicit labels; immutable once built."""

    model_config = ConfigDict(frozen=True)

    inputs: tuple[GraphInput, ...]
    nodes: tuple[RenderNode, ...]
    video_output: str = VIDEO_OUTPUT
    audio_output: Optional[str] = None
    width: int
    height: int
    total_duration: float = Field(..., gt=0)
    duration_cap: float = Field(..., gt=0)
    audio_tracks: tuple[str, ...] = ()

    def nodes_of(self, node_type: type) -> list[Any]:
        return [node for node in self.nodes if isinstance(node, node_type)]

    def node_producing(self, label: str) -> Optional[Any]:
        for node in self.nodes:
            if node.output == label:
                return node
        return None

    @property
    def video_inputs(self) -> list[GraphInput]:
        return [graph_input for graph_input in self.inputs if graph_input.role == "video"]


def stream_label(input_index: int, stream: str) -> str:
    """Label of an input stream, e.g. ``0:v`` or ``4:a``."""
    return f"{input_index}:{stream}"


# ============================================================================
# Builder
# ============================================================================


class RenderGraphBuilder:
    """Builds the render graph of a job from clips, captions, timing and audio."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the builder.

        Args:
            settings: Application settings (resolution, caption style, audio levels)
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

    def build(
        self,
        candidates: list[AssetCandidate],
        captions: list[str],
        timing_plan: TimingPlan,
        voice_audio: Optional[Path] = None,
        music_audio: Optional[Path] = None,
        captions_enabled: bool = False,
    ) -> RenderGraph:
        """
        Build the render graph.

        Every clip becomes scale -> crop -> pixel aspect -> trim, then either a
        gated caption or a passthrough; segments are concatenated in clip
        order. Audio follows the first matching case: voice + music mixed,
        voice alone, music alone, or no audio stream.

        Args:
            candidates: Resolved clips in segment order
            captions: Caption text per segment index (may be shorter than candidates)
            timing_plan: Timing plan with one segment per clip
            voice_audio: Optional narration file
            music_audio: Optional background music file
            captions_enabled: Whether captions are drawn

        Returns:
            Immutable render graph

        Raises:
            RenderGraphError: If the inputs are inconsistent or a caption cannot be escaped
        """
        if not candidates:
            raise RenderGraphError("Render graph needs at least one video clip")
        if len(candidates) != len(timing_plan.segments):
            raise RenderGraphError(
                f"Timing plan has {len(timing_plan.segments)} segments for {len(candidates)} clips"
            )

        width, height = self.settings.video_width, self.settings.video_height
        inputs = [GraphInput(role="video", locator=c.locator) for c in candidates]
        nodes: list[Any] = []
        segment_labels = []

        for i, segment in enumerate(timing_plan.segments):
            source = stream_label(i, "v")
            nodes.append(ScaleNode(inputs=(source,), output=f"v{i}scaled", width=width, height=height))
            nodes.append(CropNode(inputs=(f"v{i}scaled",), output=f"v{i}cropped", width=width, height=height))
            nodes.append(PixelAspectNode(inputs=(f"v{i}cropped",), output=f"v{i}square"))
            nodes.append(TrimNode(inputs=(f"v{i}square",), output=f"v{i}base", duration=segment.duration))

            caption = captions[i].strip() if i < len(captions) and captions[i] else ""
            if captions_enabled and caption:
                nodes.append(self._caption_node(caption, f"v{i}base", f"v{i}", segment))
            else:
                nodes.append(PassthroughNode(inputs=(f"v{i}base",), output=f"v{i}"))
            segment_labels.append(f"v{i}")

        nodes.append(ConcatNode(inputs=tuple(segment_labels), output=VIDEO_OUTPUT))

        audio_output, audio_tracks = self._audio_plan(inputs, nodes, voice_audio, music_audio, timing_plan)

        graph = RenderGraph(
            inputs=tuple(inputs),
            nodes=tuple(nodes),
            audio_output=audio_output,
            width=width,
            height=height,
            total_duration=timing_plan.total_duration,
            duration_cap=timing_plan.duration_ceiling,
            audio_tracks=audio_tracks,
        )
        self.logger.info(
            f"Render graph: {len(candidates)} segments, {len(graph.nodes)} nodes, "
            f"audio={'+'.join(audio_tracks) or 'none'}, captions={'on' if captions_enabled else 'off'}"
        )
        return graph

    def _caption_node(self, caption: str, source: str, output: str, segment: SegmentTiming) -> DrawTextNode:
        text = wrap_caption(caption, self.settings.caption_max_chars_per_line)
        escaped = escape_filter_text(text)
        if not is_round_trip_safe(text, escaped):
            raise RenderGraphError("Caption text could not be escaped", debug=repr(caption))
        return DrawTextNode(
            inputs=(source,),
            output=output,
            text=text,
            escaped_text=escaped,
            segment_start=segment.segment_start,
            visible_from=segment.caption_visible_from,
            visible_to=segment.caption_visible_to,
            font_file=self.settings.caption_font_file,
            font_size=self.settings.caption_font_size,
            font_color=self.settings.caption_font_color,
            border_width=self.settings.caption_border_width,
            border_color=self.settings.caption_border_color,
            bottom_margin=self.settings.caption_bottom_margin,
        )

    def _audio_plan(
        self,
        inputs: list[GraphInput],
        nodes: list[Any],
        voice_audio: Optional[Path],
        music_audio: Optional[Path],
        timing_plan: TimingPlan,
    ) -> tuple[Optional[str], tuple[str, ...]]:
        # Audio never outlasts the video timeline, which itself is within the ceiling
        duration = timing_plan.total_duration

        voice_label = music_label = None
        if voice_audio is not None:
            inputs.append(GraphInput(role="voice", locator=str(voice_audio)))
            voice_label = stream_label(len(inputs) - 1, "a")
        if music_audio is not None:
            inputs.append(GraphInput(role="music", locator=str(music_audio)))
            music_label = stream_label(len(inputs) - 1, "a")

        if voice_label and music_label:
            nodes.append(
                AudioTrimNode(inputs=(voice_label,), output="voice", volume=self.settings.voice_volume, duration=duration)
            )
            nodes.append(
                AudioTrimNode(
                    inputs=(music_label,), output="music", volume=self.settings.mixed_music_volume, duration=duration
                )
            )
            nodes.append(AudioMixNode(inputs=("voice", "music"), output=AUDIO_OUTPUT, duration_mode="shortest"))
            return AUDIO_OUTPUT, ("voice", "music")

        if voice_label:
            nodes.append(
                AudioTrimNode(inputs=(voice_label,), output=AUDIO_OUTPUT, volume=self.settings.voice_volume, duration=duration)
            )
            return AUDIO_OUTPUT, ("voice",)

        if music_label:
            nodes.append(
                AudioTrimNode(
                    inputs=(music_label,), output=AUDIO_OUTPUT, volume=self.settings.solo_music_volume, duration=duration
                )
            )
            return AUDIO_OUTPUT, ("music",)

        return None, ()
