"""Translation of a RenderGraph into an ffmpeg command line."""

from pathlib import Path
from typing import Any, Sequence

from promo_shorts.core.config import Settings
from promo_shorts.core.exceptions import RenderGraphError
from promo_shorts.services.render_graph import (
    AudioMixNode,
    AudioTrimNode,
    ConcatNode,
    CropNode,
    DrawTextNode,
    PassthroughNode,
    PixelAspectNode,
    RenderGraph,
    ScaleNode,
    TrimNode,
    stream_label,
)
from promo_shorts.utils.text_utils import escape_filter_text, is_round_trip_safe


def _num(value: float) -> str:
    """Compact decimal for filter arguments (7.5 -> '7.5', 8.0 -> '8')."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def _filter_body(node: Any) -> str:
    if isinstance(node, ScaleNode):
        return f"scale={node.width}:{node.height}:force_original_aspect_ratio=increase"
    if isinstance(node, CropNode):
        return f"crop={node.width}:{node.height}"
    if isinstance(node, PixelAspectNode):
        return f"setsar={node.ratio}"
    if isinstance(node, TrimNode):
        return f"trim=duration={_num(node.duration)},setpts=PTS-STARTPTS"
    if isinstance(node, DrawTextNode):
        return _drawtext_body(node)
    if isinstance(node, PassthroughNode):
        return "copy"
    if isinstance(node, ConcatNode):
        return f"concat=n={len(node.inputs)}:v=1:a=0"
    if isinstance(node, AudioTrimNode):
        return f"volume={_num(node.volume)},atrim=duration={_num(node.duration)}"
    if isinstance(node, AudioMixNode):
        return f"amix=inputs={len(node.inputs)}:duration={node.duration_mode}:normalize=0"
    raise RenderGraphError(f"Unsupported render node: {type(node).__name__}")


def _drawtext_body(node: DrawTextNode) -> str:
    # Round-trip parse check: an unescaped caption would corrupt the graph
    if not is_round_trip_safe(node.text, node.escaped_text):
        raise RenderGraphError("Caption text is not escaped for the filter graph", debug=repr(node.escaped_text))

    start, end = node.local_window
    options = [f"text={node.escaped_text}", "expansion=none"]
    if node.font_file:
        options.append(f"fontfile={escape_filter_text(node.font_file)}")
    options.extend(
        [
            f"fontsize={node.font_size}",
            f"fontcolor={node.font_color}",
            f"borderw={node.border_width}",
            f"bordercolor={node.border_color}",
            "x=(w-text_w)/2",
            f"y=h-{node.bottom_margin}",
            f"enable='between(t,{_num(start)},{_num(end)})'",
        ]
    )
    return "drawtext=" + ":".join(options)


def validate_graph(graph: RenderGraph) -> None:
    """
    Check label wiring: every node reads existing streams and writes a fresh label.

    Raises:
        RenderGraphError: On dangling or duplicate labels
    """
    available = set()
    for index, graph_input in enumerate(graph.inputs):
        available.add(stream_label(index, "a" if graph_input.role in ("voice", "music") else "v"))

    produced = set()
    for node in graph.nodes:
        for label in node.inputs:
            if label not in available:
                raise RenderGraphError(f"Node {node.kind} reads unknown stream [{label}]")
        if node.output in produced or node.output in available:
            raise RenderGraphError(f"Stream label [{node.output}] is produced twice")
        produced.add(node.output)
        available.add(node.output)

    if graph.video_output not in produced:
        raise RenderGraphError(f"Video output [{graph.video_output}] is never produced")
    if graph.audio_output is not None and graph.audio_output not in produced:
        raise RenderGraphError(f"Audio output [{graph.audio_output}] is never produced")


def serialize_filter_graph(graph: RenderGraph) -> str:
    """
    Render the graph as an ffmpeg ``-filter_complex`` string.

    Args:
        graph: Render graph

    Returns:
        Filter graph text, one filter per node in node order
    """
    validate_graph(graph)
    parts = []
    for node in graph.nodes:
        sources = "".join(f"[{label}]" for label in node.inputs)
        parts.append(f"{sources}{_filter_body(node)}[{node.output}]")
    return ";".join(parts)


def build_ffmpeg_command(
    graph: RenderGraph,
    input_paths: Sequence[Path],
    output_path: Path,
    settings: Settings,
    ffmpeg_binary: str = "ffmpeg",
) -> list[str]:
    """
    Build the full ffmpeg argument list.

    Args:
        graph: Render graph
        input_paths: Local files in the same order as graph.inputs
        output_path: File ffmpeg writes to
        settings: Application settings (encoding parameters)
        ffmpeg_binary: Resolved ffmpeg executable

    Returns:
        Argument list suitable for subprocess
    """
    if len(input_paths) != len(graph.inputs):
        raise RenderGraphError(f"Graph expects {len(graph.inputs)} inputs, got {len(input_paths)} files")

    cmd = [ffmpeg_binary, "-y", "-hide_banner"]
    for path in input_paths:
        cmd.extend(["-i", str(path)])

    cmd.extend(["-filter_complex", serialize_filter_graph(graph), "-map", f"[{graph.video_output}]"])
    if graph.audio_output:
        cmd.extend(["-map", f"[{graph.audio_output}]"])

    cmd.extend(
        [
            "-r", str(settings.video_fps),
            "-c:v", "libx264",
            "-preset", settings.video_preset,
            "-crf", str(settings.video_crf),
            "-pix_fmt", "yuv420p",
        ]
    )
    if graph.audio_output:
        cmd.extend(["-c:a", "aac", "-b:a", settings.audio_bitrate])
    cmd.extend(["-t", _num(graph.duration_cap), "-movflags", "+faststart", str(output_path)])
    return cmd
