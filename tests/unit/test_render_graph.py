"""Tests for the render graph builder."""

from pathlib import Path

import pytest

from promo_shorts.core.exceptions import RenderGraphError
from promo_shorts.services.render_graph import (
    AudioMixNode,
    AudioTrimNode,
    ConcatNode,
    DrawTextNode,
    PassthroughNode,
    RenderGraphBuilder,
    TrimNode,
)
from promo_shorts.services.timing_planner import plan_timing

CAPTIONS = [
    "Stop scrolling",
    "Hydrates in seconds",
    "Everyone is glowing",
    "Tap the link now",
]


@pytest.fixture
def builder(settings, logger):
    return RenderGraphBuilder(settings, logger)


@pytest.fixture
def candidates(make_candidate):
    return [make_candidate(f"clip-{i}") for i in range(4)]


def test_concat_follows_clip_order(builder, candidates):
    graph = builder.build(candidates, CAPTIONS, plan_timing(4, 30.0), captions_enabled=True)

    concat = graph.nodes_of(ConcatNode)
    assert len(concat) == 1
    assert concat[0].inputs == ("v0", "v1", "v2", "v3")
    assert concat[0].output == graph.video_output
    assert [graph_input.locator for graph_input in graph.video_inputs] == [c.locator for c in candidates]


def test_each_segment_is_normalized_and_trimmed(builder, candidates):
    graph = builder.build(candidates, CAPTIONS, plan_timing(4, 30.0))

    trims = graph.nodes_of(TrimNode)
    assert [trim.duration for trim in trims] == [7.5] * 4
    assert graph.node_producing("v2scaled").inputs == ("2:v",)
    assert graph.width == 1080
    assert graph.height == 1920


def test_captions_are_gated_to_their_segment(builder, candidates):
    graph = builder.build(candidates, CAPTIONS, plan_timing(4, 30.0), captions_enabled=True)

    captions = graph.nodes_of(DrawTextNode)
    assert [node.text for node in captions] == CAPTIONS
    assert [(node.visible_from, node.visible_to) for node in captions] == [
        (0.0, 7.5),
        (7.5, 15.0),
        (15.0, 22.5),
        (22.5, 30.0),
    ]
    # Every trimmed segment restarts at t=0, so the gate is applied in segment time
    assert all(node.local_window == (0.0, 7.5) for node in captions)


def test_captions_disabled_pass_video_through(builder, candidates):
    graph = builder.build(candidates, CAPTIONS, plan_timing(4, 30.0), captions_enabled=False)

    assert graph.nodes_of(DrawTextNode) == []
    assert len(graph.nodes_of(PassthroughNode)) == 4


def test_missing_caption_passes_segment_through(builder, candidates):
    graph = builder.build(candidates, CAPTIONS[:3], plan_timing(4, 30.0), captions_enabled=True)

    assert isinstance(graph.node_producing("v3"), PassthroughNode)
    assert len(graph.nodes_of(DrawTextNode)) == 3


def test_caption_with_quote_is_escaped(builder, candidates):
    captions = ['Say "wow" today', "It's magic", "Only 10:30", "Last one"]

    graph = builder.build(candidates, captions, plan_timing(4, 30.0), captions_enabled=True)

    node = graph.node_producing("v0")
    assert node.text == 'Say "wow" today'
    assert '\\"' in node.escaped_text
    assert node.escaped_text != node.text


def test_voice_and_music_are_mixed(builder, candidates):
    graph = builder.build(
        candidates,
        CAPTIONS,
        plan_timing(4, 30.0),
        voice_audio=Path("/tmp/voice.mp3"),
        music_audio=Path("/tmp/music.mp3"),
    )

    mix = graph.nodes_of(AudioMixNode)
    assert len(mix) == 1
    assert mix[0].inputs == ("voice", "music")
    assert mix[0].duration_mode == "shortest"
    assert graph.node_producing("voice").volume == 1.0
    assert graph.node_producing("music").volume == 0.2
    assert graph.node_producing("voice").inputs == ("4:a",)
    assert graph.node_producing("music").inputs == ("5:a",)
    assert graph.audio_output == "outa"
    assert graph.audio_tracks == ("voice", "music")


def test_voice_only(builder, candidates):
    graph = builder.build(candidates, CAPTIONS, plan_timing(4, 30.0), voice_audio=Path("/tmp/voice.mp3"))

    trims = graph.nodes_of(AudioTrimNode)
    assert len(trims) == 1
    assert trims[0].volume == 1.0
    assert trims[0].output == "outa"
    assert graph.nodes_of(AudioMixNode) == []
    assert graph.audio_tracks == ("voice",)


def test_music_only_is_attenuated_without_mix(builder, candidates):
    graph = builder.build(candidates, CAPTIONS, plan_timing(4, 30.0), music_audio=Path("/tmp/music.mp3"))

    trims = graph.nodes_of(AudioTrimNode)
    assert len(trims) == 1
    assert trims[0].volume == 0.3
    assert trims[0].duration == 30.0
    assert graph.nodes_of(AudioMixNode) == []
    assert graph.audio_tracks == ("music",)


def test_no_audio(builder, candidates):
    graph = builder.build(candidates, CAPTIONS, plan_timing(4, 30.0))

    assert graph.audio_output is None
    assert graph.nodes_of(AudioTrimNode) == []
    assert graph.audio_tracks == ()


def test_segment_count_follows_resolved_clips(builder, candidates):
    """Three clips give a three-segment graph against a three-segment plan."""
    graph = builder.build(candidates[:3], CAPTIONS, plan_timing(3, 30.0), captions_enabled=True)

    assert graph.nodes_of(ConcatNode)[0].inputs == ("v0", "v1", "v2")
    assert graph.total_duration == 24.0
    assert graph.duration_cap == 30.0


def test_plan_mismatch_is_rejected(builder, candidates):
    with pytest.raises(RenderGraphError):
        builder.build(candidates, CAPTIONS, plan_timing(3, 30.0))


def test_empty_candidates_are_rejected(builder):
    with pytest.raises(RenderGraphError):
        builder.build([], CAPTIONS, plan_timing(4, 30.0))
