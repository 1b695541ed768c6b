"""Tests for voice selection and ElevenLabs synthesis."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from promo_shorts.core.config import DEFAULT_VOICE_MAPPING
from promo_shorts.core.exceptions import VoiceSynthesisFailed
from promo_shorts.services.voice_synthesizer import VoiceSynthesizer, select_voice
from promo_shorts.utils.scoped_resources import ScopedResources

DEFAULT_VOICE = "21m00Tcm4TlvDq8ikWAM"


@pytest.mark.parametrize(
    "product,expected",
    [
        ("Wireless Tech Earbuds", "EXAVITQu4vr4xnSDxMaL"),
        ("Gadgets Pro Max", "pNInz6obpgDQGcFmaJgB"),
        ("Luxury Fashion Scarf", "LcfcDJNUP1GQjkzn1xUU"),
        ("Magic Glow Serum", DEFAULT_VOICE),
    ],
)
def test_select_voice(product, expected):
    assert select_voice(product, DEFAULT_VOICE_MAPPING, DEFAULT_VOICE) == expected


def test_select_voice_is_first_match_in_table_order():
    """The table order decides, not the position of the keyword in the label."""
    mapping = [("fitness", "voice-fitness"), ("home", "voice-home")]

    assert select_voice("Home Fitness Mat", mapping, "default") == "voice-fitness"


def test_select_voice_is_case_insensitive():
    assert select_voice("KITCHEN knife", [("kitchen", "voice-kitchen")], "default") == "voice-kitchen"


@pytest.fixture
def resources(settings, logger):
    return ScopedResources(Path(settings.scratch_dir), "1700000000000", logger)


def make_synthesizer(settings, logger, response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return VoiceSynthesizer(settings, logger, session=session), session


def test_synthesize_writes_scoped_file(settings, logger, resources):
    response = MagicMock(status_code=200, content=b"ID3-audio")
    synthesizer, session = make_synthesizer(settings, logger, response=response)

    path = synthesizer.synthesize("Glow all day.", "voice-1", "English", resources)

    assert path.read_bytes() == b"ID3-audio"
    assert path.name == f"voice-1700000000000-{resources.token}.mp3"
    url = session.post.call_args.args[0]
    body = session.post.call_args.kwargs["json"]
    assert url.endswith("/text-to-speech/voice-1")
    assert body["text"] == "Glow all day."
    assert body["model_id"] == "eleven_multilingual_v2"
    assert body["voice_settings"]["stability"] == 0.75
    assert session.post.call_args.kwargs["headers"]["xi-api-key"] == "test-elevenlabs-key"


def test_quota_error_raises(settings, logger, resources):
    response = MagicMock(status_code=401, content=b"", text="")
    response.json.return_value = {"detail": {"status": "quota_exceeded", "message": "Quota exceeded"}}
    synthesizer, _ = make_synthesizer(settings, logger, response=response)

    with pytest.raises(VoiceSynthesisFailed) as exc_info:
        synthesizer.synthesize("Glow all day.", "voice-1", "English", resources)

    assert "401" in exc_info.value.debug
    assert "Quota exceeded" in exc_info.value.debug
    assert exc_info.value.category == "voice"


def test_network_error_raises(settings, logger, resources):
    synthesizer, _ = make_synthesizer(settings, logger, error=requests.exceptions.Timeout("read timed out"))

    with pytest.raises(VoiceSynthesisFailed):
        synthesizer.synthesize("Glow all day.", "voice-1", "English", resources)


def test_empty_audio_raises(settings, logger, resources):
    synthesizer, _ = make_synthesizer(settings, logger, response=MagicMock(status_code=200, content=b""))

    with pytest.raises(VoiceSynthesisFailed):
        synthesizer.synthesize("Glow all day.", "voice-1", "English", resources)


def test_missing_key_fails_without_calling_api(settings, logger, resources):
    settings.elevenlabs_api_key = None
    synthesizer, session = make_synthesizer(settings, logger)

    with pytest.raises(VoiceSynthesisFailed):
        synthesizer.synthesize("Glow all day.", "voice-1", "English", resources)
    session.post.assert_not_called()


def test_voice_for_uses_configured_mapping(settings, logger):
    settings.voice_mapping = [("serum", "voice-serum")]
    synthesizer, _ = make_synthesizer(settings, logger)

    assert synthesizer.voice_for("Magic Glow Serum") == "voice-serum"
    assert synthesizer.voice_for("Desk Lamp") == settings.default_voice_id
