"""Tests for the script generator."""

from unittest.mock import MagicMock

import pytest

from promo_shorts.core.exceptions import ContentGenerationFailed, InsufficientScriptLines
from promo_shorts.models.schemas import ScriptLine
from promo_shorts.services.script_generator import MOOD_DIRECTIONS, ScriptGenerator, parse_script_lines

SCRIPT = """Here is your script:
LINE: Stop scrolling, your skin deserves this glow today
LINE: "Magic Glow Serum hydrates and brightens in seconds"
line: Thousands already swear by their new radiant look
LINE:
LINE: Tap the link and glow up right now
LINE: One line too many for the video"""


@pytest.fixture
def llm_client():
    return MagicMock()


@pytest.fixture
def generator(settings, logger, llm_client):
    return ScriptGenerator(settings, logger, llm_client=llm_client)


def test_parse_keeps_first_four_prefixed_lines():
    lines = parse_script_lines(SCRIPT)

    assert [line.text for line in lines] == [
        "Stop scrolling, your skin deserves this glow today",
        "Magic Glow Serum hydrates and brightens in seconds",
        "Thousands already swear by their new radiant look",
        "Tap the link and glow up right now",
    ]
    assert [line.index for line in lines] == [0, 1, 2, 3]


def test_generate_script(generator, llm_client):
    llm_client.generate.return_value = SCRIPT

    script = generator.generate_script("Magic Glow Serum", "exciting", "English")

    assert len(script.lines) == 4
    assert script.raw_text == SCRIPT
    assert script.narration_text.startswith("Stop scrolling, your skin deserves this glow today. Magic Glow")
    assert script.narration_text.endswith("right now.")


def test_too_few_lines_raise(generator, llm_client):
    llm_client.generate.return_value = "LINE: Only one line\nLINE: And a second one"

    with pytest.raises(InsufficientScriptLines):
        generator.generate_script("Magic Glow Serum", "exciting", "English")


def test_three_lines_are_enough(generator, llm_client):
    llm_client.generate.return_value = "LINE: one two three four five six\n" * 3

    assert len(generator.generate_script("Serum", "funny", "English").lines) == 3


def test_provider_failure_propagates(generator, llm_client):
    llm_client.generate.side_effect = ContentGenerationFailed("All AI providers failed or are not configured.")

    with pytest.raises(ContentGenerationFailed):
        generator.generate_script("Magic Glow Serum", "exciting", "English")


def test_prompt_carries_mood_language_and_format(generator):
    prompt = generator.build_script_prompt("Magic Glow Serum", "luxurious", "Spanish")

    assert MOOD_DIRECTIONS["luxurious"] in prompt
    assert "Write the script in Spanish" in prompt
    assert '"Magic Glow Serum"' in prompt
    assert 'each starting with "LINE:"' in prompt


def test_unknown_mood_uses_exciting(generator):
    prompt = generator.build_script_prompt("Serum", "sleepy", "English")

    assert MOOD_DIRECTIONS["exciting"] in prompt


def test_visual_keywords_keep_first_line(generator, llm_client):
    llm_client.generate.return_value = '"glowing skin serum bottle"\nThese keywords show the product.'

    keywords = generator.generate_visual_keywords(ScriptLine(index=0, text="Glow all day"), "Serum")

    assert keywords == "glowing skin serum bottle"


def test_visual_keywords_failure_yields_none(generator, llm_client):
    llm_client.generate.side_effect = ContentGenerationFailed("All AI providers failed or are not configured.")

    assert generator.generate_visual_keywords(ScriptLine(index=1, text="Glow all day"), "Serum") is None
