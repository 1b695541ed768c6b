"""Tests for LLM client provider fallback."""

from unittest.mock import MagicMock, patch

import pytest

from promo_shorts.core.exceptions import ContentGenerationFailed
from promo_shorts.services.llm_client import LLMClient


def failing(message):
    def _generate(prompt):
        raise RuntimeError(message)

    return _generate


def test_primary_success_skips_backup(settings, logger):
    backup = MagicMock(return_value="backup text")
    client = LLMClient(settings, logger, providers=[("gemini", lambda p: "primary text"), ("openai", backup)])

    assert client.generate("prompt") == "primary text"
    backup.assert_not_called()


def test_primary_failure_falls_back_once(settings, logger):
    backup = MagicMock(return_value="backup text")
    client = LLMClient(settings, logger, providers=[("gemini", failing("quota")), ("openai", backup)])

    assert client.generate("prompt") == "backup text"
    backup.assert_called_once_with("prompt")


def test_empty_primary_response_falls_back(settings, logger):
    client = LLMClient(settings, logger, providers=[("gemini", lambda p: "   "), ("openai", lambda p: "text")])

    assert client.generate("prompt") == "text"


def test_both_providers_fail(settings, logger):
    client = LLMClient(settings, logger, providers=[("gemini", failing("quota")), ("openai", failing("timeout"))])

    with pytest.raises(ContentGenerationFailed) as exc_info:
        client.generate("prompt")

    assert "gemini: quota" in exc_info.value.debug
    assert "openai: timeout" in exc_info.value.debug
    assert exc_info.value.category == "script"


def test_no_configured_provider(settings, logger):
    client = LLMClient(settings, logger)

    assert client.provider_names == []
    with pytest.raises(ContentGenerationFailed):
        client.generate("prompt")


def test_configured_providers_order(settings, logger):
    settings.google_api_key = "google-key"
    settings.openai_api_key = "openai-key"

    assert LLMClient(settings, logger).provider_names == ["gemini", "openai"]

    settings.google_api_key = None
    assert LLMClient(settings, logger).provider_names == ["openai"]


@patch("promo_shorts.services.llm_client.genai.Client")
def test_gemini_provider_uses_configured_model(mock_client_class, settings, logger):
    settings.google_api_key = "google-key"
    mock_client_class.return_value.models.generate_content.return_value.text = "LINE: hello"
    client = LLMClient(settings, logger)

    assert client.generate("prompt") == "LINE: hello"
    mock_client_class.return_value.models.generate_content.assert_called_once_with(
        model=settings.gemini_model, contents="prompt"
    )


@patch("promo_shorts.services.llm_client.OpenAI")
def test_openai_provider_uses_configured_model(mock_openai_class, settings, logger):
    settings.openai_api_key = "openai-key"
    completion = MagicMock()
    completion.choices[0].message.content = "LINE: hi"
    mock_openai_class.return_value.chat.completions.create.return_value = completion
    client = LLMClient(settings, logger)

    assert client.generate("prompt") == "LINE: hi"
    kwargs = mock_openai_class.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-3.5-turbo"
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
