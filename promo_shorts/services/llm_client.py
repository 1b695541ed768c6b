"""LLM Client - text generation with a primary (Gemini) and backup (OpenAI) provider."""

from typing import Any, Callable, Optional

from google import genai
from google.genai import types as genai_types
from openai import OpenAI

from promo_shorts.core.config import Settings
from promo_shorts.core.exceptions import ContentGenerationFailed
from promo_shorts.utils.rate_limiter import throttle

TextProvider = tuple[str, Callable[[str], str]]


class LLMClient:
    """Sends prompts to the configured providers in order: primary first, backup once."""

    def __init__(self, settings: Settings, logger: Any, providers: Optional[list[TextProvider]] = None):
        """
        Initialize LLM client.

        Args:
            settings: Application settings
            logger: Logger instance
            providers: Optional explicit (name, generate_fn) list; defaults to the
                providers with configured API keys, Gemini before OpenAI
        """
        self.settings = settings
        self.logger = logger
        self._gemini_client = None
        self._openai_client = None
        self.providers = providers if providers is not None else self._configured_providers()

    def _configured_providers(self) -> list[TextProvider]:
        providers: list[TextProvider] = []
        if self.settings.google_api_key:
            providers.append(("gemini", self._generate_gemini))
        if self.settings.openai_api_key:
            providers.append(("openai", self._generate_openai))
        return providers

    @property
    def provider_names(self) -> list[str]:
        return [name for name, _ in self.providers]

    def generate(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Prompt text

        Returns:
            Raw text returned by the first provider that succeeds

        Raises:
            ContentGenerationFailed: If no provider is configured or all of them fail
        """
        if not self.providers:
            raise ContentGenerationFailed("All AI providers failed or are not configured.")

        errors = []
        for name, generate_fn in self.providers:
            try:
                throttle("llm", self.settings)
                text = generate_fn(prompt)
                if not text or not text.strip():
                    raise ValueError(f"{name} returned an empty response")
                return text
            except Exception as e:
                errors.append(f"{name}: {e}")
                if len(errors) < len(self.providers):
                    self.logger.warning(f"[AI] ⚠️ {name} failed: {e}. Trying backup provider...")
                else:
                    self.logger.error(f"[AI] ❌ {name} failed: {e}")

        raise ContentGenerationFailed("All AI providers failed or are not configured.", debug="; ".join(errors))

    def _generate_gemini(self, prompt: str) -> str:
        """Generate text using Google Gemini."""
        if self._gemini_client is None:
            self._gemini_client = genai.Client(
                api_key=self.settings.google_api_key,
                http_options=genai_types.HttpOptions(timeout=int(self.settings.llm_timeout_seconds * 1000)),
            )
        response = self._gemini_client.models.generate_content(
            model=self.settings.gemini_model,
            contents=prompt,
        )
        return response.text or ""

    def _generate_openai(self, prompt: str) -> str:
        """Generate text using OpenAI chat completions."""
        if self._openai_client is None:
            self._openai_client = OpenAI(
                api_key=self.settings.openai_api_key,
                timeout=self.settings.llm_timeout_seconds,
            )
        response = self._openai_client.chat.completions.create(
            model=self.settings.openai_model,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.choices[0].message.content or ""
