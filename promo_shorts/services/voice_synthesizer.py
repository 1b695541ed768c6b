"""Voice Synthesizer - ElevenLabs narration written to job-scoped temporary files."""

from pathlib import Path
from typing import Any, Optional, Sequence

import requests

from promo_shorts.core.config import Settings
from promo_shorts.core.exceptions import VoiceSynthesisFailed
from promo_shorts.utils.rate_limiter import throttle
from promo_shorts.utils.scoped_resources import ScopedResources


def select_voice(product_label: str, mapping: Sequence[tuple[str, str]], default_voice_id: str) -> str:
    """
    Pick a voice id for a product by category keyword.

    Args:
        product_label: Product name
        mapping: Ordered (keyword, voice_id) pairs, evaluated first-match-wins
        default_voice_id: Voice used when no keyword occurs in the label

    Returns:
        Voice id
    """
    product = product_label.lower()
    for keyword, voice_id in mapping:
        if keyword.lower() in product:
            return voice_id
    return default_voice_id


class VoiceSynthesizer:
    """Turns narration text into an audio file owned by the job."""

    API_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        """
        Initialize the voice synthesizer.

        Args:
            settings: Application settings
            logger: Logger instance
            session: Optional requests session
        """
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.elevenlabs_api_key)

    def voice_for(self, product_label: str) -> str:
        voice_id = select_voice(product_label, self.settings.voice_mapping, self.settings.default_voice_id)
        self.logger.info(f"[VOICE] 🎯 Selected voice ID for '{product_label}': {voice_id}")
        return voice_id

    def synthesize(self, text: str, voice_id: str, language: str, resources: ScopedResources) -> Path:
        """
        Synthesize narration and place it into a scoped temporary file.

        Args:
            text: Narration text
            voice_id: ElevenLabs voice id
            language: Spoken language (the multilingual model follows the text)
            resources: Job registry the audio file is registered in

        Returns:
            Path of the mp3 file

        Raises:
            VoiceSynthesisFailed: On missing key, quota, network or unknown voice
        """
        if not text or not text.strip():
            raise VoiceSynthesisFailed("Failed to create voiceover: narration text is empty")
        if not self.is_configured:
            raise VoiceSynthesisFailed("Failed to create voiceover: ElevenLabs API key not configured")

        self.logger.info(f"[VOICE] 🎤 Generating voice with ID: {voice_id} in {language}...")
        output_path = resources.path_for("voice", ".mp3")

        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": self.settings.elevenlabs_api_key,
        }
        data = {
            "text": text,
            "model_id": self.settings.elevenlabs_model,
            "voice_settings": {
                "stability": self.settings.voice_stability,
                "similarity_boost": self.settings.voice_similarity_boost,
                "style": self.settings.voice_style,
                "use_speaker_boost": self.settings.voice_speaker_boost,
            },
        }

        throttle("elevenlabs", self.settings)
        try:
            response = self.session.post(
                self.API_URL.format(voice_id=voice_id),
                json=data,
                headers=headers,
                timeout=self.settings.api_timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise VoiceSynthesisFailed("Failed to create voiceover", debug=f"network error: {e}") from e

        if response.status_code != 200:
            raise VoiceSynthesisFailed(
                "Failed to create voiceover",
                debug=f"ElevenLabs API returned status {response.status_code}: {self._error_detail(response)}",
            )
        if not response.content:
            raise VoiceSynthesisFailed("Failed to create voiceover", debug="ElevenLabs returned empty audio")

        output_path.write_bytes(response.content)
        self.logger.info("[VOICE] ✅ Audio saved locally.")
        return output_path

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text[:300]
        detail = payload.get("detail") if isinstance(payload, dict) else None
        if isinstance(detail, dict):
            return str(detail.get("message") or detail)
        return str(detail or response.text[:300])
