"""Script Generator - mood-based promo scripts and per-line visual search keywords."""

from typing import Any, Optional

from promo_shorts.core.config import Settings
from promo_shorts.core.exceptions import ContentGenerationFailed, InsufficientScriptLines
from promo_shorts.models.schemas import Script, ScriptLine
from promo_shorts.services.llm_client import LLMClient

LINE_PREFIX = "LINE:"
MAX_SCRIPT_LINES = 4
MIN_SCRIPT_LINES = 3
MIN_LINE_WORDS = 6
MAX_LINE_WORDS = 12

MOOD_DIRECTIONS = {
    "exciting": "Create an EXCITING, energetic TikTok script that builds hype and urgency",
    "trendy": "Create a TRENDY, cool TikTok script using current slang and viral phrases",
    "informative": "Create an INFORMATIVE TikTok script that educates while entertaining",
    "funny": "Create a FUNNY, humorous TikTok script with jokes and playful language",
    "emotional": "Create an EMOTIONAL TikTok script that connects with feelings and experiences",
    "mysterious": "Create a MYSTERIOUS, intriguing TikTok script that builds curiosity",
    "luxurious": "Create a LUXURIOUS, premium TikTok script that emphasizes quality and exclusivity",
    "relatable": "Create a RELATABLE TikTok script that feels like talking to a best friend",
}


def parse_script_lines(raw_text: str, max_lines: int = MAX_SCRIPT_LINES) -> list[ScriptLine]:
    """
    Extract the "LINE:" fragments of a generated script.

    Args:
        raw_text: Raw model output
        max_lines: Number of lines kept at most

    Returns:
        Ordered, non-empty script lines
    """
    texts = []
    for raw_line in raw_text.splitlines():
        stripped = raw_line.strip()
        if not stripped.upper().startswith(LINE_PREFIX):
            continue
        text = stripped[len(LINE_PREFIX):].strip().strip('"').strip()
        if text:
            texts.append(text)
    return [ScriptLine(index=i, text=text) for i, text in enumerate(texts[:max_lines])]


class ScriptGenerator:
    """Writes the short script and derives stock-search keywords for each line."""

    def __init__(self, settings: Settings, logger: Any, llm_client: Optional[LLMClient] = None):
        """
        Initialize the script generator.

        Args:
            settings: Application settings
            logger: Logger instance
            llm_client: Optional text-generation client (defaults to the configured providers)
        """
        self.settings = settings
        self.logger = logger
        self.llm_client = llm_client or LLMClient(settings, logger)

    def build_script_prompt(self, product_label: str, mood: str, language: str) -> str:
        mood_direction = MOOD_DIRECTIONS.get(mood.strip().lower(), MOOD_DIRECTIONS["exciting"])
        return f"""{mood_direction} about "{product_label}".

REQUIREMENTS:
- Write the script in {language}
- Exactly {MAX_SCRIPT_LINES} short lines (each line {MIN_LINE_WORDS}-{MAX_LINE_WORDS} words max)
- Perfect for 15-30 second TikTok video
- Must mention the product naturally
- Use {mood} tone throughout
- Include call-to-action in last line
- Make it engaging and viral-worthy

Format: Return ONLY the {MAX_SCRIPT_LINES} lines, each starting with "{LINE_PREFIX}"

Example format:
LINE: [Hook that grabs attention]
LINE: [Product benefit/feature]
LINE: [Social proof/emotion]
LINE: [Call to action]"""

    def generate_script(self, product_label: str, mood: str, language: str) -> Script:
        """
        Generate and validate the script of a job.

        Args:
            product_label: Product name
            mood: Mood/tone tag
            language: Spoken language

        Returns:
            Script with 3-4 validated lines

        Raises:
            ContentGenerationFailed: If every text-generation provider fails
            InsufficientScriptLines: If fewer than 3 usable lines come back
        """
        self.logger.info("[AI] 📝 Generating mood-based script...")
        raw_text = self.llm_client.generate(self.build_script_prompt(product_label, mood, language))
        lines = parse_script_lines(raw_text)

        if len(lines) < MIN_SCRIPT_LINES:
            raise InsufficientScriptLines(
                "AI failed to generate proper script format.",
                debug=f"expected at least {MIN_SCRIPT_LINES} '{LINE_PREFIX}' lines, got {len(lines)}",
            )

        for line in lines:
            if not MIN_LINE_WORDS <= line.word_count <= MAX_LINE_WORDS:
                self.logger.debug(f"[AI] Line {line.index + 1} has {line.word_count} words: '{line.text}'")

        self.logger.info(f"[AI] ✅ Script generated with {len(lines)} lines")
        return Script(raw_text=raw_text, lines=lines)

    def generate_visual_keywords(self, line: ScriptLine, product_label: str) -> Optional[str]:
        """
        Ask for stock-search keywords that visually represent one script line.

        Args:
            line: Script line
            product_label: Product name

        Returns:
            Keyword query, or None when generation fails or returns nothing
        """
        prompt = (
            "Generate 3-4 keywords for Pexels video search that visually represent this product "
            f'script line: "{line.text}" for "{product_label}". Only keywords, no explanation.'
        )
        try:
            keywords = self.llm_client.generate(prompt)
        except ContentGenerationFailed as e:
            self.logger.warning(f"[PEXELS] ⚠️ Keyword generation failed for line {line.index + 1}: {e}")
            return None

        # Keep the first non-empty line; models sometimes add a trailing explanation
        for candidate in keywords.splitlines():
            cleaned = candidate.strip().strip("\"'").strip()
            if cleaned:
                return cleaned
        return None
