"""Music Library - picks a background track from the local music directory."""

import random
from pathlib import Path
from typing import Any, Optional

from promo_shorts.core.config import Settings

MUSIC_EXTENSIONS = {".mp3", ".wav", ".m4a"}


class MusicLibrary:
    """Random background music from a static directory (tracks are never deleted)."""

    def __init__(self, settings: Settings, logger: Any, rng: Optional[random.Random] = None):
        self.settings = settings
        self.logger = logger
        self.music_dir = Path(settings.music_dir)
        self.rng = rng or random.Random()

    def tracks(self) -> list[Path]:
        if not self.music_dir.is_dir():
            return []
        return sorted(p for p in self.music_dir.iterdir() if p.is_file() and p.suffix.lower() in MUSIC_EXTENSIONS)

    def pick(self) -> Optional[Path]:
        """Return a random track, or None when the library is missing or empty."""
        if not self.music_dir.is_dir():
            self.logger.warning(f"[MUSIC] ⚠️ Music directory not found: {self.music_dir}")
            return None

        tracks = self.tracks()
        if not tracks:
            self.logger.warning(f"[MUSIC] ⚠️ No music files found in {self.music_dir}")
            return None

        track = self.rng.choice(tracks)
        self.logger.info(f"[MUSIC] 🎵 Selected: {track.name}")
        return track
