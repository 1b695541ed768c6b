"""Stock footage search client for the Pexels video API."""

from typing import Any, Optional

import requests

from promo_shorts.core.config import Settings
from promo_shorts.core.exceptions import AssetResolutionError
from promo_shorts.models.schemas import AssetCandidate, QualityTier, SearchFilters
from promo_shorts.utils.rate_limiter import throttle


class PexelsSearchClient:
    """Searches Pexels and flattens every result into clip renditions."""

    BASE_URL = "https://api.pexels.com/videos/search"

    def __init__(self, settings: Settings, logger: Any, session: Optional[requests.Session] = None):
        """
        Initialize the search client.

        Args:
            settings: Application settings
            logger: Logger instance
            session: Optional requests session (shared connection pool)
        """
        self.settings = settings
        self.logger = logger
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.pexels_api_key)

    def search(self, query: str, filters: SearchFilters) -> list[AssetCandidate]:
        """
        Search for clips matching a query.

        Args:
            query: Search phrase
            filters: Duration and orientation filters forwarded to the API

        Returns:
            One candidate per downloadable rendition, in result order

        Raises:
            AssetResolutionError: On missing credentials, network or HTTP failure
        """
        if not self.is_configured:
            raise AssetResolutionError("Pexels API Key is missing.")

        throttle("pexels", self.settings)
        params = {
            "query": query,
            "per_page": self.settings.pexels_per_page,
            "orientation": filters.orientation,
            "min_duration": int(filters.min_duration),
            "max_duration": int(filters.max_duration),
        }
        try:
            response = self.session.get(
                self.BASE_URL,
                headers={"Authorization": self.settings.pexels_api_key},
                params=params,
                timeout=self.settings.api_timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise AssetResolutionError(f"Network error calling Pexels API: {e}") from e

        if response.status_code == 401:
            raise AssetResolutionError("Pexels rejected the API key (401)")
        if response.status_code == 429:
            raise AssetResolutionError("Pexels rate limit exceeded (429)")
        if response.status_code != 200:
            raise AssetResolutionError(f"Pexels API returned status {response.status_code}")

        try:
            videos = response.json().get("videos", []) or []
        except ValueError as e:
            raise AssetResolutionError(f"Pexels returned invalid JSON: {e}") from e

        return self._flatten(videos)

    def _flatten(self, videos: list[dict]) -> list[AssetCandidate]:
        candidates = []
        for video in videos:
            duration = video.get("duration")
            if duration is None:
                continue
            for video_file in video.get("video_files", []) or []:
                link = video_file.get("link")
                if not link:
                    continue
                candidates.append(
                    AssetCandidate(
                        locator=link,
                        duration=float(duration),
                        quality=QualityTier.parse(video_file.get("quality")),
                    )
                )
        return candidates
