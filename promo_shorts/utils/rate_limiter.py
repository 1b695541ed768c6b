"""Rate Limiter - throttles provider API calls to stay under per-minute quotas."""

import time
from collections import deque
from threading import Lock
from typing import Any, Optional


class RateLimiter:
    """Thread-safe sliding-window rate limiter."""

    def __init__(self, max_calls: int = 60, time_window: float = 60.0):
        """
        Initialize rate limiter.

        Args:
            max_calls: Maximum number of calls allowed in time_window
            time_window: Time window in seconds (default: 60 seconds)
        """
        self.max_calls = max(1, max_calls)
        self.time_window = time_window
        self._calls: deque[float] = deque()
        self._lock = Lock()

    def _prune(self, now: float) -> None:
        while self._calls and now - self._calls[0] >= self.time_window:
            self._calls.popleft()

    def wait_if_needed(self) -> None:
        """Block until one more call fits in the window, then record it."""
        with self._lock:
            now = time.monotonic()
            self._prune(now)
            if len(self._calls) >= self.max_calls:
                wait_time = (self._calls[0] + self.time_window) - now
                if wait_time > 0:
                    time.sleep(wait_time)
                now = time.monotonic()
                self._prune(now)
            self._calls.append(now)


# Process-wide limiters, one per provider
_limiters: dict[str, RateLimiter] = {}
_limiters_lock = Lock()

_PROVIDER_LIMIT_FIELDS = {
    "llm": "llm_rate_limit",
    "pexels": "pexels_rate_limit",
    "elevenlabs": "elevenlabs_rate_limit",
}


def get_limiter(provider: str, settings: Any) -> Optional[RateLimiter]:
    """
    Get or create the shared limiter of a provider.

    Args:
        provider: One of 'llm', 'pexels', 'elevenlabs'
        settings: Application settings

    Returns:
        The limiter, or None when rate limiting is disabled
    """
    if not getattr(settings, "enable_rate_limiting", True):
        return None
    with _limiters_lock:
        limiter = _limiters.get(provider)
        if limiter is None:
            max_calls = getattr(settings, _PROVIDER_LIMIT_FIELDS.get(provider, ""), 60)
            limiter = RateLimiter(max_calls=max_calls, time_window=60.0)
            _limiters[provider] = limiter
        return limiter


def throttle(provider: str, settings: Any) -> None:
    """Wait on the provider's limiter if rate limiting is enabled."""
    limiter = get_limiter(provider, settings)
    if limiter is not None:
        limiter.wait_if_needed()
