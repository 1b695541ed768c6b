"""Utility functions for the Promo Shorts Engine."""

from promo_shorts.utils.error_handler import classify_error, format_error_message
from promo_shorts.utils.scoped_resources import ScopedResources

__all__ = [
    "classify_error",
    "format_error_message",
    "ScopedResources",
]
