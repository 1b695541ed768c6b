"""Error Handler - turns classified pipeline errors into user-facing messages."""

from typing import Optional

from promo_shorts.core.exceptions import PipelineError

MESSAGE_PREFIX = "Video generation failed: "

CATEGORY_MESSAGES = {
    "assets": "Could not find suitable videos. Try a different product or mood.",
    "voice": "Voice generation failed. Check ElevenLabs API key and quota.",
    "script": "Script generation failed. Try again with different parameters.",
    "render": "Video processing failed. Check FFmpeg installation.",
    "config": "A required service is not available. Check the server configuration.",
}


def format_error_message(
    operation: str,
    error: Exception,
    context: Optional[dict] = None,
    suggestion: Optional[str] = None,
) -> str:
    """
    Format an error message for logs.

    Args:
        operation: What operation was being performed (e.g., "Composing video")
        error: The exception that occurred
        context: Additional context (e.g., {"job_id": "1700000000000", "product": "Serum"})
        suggestion: Optional suggestion for how to fix the issue

    Returns:
        Formatted error message
    """
    error_type = type(error).__name__

    context_str = ""
    if context:
        context_parts = [f"{k}={v}" for k, v in context.items()]
        context_str = f" ({', '.join(context_parts)})"

    message = f"❌ {operation} failed{context_str}\n"
    message += f"   Error: {error_type}: {error}"
    if isinstance(error, PipelineError) and error.debug:
        message += f"\n   Detail: {error.debug}"

    if suggestion:
        message += f"\n   💡 Suggestion: {suggestion}"

    return message


def classify_error(error: Exception) -> tuple[str, str]:
    """
    Classify an error into a category and a user-facing message.

    Provider internals never reach the message; they stay in the debug field
    of the error response.

    Args:
        error: The exception that ended the job

    Returns:
        Tuple of (category, user message)
    """
    if isinstance(error, PipelineError):
        category = error.category
        return category, MESSAGE_PREFIX + CATEGORY_MESSAGES.get(category, error.message)
    return "internal", MESSAGE_PREFIX + str(error)


def debug_detail(error: Exception) -> str:
    """Raw detail of an error for the response's debug field."""
    if isinstance(error, PipelineError) and error.debug:
        return f"{error.message}: {error.debug}"
    return str(error)
