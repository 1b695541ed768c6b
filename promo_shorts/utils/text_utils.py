"""Text utilities for embedding caption text in ffmpeg filter graphs."""

# ffmpeg parses a filter graph twice: once for the graph (filter chains,
# labels) and once for each filter's option string. Caption text therefore
# gets two levels of backslash escaping, option level first.

import textwrap

OPTION_SPECIAL = frozenset("\\'\":")
GRAPH_SPECIAL = frozenset("\\'\"[],;")
QUOTES = frozenset("'\"")


class UnescapedValueError(ValueError):
    """A filter value contains a special character without its escape."""


def _escape(value: str, special: frozenset) -> str:
    return "".join(f"\\{ch}" if ch in special else ch for ch in value)


def _unescape_strict(value: str, special: frozenset, level: str) -> str:
    out = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\":
            if i + 1 >= len(value):
                raise UnescapedValueError(f"dangling backslash at end of {level} value")
            out.append(value[i + 1])
            i += 2
            continue
        if ch in special:
            kind = "quote" if ch in QUOTES else "special character"
            raise UnescapedValueError(f"unescaped {kind} {ch!r} at position {i} of {level} value")
        out.append(ch)
        i += 1
    return "".join(out)


def escape_filter_text(text: str) -> str:
    """
    Escape free text for use as a filter option value inside a filter graph.

    Args:
        text: Raw text, e.g. a caption

    Returns:
        Text safe to embed unquoted after ``text=``
    """
    return _escape(_escape(text, OPTION_SPECIAL), GRAPH_SPECIAL)


def unescape_filter_text(escaped: str) -> str:
    """
    Parse an embedded filter value back to raw text, the way ffmpeg would.

    Raises:
        UnescapedValueError: If a quote or other special character is not escaped
    """
    return _unescape_strict(_unescape_strict(escaped, GRAPH_SPECIAL, "graph"), OPTION_SPECIAL, "option")


def is_round_trip_safe(text: str, escaped: str) -> bool:
    """True when ``escaped`` parses back to exactly ``text``."""
    try:
        return unescape_filter_text(escaped) == text
    except UnescapedValueError:
        return False


def wrap_caption(text: str, max_chars: int) -> str:
    """Collapse whitespace and wrap a caption onto several lines."""
    collapsed = " ".join(text.split())
    if max_chars <= 0:
        return collapsed
    return "\n".join(textwrap.wrap(collapsed, width=max_chars, break_long_words=False)) or collapsed
