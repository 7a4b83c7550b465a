"""Text normalization helpers for values pulled out of page markup."""

from __future__ import annotations


def strip_inline_tags(text: str) -> str:
    """Remove ``<...>`` spans from a string.

    Each ``<`` is paired with the next ``>`` that follows it and the span is
    deleted, delimiters included. An unterminated ``<`` stops the scan and the
    rest of the string is kept as-is.
    """
    cleaned = text
    while True:
        start = cleaned.find("<")
        if start == -1:
            return cleaned
        end = cleaned.find(">", start)
        if end == -1:
            return cleaned
        cleaned = cleaned[:start] + cleaned[end + 1 :]


def clean_text(text: str) -> str:
    """Strip inline markup tags and collapse whitespace.

    This is a best-effort cleanup for single attribute values such as a meta
    tag's ``content``. It is not an HTML parser and does not handle nested or
    malformed markup.

    Args:
        text: Raw text that may contain inline tags.

    Returns:
        Text without tags, with whitespace runs collapsed to single spaces and
        leading/trailing whitespace removed.

    Example:
        >>> clean_text("<p>Hello <strong>World</strong></p>")
        'Hello World'
    """
    return " ".join(strip_inline_tags(text).split())
