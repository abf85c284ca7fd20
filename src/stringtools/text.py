"""Plain-text helpers."""

from __future__ import annotations

import re

_CONTROL_CHARS = {c: None for c in range(0x00, 0x20)}
_UNICODE_SEPARATORS = {0x2028: None, 0x2029: None}
_NON_WORD_RE = re.compile(r"\W")


def clear_control_characters(text: str) -> str:
    """Remove ASCII control characters (U+0000 to U+001F)."""
    return text.translate(_CONTROL_CHARS)


def clear_unicode_separator_characters(text: str) -> str:
    """Remove the Unicode line and paragraph separators (U+2028, U+2029)."""
    return text.translate(_UNICODE_SEPARATORS)


def truncate_words(text: str | None, length: int = 75) -> str | None:
    """Cut `text` to at most `length` characters without splitting a word.

    The cut happens at the last non-word character inside the first `length`
    characters. A text with no such character truncates to the empty string.
    """

    if text is None or len(text) <= length:
        return text

    head = text[:length]
    cut = 0
    for m in _NON_WORD_RE.finditer(head):
        cut = m.start()
    return head[:cut]


__all__ = ["clear_control_characters", "clear_unicode_separator_characters", "truncate_words"]
