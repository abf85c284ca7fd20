"""Tag strippers built on the sanitizer.

Both run the regular structural sanitizer with a near-empty allowlist and no
transformers, then post-process the serialized markup.
"""

from __future__ import annotations

import re

from .config import AllowlistConfig
from .sanitize import sanitize_fragment

# Control-character entities (&#0; .. &#13;), no-break spaces and whitespace
# outside tags. Tags are matched first and kept as written so that
# `<script type="x">` is still a script tag when it reaches the parser.
_ENTITY_AND_SPACE_RE = re.compile(r"(<[^>]*>)|&#(?:[0-9]|10|11|12|13);|&nbsp;|\xa0|\s")

_OPEN_BLOCK_RE = re.compile(r"<(?:p|li|blockquote)(?:\s[^>]*)?>")
_LINE_BREAK_RE = re.compile(r"<(?:br\s*/?|ul[^>]*|/[^>]*)>")
_BREAK_SPACE_RE = re.compile(r"<br />(?:\s|\xa0)+")

LINE_BREAK = "<br />"

STRIP_ALL_CONFIG = AllowlistConfig(attributes={}, attribute_free_tags=())

KEEP_BREAKS_CONFIG = AllowlistConfig(attributes={}, attribute_free_tags=("p", "ul", "li", "br", "blockquote"))


def strip_all_tags(text: str) -> str:
    """Remove all markup, entities for control characters, and whitespace.

    Block-level elements leave a single space behind so adjacent paragraphs
    do not run together:

        >>> strip_all_tags("<a>link with&nbsp;space</a><p>para&#9;with\\ttab</p>")
        'linkwithspace parawithtab '
    """

    text = _ENTITY_AND_SPACE_RE.sub(lambda m: m.group(1) or "", text)
    return sanitize_fragment(text, STRIP_ALL_CONFIG)


def strip_tags_keep_breaks(text: str) -> str:
    """Remove all markup except line breaks.

    Paragraphs, list items and quotes become text segments separated by
    ``<br />``:

        >>> strip_tags_keep_breaks("<a></a><ul><li>item</li></ul><p>para</p>plain break<br>")
        '<br />item<br /><br />para<br />plain break<br />'
    """

    sanitized = sanitize_fragment(text, KEEP_BREAKS_CONFIG)
    sanitized = _OPEN_BLOCK_RE.sub("", sanitized)
    sanitized = _LINE_BREAK_RE.sub(LINE_BREAK, sanitized)
    return _BREAK_SPACE_RE.sub(LINE_BREAK, sanitized)


__all__ = ["LINE_BREAK", "strip_all_tags", "strip_tags_keep_breaks"]
