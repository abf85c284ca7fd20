from __future__ import annotations

VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Subtrees of these tags are removed wholesale, text included.
NO_CONTENT_TAGS: frozenset[str] = frozenset({"script", "javascript", "style"})

# Block elements that are padded with a space on each side when unwrapped, so
# that "<p>a</p><p>b</p>" does not collapse into "ab".
WHITESPACE_ELEMENTS: frozenset[str] = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "br",
        "dd",
        "div",
        "dl",
        "dt",
        "footer",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "li",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "ul",
    }
)

RESERVED_NAMES: frozenset[str] = frozenset({"#text", "#comment", "#document-fragment", "*"})

# 2**19 characters: one megabyte of two-byte (e.g. Cyrillic) UTF-8 text.
MAX_INPUT_LENGTH = 2**19

# Keeps the recursive filter and serializer well inside the interpreter stack.
MAX_NESTING_DEPTH = 256
