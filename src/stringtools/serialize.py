"""Markup serialization for sanitized fragments."""

from __future__ import annotations

from html import escape
from typing import TYPE_CHECKING

from .constants import VOID_ELEMENTS
from .node import Comment, Element, Text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .node import Node


def serialize_start_tag(name: str, attrs: dict[str, str] | None) -> str:
    if not attrs:
        return f"<{name}>"
    parts = [f"<{name}"]
    for key, value in attrs.items():
        parts.append(f' {key}="{escape(value, quote=True)}"')
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def _serialize_to(nodes: Iterable[Node], out: list[str]) -> None:
    for node in nodes:
        if isinstance(node, Text):
            out.append(escape(node.data, quote=False))
        elif isinstance(node, Element):
            out.append(serialize_start_tag(node.name, node.attrs))
            if node.name in VOID_ELEMENTS:
                continue
            _serialize_to(node.children, out)
            out.append(serialize_end_tag(node.name))
        elif isinstance(node, Comment):
            out.append(f"<!--{node.data}-->")


def serialize_fragment(nodes: Iterable[Node]) -> str:
    """Render `nodes` back to markup.

    Text is escaped for `&`, `<` and `>`; attribute values additionally for
    quotes. Void elements are written without an end tag.
    """

    out: list[str] = []
    _serialize_to(nodes, out)
    return "".join(out)


__all__ = ["serialize_end_tag", "serialize_fragment", "serialize_start_tag"]
