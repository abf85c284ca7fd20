"""Adapter from BeautifulSoup's tree to the package's node union.

The parsing itself is delegated to BeautifulSoup with the ``html5lib``
backend, which builds the same tree a browser would: unclosed ``p`` and
``li`` siblings are closed implicitly, misnested formatting is repaired,
unclosed tags are closed at end of input and entities are decoded.

html5lib always builds a whole document. The implied ``html``, ``head`` and
``body`` wrappers are flattened away, so a fragment comes back as the list of
nodes the caller wrote, in document order. The adapter copies the result into
`Element`/`Text`/`Comment` nodes so that the rest of the package never touches
bs4 objects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from bs4.element import NavigableString, PreformattedString, Tag

from .constants import MAX_NESTING_DEPTH
from .errors import MalformedInputError
from .node import Comment, Element, Text

if TYPE_CHECKING:
    from collections.abc import Iterator

    from bs4.element import PageElement

    from .node import Fragment, Node

# html5lib drops whitespace that precedes the first content of a document.
_HTML_WHITESPACE = " \t\n\f\r"


def _convert_string(value: NavigableString) -> Node:
    # Doctypes, CDATA sections, processing instructions and declarations have
    # no place in a fragment; they are treated like comments and dropped.
    if isinstance(value, PreformattedString):
        return Comment(str(value))
    return Text(str(value))


def _fragment_roots(soup: BeautifulSoup) -> Iterator[PageElement]:
    for child in soup.contents:
        if not (isinstance(child, Tag) and child.name == "html"):
            yield child
            continue
        for part in child.contents:
            if isinstance(part, Tag) and part.name in ("head", "body"):
                yield from part.contents
            else:
                yield part


def _append(target: list[Node], node: Node) -> None:
    if isinstance(node, Text) and target and isinstance(target[-1], Text):
        target[-1] = Text(target[-1].data + node.data)
    else:
        target.append(node)


def parse_fragment(text: str, *, max_depth: int = MAX_NESTING_DEPTH) -> Fragment:
    """Parse `text` into a list of top-level nodes.

    Raises MalformedInputError if the markup nests deeper than `max_depth`
    or if the parser backend rejects it outright.
    """

    body = text.lstrip(_HTML_WHITESPACE)
    leading = text[: len(text) - len(body)]

    try:
        soup = BeautifulSoup(body, "html5lib", multi_valued_attributes=None)
    except ParserRejectedMarkup as exc:
        raise MalformedInputError(f"Markup rejected by parser: {exc}") from exc

    fragment: Fragment = [Text(leading)] if leading else []
    # Iterative copy: (bs4 children, target list, depth of those children).
    stack: list[tuple[list, list[Node], int]] = [(list(_fragment_roots(soup)), fragment, 1)]
    while stack:
        source, target, depth = stack.pop()
        for child in source:
            if isinstance(child, Tag):
                if depth > max_depth:
                    raise MalformedInputError(f"Markup nests deeper than {max_depth} levels")
                element = Element(
                    child.name.lower(),
                    {str(k).lower(): "" if v is None else str(v) for k, v in child.attrs.items()},
                )
                target.append(element)
                if child.contents:
                    stack.append((list(child.contents), element.children, depth + 1))
            elif isinstance(child, NavigableString):
                _append(target, _convert_string(child))
    return fragment


__all__ = ["parse_fragment"]
