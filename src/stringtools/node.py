"""The node tree the sanitizer walks.

A parsed fragment is a plain list of top-level nodes. Every node is one of
`Element`, `Text` or `Comment`; code that dispatches on node type handles all
three.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Text:
    data: str

    name = "#text"


@dataclass(slots=True)
class Comment:
    data: str

    name = "#comment"


@dataclass(slots=True)
class Element:
    name: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    def append_child(self, node: Node) -> None:
        self.children.append(node)

    def to_text(self) -> str:
        """Concatenated text of all descendant text nodes, in document order."""
        parts: list[str] = []
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Text):
                parts.append(node.data)
            elif isinstance(node, Element):
                stack.extend(reversed(node.children))
        return "".join(parts)


Node = Element | Text | Comment

Fragment = list[Node]


__all__ = ["Comment", "Element", "Fragment", "Node", "Text"]
