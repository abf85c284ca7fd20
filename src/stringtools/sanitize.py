"""Allowlist-driven HTML sanitization.

The pipeline for one call is:

  text -> truncate_input -> parse_fragment -> structural filter
       -> transformers (children first, registration order) -> serialize

Structural decisions per node:

- comments (and doctypes, CDATA, processing instructions) are dropped;
- text is kept, escaping is the serializer's job;
- an element outside the allowlist is unwrapped, or removed together with its
  subtree when it is a no-content tag such as `script` or `style`;
- an allowed element keeps only its allowlisted attributes, and a kept
  `style` attribute only its allowlisted CSS properties.

Every tree is built for one call and discarded afterwards. `AllowlistConfig`
and `Sanitizer` hold no per-call state and can be shared.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from bleach.css_sanitizer import CSSSanitizer

from .config import DEFAULT_CONFIG, AllowlistConfig
from .constants import MAX_INPUT_LENGTH
from .errors import MalformedInputError
from .node import Comment, Element, Text
from .serialize import serialize_fragment
from .transforms import TransformOutcome, apply_transforms, compile_transforms, default_transforms
from .treebuilder import parse_fragment

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence
    from typing import Any, Protocol

    from .node import Node
    from .transforms import _CompiledTransform

    class ReportCallback(Protocol):
        def __call__(self, msg: str, *, node: Any | None = None) -> None: ...


logger = logging.getLogger(__name__)


def truncate_input(text: str, limit: int = MAX_INPUT_LENGTH) -> str:
    """Cut `text` to at most `limit` characters.

    Slicing is by code point, so a multi-byte character is never split. This
    bounds the parser's work on hostile input; it is not a content limit.
    """

    if len(text) <= limit:
        return text
    logger.debug("Truncating input from %d to %d characters", len(text), limit)
    return text[:limit]


@lru_cache(maxsize=32)
def _css_sanitizer(allowed_css_properties: frozenset[str]) -> CSSSanitizer:
    return CSSSanitizer(allowed_css_properties=allowed_css_properties, allowed_svg_properties=())


def _sanitize_inline_style(value: str, allowed_css_properties: frozenset[str]) -> str | None:
    """Keep only allowlisted declarations; None if nothing survives."""

    sanitized = _css_sanitizer(allowed_css_properties).sanitize_css(value).strip()
    return sanitized or None


def _decode(text: str | bytes) -> str:
    if isinstance(text, bytes):
        try:
            return text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedInputError(f"Input is not valid UTF-8: {exc}") from exc
    return str(text)


class _FragmentWalker:
    __slots__ = ("compiled", "config", "elements", "report")

    def __init__(
        self,
        config: AllowlistConfig,
        compiled: list[_CompiledTransform],
        report: ReportCallback | None,
    ) -> None:
        self.config = config
        self.compiled = compiled
        self.elements = config.element_set()
        self.report = report

    def filter_children(self, children: list[Node]) -> list[Node]:
        # Dispatch is inlined: two stack frames per nesting level.
        out: list[Node] = []
        for node in children:
            if isinstance(node, Text):
                out.append(node)
            elif isinstance(node, Comment):
                if self.report is not None:
                    self.report("Dropped comment", node=node)
            elif isinstance(node, Element):
                if node.name not in self.elements:
                    out.extend(self._disallowed(node))
                else:
                    out.extend(self._allowed(node))
            else:
                raise TypeError(f"Unexpected node type: {type(node).__name__}")
        return out

    def _disallowed(self, node: Element) -> list[Node]:
        config = self.config
        if node.name in config.no_content_tags:
            if self.report is not None:
                self.report(f"Unsafe tag '{node.name}' (dropped content)", node=node)
            return []

        if self.report is not None:
            self.report(f"Unsafe tag '{node.name}' (unwrapped)", node=node)
        children = self.filter_children(node.children)
        if node.name in config.whitespace_elements:
            return [Text(" "), *children, Text(" ")]
        return children

    def _allowed(self, node: Element) -> list[Node]:
        config = self.config
        allowed_attrs = config.allowed_attributes(node.name)

        if node.attrs:
            kept: dict[str, str] = {}
            for key, value in node.attrs.items():
                if key not in allowed_attrs:
                    if self.report is not None:
                        self.report(f"Unsafe attribute '{key}' on <{node.name}>", node=node)
                    continue
                if key == "style":
                    style = _sanitize_inline_style(value, config.css_properties)
                    if style is None:
                        if self.report is not None:
                            self.report(f"Unsafe inline style on <{node.name}>", node=node)
                        continue
                    value = style
                kept[key] = value
            node.attrs = kept

        node.children = self.filter_children(node.children)

        outcome = apply_transforms(node, self.compiled, report=self.report)
        if outcome is TransformOutcome.REMOVE:
            return []
        if outcome is TransformOutcome.UNWRAP:
            return node.children
        return [node]


def sanitize_fragment(
    text: str | bytes,
    config: AllowlistConfig = DEFAULT_CONFIG,
    transforms: Sequence[object] = (),
    *,
    report: ReportCallback | None = None,
) -> str:
    """Sanitize markup `text` against `config` and serialize the result.

    `transforms` run in order on every element that survives the structural
    filter. Raises MalformedInputError for undecodable bytes or nesting deeper
    than `config.max_depth`; everything else in untrusted input is handled by
    removing or unwrapping it.
    """

    text = truncate_input(_decode(text), config.max_length)
    if not text:
        return ""

    fragment = parse_fragment(text, max_depth=config.max_depth)
    walker = _FragmentWalker(config, compile_transforms(transforms), report)
    return serialize_fragment(walker.filter_children(fragment))


class Sanitizer:
    """Sanitizer bound to a base configuration.

    `sanitize(text, attributes)` merges `attributes` (tag -> allowed
    attribute names) over the base map for that call only. Passing an
    `iframe` entry enables iframe embeds from the trusted video host.
    """

    def __init__(
        self,
        config: AllowlistConfig = DEFAULT_CONFIG,
        *,
        transforms: Sequence[object] | None = None,
        report: ReportCallback | None = None,
    ) -> None:
        self.config = config
        self.transforms = list(transforms) if transforms is not None else None
        self.report = report

    def _config_for(self, attributes: Mapping[str, Collection[str]] | None) -> AllowlistConfig:
        if not attributes:
            return self.config
        return self.config.merged(attributes)

    def sanitize(self, text: str | bytes, attributes: Mapping[str, Collection[str]] | None = None) -> str:
        config = self._config_for(attributes)
        transforms = self.transforms if self.transforms is not None else default_transforms(config)
        return sanitize_fragment(text, config, transforms, report=self.report)


DEFAULT_SANITIZER = Sanitizer()


def sanitize(
    text: str | bytes | None,
    attributes: Mapping[str, Collection[str]] | None = None,
    *,
    sanitizer: Any = None,
) -> str:
    """Sanitize untrusted markup with the default allowlist.

    `attributes` extends or replaces entries of the default tag/attribute
    map, e.g. ``{"iframe": ["src", "width", "height"]}``. Any object with a
    compatible `sanitize(text, attributes)` method can be passed as
    `sanitizer`.
    """

    if text is None:
        return ""
    if sanitizer is None or not callable(getattr(sanitizer, "sanitize", None)):
        sanitizer = DEFAULT_SANITIZER
    return sanitizer.sanitize(text, attributes)


__all__ = [
    "DEFAULT_SANITIZER",
    "Sanitizer",
    "sanitize",
    "sanitize_fragment",
    "truncate_input",
]
