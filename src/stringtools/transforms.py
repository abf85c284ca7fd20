"""Per-node transformer runtime.

Transformer specs (`LinkNormalizer`, `IframeNormalizer`) are compiled once
into plain callables. `apply_transforms` then runs the compiled list, in
order, on one element whose children have already been sanitized.

Any callable taking an `Element` and returning a `TransformOutcome` (or None
for "unchanged") can be passed alongside the built-in specs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from .errors import InvalidURIError
from .node import Element, Text
from .transforms_spec import IframeNormalizer, LinkNormalizer, TransformOutcome
from .uri import normalize_uri, parse_uri, uri_to_string

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from typing import Any, Protocol

    from .config import AllowlistConfig
    from .node import Node

    class ReportCallback(Protocol):
        def __call__(self, msg: str, *, node: Any | None = None) -> None: ...


_LINK_ATTRS = {"a": "href", "img": "src"}


@dataclass(frozen=True, slots=True)
class _CompiledTransform:
    kind: Literal["link_normalizer", "iframe_normalizer", "callable"]
    label: str
    func: Callable[[Element], TransformOutcome | None]


def _normalize_link(node: Element, attr: str, allowed_schemes: frozenset[str]) -> TransformOutcome:
    value = node.attrs.get(attr)
    if value is None:
        return TransformOutcome.UNCHANGED

    try:
        parts = normalize_uri(parse_uri(value))
    except InvalidURIError:
        return TransformOutcome.UNWRAP

    if parts.scheme and parts.scheme not in allowed_schemes:
        del node.attrs[attr]
        return TransformOutcome.MUTATED

    normalized = uri_to_string(parts)
    if normalized == value:
        return TransformOutcome.UNCHANGED
    node.attrs[attr] = normalized
    return TransformOutcome.MUTATED


def _flatten_to_text(children: list[Node]) -> list[Node]:
    out: list[Node] = []
    stack: list[Node] = list(reversed(children))
    while stack:
        node = stack.pop()
        if isinstance(node, Text):
            out.append(node)
        elif isinstance(node, Element):
            stack.extend(reversed(node.children))
    return out


def _compile_one(t: object) -> _CompiledTransform:
    if isinstance(t, LinkNormalizer):
        allowed_schemes = t.allowed_schemes

        def _link_normalizer(
            node: Element,
            allowed_schemes: frozenset[str] = allowed_schemes,
        ) -> TransformOutcome:
            attr = _LINK_ATTRS.get(node.name)
            if attr is None:
                return TransformOutcome.UNCHANGED
            return _normalize_link(node, attr, allowed_schemes)

        return _CompiledTransform(kind="link_normalizer", label="LinkNormalizer", func=_link_normalizer)

    if isinstance(t, IframeNormalizer):
        attributes = t.attributes
        pattern = t.pattern

        def _iframe_normalizer(
            node: Element,
            attributes: frozenset[str] = attributes,
            pattern=pattern,
        ) -> TransformOutcome:
            if node.name != "iframe":
                return TransformOutcome.UNCHANGED

            src = node.attrs.get("src")
            if src is None or not pattern.match(src):
                return TransformOutcome.REMOVE

            node.attrs = {k: v for k, v in node.attrs.items() if k in attributes}
            node.children = _flatten_to_text(node.children)
            return TransformOutcome.MUTATED

        return _CompiledTransform(kind="iframe_normalizer", label="IframeNormalizer", func=_iframe_normalizer)

    if callable(t):
        label = getattr(t, "__name__", type(t).__name__)
        return _CompiledTransform(kind="callable", label=label, func=t)

    raise TypeError(f"Unsupported transformer: {t!r}")


def compile_transforms(transforms: Sequence[object]) -> list[_CompiledTransform]:
    return [_compile_one(t) for t in transforms]


def default_transforms(config: AllowlistConfig) -> list[LinkNormalizer | IframeNormalizer]:
    """The built-in pipeline for `config`.

    Links are always normalized. Iframes are only allowlisted through caller
    overrides, so the iframe transformer is added only when `config` allows
    `iframe`.
    """

    transforms: list[LinkNormalizer | IframeNormalizer] = [
        LinkNormalizer(allowed_schemes=config.allowed_protocols)
    ]
    if "iframe" in config.attributes:
        transforms.append(IframeNormalizer(config.attributes["iframe"]))
    return transforms


def apply_transforms(
    node: Element,
    compiled: list[_CompiledTransform],
    *,
    report: ReportCallback | None = None,
) -> TransformOutcome:
    """Run `compiled` on `node`; REMOVE and UNWRAP stop the chain."""

    outcome = TransformOutcome.UNCHANGED
    for t in compiled:
        result = t.func(node)
        if result is None:
            continue
        action = TransformOutcome(result)
        if action is TransformOutcome.REMOVE or action is TransformOutcome.UNWRAP:
            if report is not None:
                report(f"{t.label}: {action.value} <{node.name}>", node=node)
            return action
        if action is TransformOutcome.UNCHANGED:
            continue
        outcome = TransformOutcome.MUTATED
    return outcome


__all__ = [
    "IframeNormalizer",
    "LinkNormalizer",
    "TransformOutcome",
    "apply_transforms",
    "compile_transforms",
    "default_transforms",
]
