"""Allowlist configuration for the sanitizer.

`AllowlistConfig.build()` merges the built-in tag/attribute tables with caller
overrides and freezes the result. A built config is read-only and can be
shared between any number of sanitize calls.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from bleach.css_sanitizer import ALLOWED_CSS_PROPERTIES

from .constants import MAX_INPUT_LENGTH, MAX_NESTING_DEPTH, NO_CONTENT_TAGS, RESERVED_NAMES, WHITESPACE_ELEMENTS
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTES: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "p": frozenset({"align", "style"}),
        "div": frozenset({"align", "style"}),
        "span": frozenset({"align", "style"}),
        "td": frozenset({"align", "width", "valign", "colspan", "rowspan", "style"}),
        "th": frozenset({"align", "width", "valign", "colspan", "rowspan", "style"}),
        "a": frozenset({"href", "target", "name", "style"}),
        "table": frozenset({"cellpadding", "cellspacing", "width", "border", "align", "style"}),
        "img": frozenset({"src", "width", "height", "style"}),
    }
)

ATTRIBUTE_FREE_TAGS: frozenset[str] = frozenset(
    {
        "b",
        "strong",
        "i",
        "em",
        "sup",
        "sub",
        "ul",
        "ol",
        "li",
        "blockquote",
        "br",
        "tr",
        "u",
        "caption",
        "thead",
        "s",
    }
)

DEFAULT_CSS_PROPERTIES: frozenset[str] = frozenset(ALLOWED_CSS_PROPERTIES)

DEFAULT_PROTOCOLS: frozenset[str] = frozenset({"http", "https", "mailto", "ftp", "tel"})

_TAG_NAME_RE = re.compile(r"^[a-z][a-z0-9:-]*$")


def _normalize_names(names: Collection[str]) -> frozenset[str]:
    return frozenset(str(n).strip().lower() for n in names if str(n).strip())


def _check_override_tag(tag: str) -> None:
    if tag in RESERVED_NAMES:
        raise ConfigError(f"'{tag}' is reserved and cannot be allowlisted")
    if tag in NO_CONTENT_TAGS:
        raise ConfigError(f"'{tag}' content is always removed and cannot be allowlisted")
    if not _TAG_NAME_RE.match(tag):
        raise ConfigError(f"'{tag}' is not a valid tag name")


@dataclass(frozen=True, slots=True)
class AllowlistConfig:
    """An immutable tag/attribute/CSS allowlist.

    - Elements outside `element_set()` are unwrapped, or removed with their
      subtree when listed in `no_content_tags`.
    - Attributes outside `attributes[tag]` are dropped. Tags that are only in
      `attribute_free_tags` keep no attributes at all.
    - A retained `style` attribute keeps only `css_properties` declarations.
    """

    attributes: Mapping[str, frozenset[str]]
    attribute_free_tags: frozenset[str]
    css_properties: frozenset[str]
    no_content_tags: frozenset[str]
    whitespace_elements: frozenset[str]
    allowed_protocols: frozenset[str]
    max_length: int
    max_depth: int

    def __init__(
        self,
        *,
        attributes: Mapping[str, Collection[str]] = DEFAULT_ATTRIBUTES,
        attribute_free_tags: Collection[str] = ATTRIBUTE_FREE_TAGS,
        css_properties: Collection[str] = DEFAULT_CSS_PROPERTIES,
        no_content_tags: Collection[str] = NO_CONTENT_TAGS,
        whitespace_elements: Collection[str] = WHITESPACE_ELEMENTS,
        allowed_protocols: Collection[str] = DEFAULT_PROTOCOLS,
        max_length: int = MAX_INPUT_LENGTH,
        max_depth: int = MAX_NESTING_DEPTH,
    ) -> None:
        normalized = {str(tag).lower(): _normalize_names(attrs) for tag, attrs in attributes.items()}
        object.__setattr__(self, "attributes", MappingProxyType(normalized))
        object.__setattr__(self, "attribute_free_tags", _normalize_names(attribute_free_tags))
        object.__setattr__(self, "css_properties", _normalize_names(css_properties))
        object.__setattr__(self, "no_content_tags", _normalize_names(no_content_tags))
        object.__setattr__(self, "whitespace_elements", _normalize_names(whitespace_elements))
        object.__setattr__(self, "allowed_protocols", _normalize_names(allowed_protocols))
        object.__setattr__(self, "max_length", int(max_length))
        object.__setattr__(self, "max_depth", int(max_depth))

    @classmethod
    def build(cls, overrides: Mapping[str, Collection[str]] | None = None, **kwargs: object) -> AllowlistConfig:
        """Merge `overrides` over the default attribute map.

        An override replaces the default attribute set of the same tag (no
        union). Tags only in `overrides` are added; tags only in the defaults
        are kept.
        """

        config = cls(**kwargs).merged(overrides or {})  # type: ignore[arg-type]
        if overrides:
            logger.debug("Built allowlist with overrides for %s", ", ".join(sorted(overrides)))
        return config

    def merged(self, overrides: Mapping[str, Collection[str]]) -> AllowlistConfig:
        """A copy of this config with `overrides` merged over its attribute map."""

        attributes: dict[str, Collection[str]] = dict(self.attributes)
        for tag, attrs in overrides.items():
            key = str(tag).strip().lower()
            _check_override_tag(key)
            attributes[key] = attrs
        return AllowlistConfig(
            attributes=attributes,
            attribute_free_tags=self.attribute_free_tags,
            css_properties=self.css_properties,
            no_content_tags=self.no_content_tags,
            whitespace_elements=self.whitespace_elements,
            allowed_protocols=self.allowed_protocols,
            max_length=self.max_length,
            max_depth=self.max_depth,
        )

    def element_set(self) -> frozenset[str]:
        return frozenset(self.attributes) | self.attribute_free_tags

    def allowed_attributes(self, tag: str) -> frozenset[str]:
        return self.attributes.get(tag, frozenset())


DEFAULT_CONFIG: AllowlistConfig = AllowlistConfig.build()


__all__ = [
    "ATTRIBUTE_FREE_TAGS",
    "DEFAULT_ATTRIBUTES",
    "DEFAULT_CONFIG",
    "DEFAULT_CSS_PROPERTIES",
    "DEFAULT_PROTOCOLS",
    "AllowlistConfig",
]
