from .config import DEFAULT_CONFIG, AllowlistConfig
from .encoding import detect_encoding, is_valid_utf8, to_cp1251, to_unicode, to_utf8
from .errors import ConfigError, InvalidURIError, MalformedInputError, StringToolsError
from .node import Comment, Element, Text
from .sanitize import DEFAULT_SANITIZER, Sanitizer, sanitize, sanitize_fragment, truncate_input
from .strip import strip_all_tags, strip_tags_keep_breaks
from .text import clear_control_characters, clear_unicode_separator_characters, truncate_words
from .transforms_spec import IframeNormalizer, LinkNormalizer, TransformOutcome
from .uri import add_params_to_url

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_SANITIZER",
    "AllowlistConfig",
    "Comment",
    "ConfigError",
    "Element",
    "IframeNormalizer",
    "InvalidURIError",
    "LinkNormalizer",
    "MalformedInputError",
    "Sanitizer",
    "StringToolsError",
    "Text",
    "TransformOutcome",
    "add_params_to_url",
    "clear_control_characters",
    "clear_unicode_separator_characters",
    "detect_encoding",
    "is_valid_utf8",
    "sanitize",
    "sanitize_fragment",
    "strip_all_tags",
    "strip_tags_keep_breaks",
    "to_cp1251",
    "to_unicode",
    "to_utf8",
    "truncate_input",
    "truncate_words",
]
