"""Exception types raised by stringtools."""

from __future__ import annotations


class StringToolsError(ValueError):
    """Base class for all errors raised by this package."""


class InvalidURIError(StringToolsError):
    """A link target could not be parsed as a URI."""

    def __init__(self, value: str, reason: str) -> None:
        super().__init__(f"Invalid URI {value!r}: {reason}")
        self.value = value
        self.reason = reason


class MalformedInputError(StringToolsError):
    """Input that cannot be sanitized safely (undecodable, too deeply nested)."""


class ConfigError(StringToolsError):
    """An allowlist override map that the engine refuses to build."""


__all__ = [
    "ConfigError",
    "InvalidURIError",
    "MalformedInputError",
    "StringToolsError",
]
