"""URI parsing and normalization for link targets.

Normalization brings a URI into one canonical spelling without changing what
it points to:

- scheme and host are lower-cased, internationalized hosts are IDNA-encoded
  (``http://www.фермаежей.рф`` becomes ``http://www.xn--80ajbaetq5a8a.xn--p1ai/``);
- default ports are removed, an empty http(s) path becomes ``/``;
- percent escapes are upper-cased, escapes of unreserved characters are
  decoded, and characters that may not appear literally are percent-encoded
  as UTF-8.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from urllib.parse import SplitResult, parse_qsl, quote, urlencode, urlsplit, urlunsplit

from .errors import InvalidURIError

_DEFAULT_PORTS = {"http": 80, "https": 443, "ftp": 21}
_SLASH_PATH_SCHEMES = frozenset({"http", "https", "ftp", "tftp"})

_ESCAPE_RE = re.compile(r"%[0-9A-Fa-f]{2}")
_UNRESERVED = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~")

_SUB_DELIMS = "!$&'()*+,;="
_PATH_SAFE = _SUB_DELIMS + ":@/"
_QUERY_SAFE = _PATH_SAFE + "?"
_USERINFO_SAFE = _SUB_DELIMS + ":"

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*$")
_INVALID_HOST_CHARS = frozenset(" <>\"{}|\\^`#/?@")


def _normalize_component(value: str, safe: str) -> str:
    out: list[str] = []
    pos = 0
    for m in _ESCAPE_RE.finditer(value):
        out.append(quote(value[pos : m.start()], safe=safe))
        decoded = chr(int(m.group()[1:], 16))
        out.append(decoded if decoded in _UNRESERVED else m.group().upper())
        pos = m.end()
    out.append(quote(value[pos:], safe=safe))
    return "".join(out)


def _encode_host(host: str, value: str) -> str:
    if not host:
        return host
    if ":" in host:
        # IPv6 literal; urlsplit has already validated the brackets.
        return f"[{host}]"
    if any(ch in _INVALID_HOST_CHARS for ch in host):
        raise InvalidURIError(value, f"invalid character in host {host!r}")
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError as exc:
        raise InvalidURIError(value, f"host {host!r} cannot be IDNA-encoded") from exc


def parse_uri(value: str) -> SplitResult:
    """Split `value` into URI components, validating scheme, host and port."""

    try:
        parts = urlsplit(value)
        parts.port  # raises ValueError for a malformed port
    except ValueError as exc:
        raise InvalidURIError(value, str(exc)) from exc

    if parts.scheme and not _SCHEME_RE.match(parts.scheme):
        raise InvalidURIError(value, f"invalid scheme {parts.scheme!r}")
    if parts.netloc and not parts.hostname:
        raise InvalidURIError(value, "authority without host")
    return parts


def normalize_uri(parts: SplitResult) -> SplitResult:
    """Return the canonical form of already parsed `parts`."""

    value = urlunsplit(parts)
    scheme = parts.scheme.lower()

    netloc = ""
    if parts.netloc:
        userinfo = ""
        if "@" in parts.netloc:
            raw_userinfo = parts.netloc.rpartition("@")[0]
            userinfo = _normalize_component(raw_userinfo, _USERINFO_SAFE) + "@"
        host = _encode_host((parts.hostname or "").lower(), value)
        port = parts.port
        if port is not None and _DEFAULT_PORTS.get(scheme) != port:
            host = f"{host}:{port}"
        netloc = userinfo + host

    path = _normalize_component(parts.path, _PATH_SAFE)
    if not path and netloc and scheme in _SLASH_PATH_SCHEMES:
        path = "/"

    return SplitResult(
        scheme=scheme,
        netloc=netloc,
        path=path,
        query=_normalize_component(parts.query, _QUERY_SAFE),
        fragment=_normalize_component(parts.fragment, _QUERY_SAFE),
    )


def uri_to_string(parts: SplitResult) -> str:
    return urlunsplit(parts)


def normalize_url(value: str) -> str:
    """Parse, normalize and re-serialize `value`. Raises InvalidURIError."""

    return uri_to_string(normalize_uri(parse_uri(value)))


def merge_query(parts: SplitResult, params: Mapping[str, object]) -> SplitResult:
    """Merge `params` into the query of `parts`; new values win, keys are sorted."""

    values = dict(parse_qsl(parts.query, keep_blank_values=True))
    values.update({str(k): str(v) for k, v in params.items()})
    query = urlencode(sorted(values.items()), quote_via=quote)
    return parts._replace(query=query)


def add_params_to_url(url: str, params: Mapping[str, object] | None = None) -> str | None:
    """Add query parameters to `url` and normalize it.

    A URL without a scheme is treated as ``http://``. Returns None if the URL
    cannot be parsed.
    """

    try:
        parts = parse_uri(url)
        if not parts.scheme:
            parts = parse_uri(f"http://{url}")
        if params:
            parts = merge_query(parts, params)
        return uri_to_string(normalize_uri(parts))
    except InvalidURIError:
        return None


__all__ = [
    "add_params_to_url",
    "merge_query",
    "normalize_uri",
    "normalize_url",
    "parse_uri",
    "uri_to_string",
]
