"""Character encoding detection and conversion.

Detection is delegated to BeautifulSoup's `UnicodeDammit`. Input that is not
valid UTF-8 is assumed to be Cyrillic Windows text; encodings that charset
detectors commonly confuse with CP1251 are reported as CP1251.
"""

from __future__ import annotations

from bs4 import UnicodeDammit

UTF8 = "utf-8"
CP1251 = "windows-1251"

CP1251_COMPATIBLE_ENCODINGS: frozenset[str] = frozenset(
    {
        "windows-1253",
        "windows-1254",
        "windows-1255",
        "windows-1256",
        "windows-1258",
        "euc-tw",
        "iso-8859-8",
    }
)


def is_valid_utf8(data: bytes) -> bool:
    try:
        data.decode(UTF8)
    except UnicodeDecodeError:
        return False
    return True


def _dammit(data: bytes, is_html: bool) -> UnicodeDammit:
    return UnicodeDammit(data, is_html=is_html, user_encodings=[UTF8, CP1251])


def detect_encoding(data: bytes, *, is_html: bool = False) -> str | None:
    """Best guess at the encoding of `data`, or None if nothing decodes it."""

    if not data or is_valid_utf8(data):
        return UTF8
    encoding = _dammit(data, is_html).original_encoding
    if encoding is None:
        return None
    encoding = encoding.lower()
    if encoding in CP1251_COMPATIBLE_ENCODINGS:
        return CP1251
    return encoding


def to_unicode(data: bytes | str, *, is_html: bool = False) -> str:
    """Decode `data` using the detected encoding."""

    if isinstance(data, str):
        return data
    encoding = detect_encoding(data, is_html=is_html)
    if encoding is None:
        return data.decode(UTF8, errors="replace")
    return data.decode(encoding, errors="replace")


def transcode(data: bytes | str, to_encoding: str) -> bytes:
    """Re-encode `data` into `to_encoding`; unmappable characters become '?'."""

    return to_unicode(data).encode(to_encoding, errors="replace")


def to_utf8(data: bytes | str) -> bytes:
    return transcode(data, UTF8)


def to_cp1251(data: bytes | str) -> bytes:
    return transcode(data, CP1251)


__all__ = [
    "CP1251",
    "CP1251_COMPATIBLE_ENCODINGS",
    "UTF8",
    "detect_encoding",
    "is_valid_utf8",
    "to_cp1251",
    "to_unicode",
    "to_utf8",
    "transcode",
]
