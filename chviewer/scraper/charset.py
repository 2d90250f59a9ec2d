"""Charset resolution and lossy decoding for upstream documents.

Boards serve a mix of Shift_JIS (cp932), EUC-JP and UTF-8.  The resolved
charset is always one of :data:`KNOWN_CHARSETS` or ``"unknown"``.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional

KNOWN_CHARSETS = ("cp932", "euc-jp", "utf-8")
UNKNOWN = "unknown"

_ALIASES = {
    "cp932": "cp932",
    "ms932": "cp932",
    "windows-31j": "cp932",
    "shift_jis": "cp932",
    "shift-jis": "cp932",
    "sjis": "cp932",
    "x-sjis": "cp932",
    "euc-jp": "euc-jp",
    "eucjp": "euc-jp",
    "x-euc-jp": "euc-jp",
    "utf-8": "utf-8",
    "utf8": "utf-8",
}

_SNIFF_BYTES = 4096
_CHARSET_RE = re.compile(r"""charset\s*=\s*["']?\s*([\w.:-]+)""", re.IGNORECASE)


def normalize_charset(value: Optional[str]) -> str:
    """Map a declared charset name onto a canonical one (or ``"unknown"``)."""
    if not value:
        return UNKNOWN
    return _ALIASES.get(value.strip().strip("\"'").lower(), UNKNOWN)


def header_charset(content_type: Optional[str]) -> Optional[str]:
    """Return the raw ``charset=`` parameter of a Content-Type value."""
    if not content_type:
        return None
    match = _CHARSET_RE.search(content_type)
    return match.group(1) if match else None


def sniff_charset(data: bytes) -> Optional[str]:
    """Return the raw charset declared near the top of an HTML document."""
    head = data[:_SNIFF_BYTES].decode("ascii", errors="ignore")
    match = _CHARSET_RE.search(head)
    return match.group(1) if match else None


def resolve_charset(
    headers: Mapping[str, str],
    data: bytes,
    default: str = "cp932",
    sniff: bool = True,
) -> str:
    """Pick the charset for *data*: header first, then document, then *default*.

    With ``sniff=False`` the document body is never inspected, for plain
    text payloads whose content may legitimately contain ``charset=``.
    """
    content_type = None
    for key, value in headers.items():
        if key.lower() == "content-type":
            content_type = value
            break

    candidates = [header_charset(content_type)]
    if sniff:
        candidates.append(sniff_charset(data))
    for candidate in candidates:
        charset = normalize_charset(candidate)
        if charset != UNKNOWN:
            return charset
    return default


def decode_bytes(data: bytes | str, charset: str) -> str:
    """Decode *data* with *charset*, substituting undecodable sequences."""
    if isinstance(data, str):
        return data
    if charset == UNKNOWN:
        charset = "cp932"
    return data.decode(charset, errors="replace")
