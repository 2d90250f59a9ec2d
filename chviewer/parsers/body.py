"""Post body normalisation shared by the post-log parser and the fallback
extractor.

Output is escaped HTML whose only markup is the back-reference anchors
(``<a class="anc" href="#rN">&gt;&gt;N</a>``).  Escaping always happens
before anchors are inserted, so anchors are never escaped twice.
"""

from __future__ import annotations

import html
import re

_ESCAPED_BR_RE = re.compile(r" ?&lt;br\s*/?&gt; ?", re.IGNORECASE)
_ESCAPED_ANCHOR_RE = re.compile(r"&gt;&gt;(\d+)")
_ORIGIN_LINK_RE = re.compile(r"<a\s[^>]*>(.*?)</a>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")


def escape_text(text: str) -> str:
    return html.escape(text, quote=True)


def link_anchors(escaped: str) -> str:
    """Rewrite escaped ``>>N`` references into in-page anchor links."""
    return _ESCAPED_ANCHOR_RE.sub(r'<a class="anc" href="#r\1">&gt;&gt;\1</a>', escaped)


def strip_tags(text: str) -> str:
    return html.unescape(_TAG_RE.sub("", text)).strip()


def format_dat_body(raw: str) -> str:
    """Turn a raw post-log body field into embeddable HTML.

    The origin wraps back-references in its own ``<a>`` tags and encodes
    ``>`` as ``&gt;``; both are undone first so the reference is re-linked
    to this page rather than to the origin.
    """
    text = html.unescape(_ORIGIN_LINK_RE.sub(r"\1", raw))
    escaped = escape_text(text.strip())
    escaped = _ESCAPED_BR_RE.sub("\n", escaped)
    return link_anchors(escaped)


def format_plain_body(text: str) -> str:
    """Escape already-plain text (newlines intact) and link back-references."""
    return link_anchors(escape_text(text.strip()))
