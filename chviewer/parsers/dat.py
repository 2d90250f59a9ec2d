"""Parser for a thread's raw post-log (``.dat``).

Each line reads ``author<>contact<>date/id<>body[<>thread title]``; the
thread title only appears on the first line.
"""

from __future__ import annotations

from chviewer.models import Post
from chviewer.parsers.body import format_dat_body, strip_tags
from chviewer.parsers.subject import FIELD_SEP


def _fields(line: str) -> list[str]:
    parts = line.split(FIELD_SEP)
    return parts + [""] * (5 - len(parts))


def parse_dat(text: str) -> list[Post]:
    """Return one :class:`Post` per non-empty line; ordinals start at 1."""
    posts: list[Post] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        author, _contact, meta, body_raw, _title = _fields(line)[:5]
        posts.append(
            Post(
                ordinal=len(posts) + 1,
                author=strip_tags(author),
                meta=meta.strip(),
                body=format_dat_body(body_raw),
            )
        )
    return posts


def dat_title(text: str) -> str:
    """Return the thread title from the first post-log line, or ``""``."""
    for line in text.splitlines():
        if line.strip():
            return strip_tags(_fields(line)[4])
    return ""
