"""Parser for a board's thread index (``subject.txt``).

Each line reads ``<id>.dat<>Title (replies)``.
"""

from __future__ import annotations

import re

from chviewer.models import ThreadSummary
from chviewer.scraper.urls import thread_id_from_filename

FIELD_SEP = "<>"

_COUNT_RE = re.compile(r"^(.*)\s\((\d+)\)\s*$", re.DOTALL)


def parse_subject_line(line: str) -> ThreadSummary | None:
    """Parse one index line; return None when a field is missing."""
    filename, sep, rest = line.partition(FIELD_SEP)
    if not sep or not filename.strip() or not rest.strip():
        return None

    m = _COUNT_RE.match(rest)
    if m:
        title, reply_count = m.group(1), int(m.group(2))
    else:
        title, reply_count = rest.strip(), None
    return ThreadSummary(
        id=thread_id_from_filename(filename),
        title=title.strip(),
        reply_count=reply_count,
    )


def parse_subject(text: str) -> list[ThreadSummary]:
    """Return every well-formed thread in *text*, in source order."""
    threads: list[ThreadSummary] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        summary = parse_subject_line(line)
        if summary is not None:
            threads.append(summary)
    return threads
