"""URL construction for boards, indexes, post-logs and fallback documents.

A board is identified by its base URL (``https://host/board/``).  The index
lives at ``<base>subject.txt``, a thread's post-log at
``<base>dat/<id>.dat`` and the rendered fallback document at
``https://host/test/read.cgi/<board>/<id>/``.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from chviewer.errors import MalformedInput

POST_LOG_SUFFIX = ".dat"

_DAT_PATH_RE = re.compile(r"^(?P<prefix>.*/)dat/(?P<id>\d+)\.dat$")
_READ_PATH_RE = re.compile(
    r"^(?:/(?P<server>[^/]+))?/test/read\.cgi/(?P<board>[^/]+)/(?P<id>\d+)"
)


def join_url(base: str, path: str) -> str:
    """Join *base* and *path* with exactly one slash between them."""
    return base.rstrip("/") + "/" + path.lstrip("/")


def strip_filename(url: str) -> str:
    """Drop the last path segment of *url*, keeping one trailing slash."""
    return url.rsplit("/", 1)[0].rstrip("/") + "/"


def normalize_base(base: str) -> str:
    return base.strip().rstrip("/") + "/"


def subject_url(base: str) -> str:
    return join_url(base, "subject.txt")


def dat_url(base: str, thread_id: str) -> str:
    return join_url(base, f"dat/{thread_id}{POST_LOG_SUFFIX}")


def thread_id_from_filename(filename: str) -> str:
    """``"1700000000.dat"`` -> ``"1700000000"``."""
    filename = filename.strip()
    if filename.endswith(POST_LOG_SUFFIX):
        return filename[: -len(POST_LOG_SUFFIX)]
    return filename


def board_short_name(base: str) -> str:
    """Return the last non-empty path segment of a board base URL."""
    segments = [s for s in urlsplit(base).path.split("/") if s]
    if not segments:
        raise MalformedInput(f"board URL has no board segment: {base!r}")
    return segments[-1]


def fallback_url(base: str, thread_id: str) -> str:
    """Return the rendered-thread (read.cgi) URL for a thread."""
    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        raise MalformedInput(f"not an absolute board URL: {base!r}")
    board = board_short_name(base)
    return f"{parts.scheme}://{parts.netloc}/test/read.cgi/{board}/{thread_id}/"


def validate_thread_id(value: str) -> str:
    value = (value or "").strip()
    if not value.isdigit():
        raise MalformedInput(f"thread id must be numeric: {value!r}")
    return value


def validate_board_url(value: str) -> str:
    value = (value or "").strip()
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise MalformedInput(f"not an http(s) board URL: {value!r}")
    return value


def split_thread_url(url: str) -> tuple[str, str]:
    """Split a thread URL into ``(board_base_url, thread_id)``.

    Accepts direct post-log URLs (``.../<board>/dat/<id>.dat``) and rendered
    thread URLs, including the mobile ``itest.5ch.net/<server>/test/...``
    form, which is mapped back to ``<server>.5ch.net``.

    Raises:
        MalformedInput: If *url* matches neither shape.
    """
    parts = urlsplit((url or "").strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise MalformedInput(f"not an http(s) thread URL: {url!r}")

    m = _DAT_PATH_RE.match(parts.path)
    if m:
        return f"{parts.scheme}://{parts.netloc}{m.group('prefix')}", m.group("id")

    m = _READ_PATH_RE.match(parts.path)
    if m:
        host = parts.netloc
        if m.group("server") and host.startswith("itest."):
            host = f"{m.group('server')}.{host.split('.', 1)[1]}"
        base = f"{parts.scheme}://{host}/{m.group('board')}/"
        return base, m.group("id")

    raise MalformedInput(f"unrecognised thread URL: {url!r}")
