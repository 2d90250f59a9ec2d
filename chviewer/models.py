"""Record types passed between the fetcher, the parsers and the renderer.

Plain frozen dataclasses — nothing here knows about HTML or HTTP clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True)
class FetchResult:
    """One outbound retrieval outcome."""

    status: int
    body: bytes | str
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == 200


@dataclass(frozen=True)
class ThreadSummary:
    """One line of a board's ``subject.txt``."""

    id: str
    title: str
    reply_count: Optional[int] = None


@dataclass(frozen=True)
class Post:
    """A single post.  ``body`` is escaped HTML, safe to embed as-is."""

    ordinal: int
    author: str
    meta: str
    body: str


@dataclass(frozen=True)
class BoardLink:
    name: str
    url: str


@dataclass(frozen=True)
class CategoryMenu:
    category: str
    boards: tuple[BoardLink, ...] = ()


@dataclass(frozen=True)
class BoardPage:
    base_url: str
    threads: list[ThreadSummary]


@dataclass(frozen=True)
class ThreadPage:
    """A rendered-ready thread.

    ``source`` is ``"dat"`` when the raw post-log was readable and
    ``"html"`` when the posts were scraped from the fallback document.
    """

    base_url: str
    thread_id: str
    title: str
    posts: list[Post]
    source: str


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one diagnostic probe; ``status`` is None on transport failure."""

    name: str
    url: str
    status: Optional[int] = None
    error: Optional[str] = None
