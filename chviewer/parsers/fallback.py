"""Post extraction from the rendered-thread (read.cgi) fallback document.

The rendered page is a foreign system's HTML with no stable structure, so
extraction is a cascade of strategies with decreasing structural
assumptions.  All strategies share a common interface:
``try_extract(soup) -> list[Post]``.  The :class:`FallbackExtractor` tries
each one in order and returns the first non-empty result.

Strategies (highest to lowest confidence):
  1. :class:`SelectorStrategy` — known post-container CSS selectors.
  2. :class:`DefinitionListStrategy` — classic ``<dt>``/``<dd>`` pairs.
  3. :class:`BulkTextStrategy` — blank-line separated text of a container.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from chviewer.models import Post
from chviewer.parsers.body import format_plain_body

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Candidate selectors
# ---------------------------------------------------------------------------
POST_SELECTORS = (
    "article.post",
    "div.post",
    "div.res",
    "article",
)
AUTHOR_SELECTORS = (".postusername", ".name", ".username", "b")
DATE_SELECTORS = (".date", ".postdate", "time")
ID_SELECTORS = (".uid", ".postid", ".id")
BODY_SELECTORS = (".post-content", ".message", ".escaped", ".content", "section")
BULK_CONTAINER_SELECTORS = ("div.thread", "#thread", "main", "body")

MAX_BULK_SEGMENTS = 200

_BLANK_LINE_RE = re.compile(r"\n\s*\n")
_DT_SEP_RE = re.compile(r"\s*[：:]\s*")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _first_text(node: Tag, selectors: Iterable[str]) -> str:
    """Return the text of the first non-empty match among *selectors*."""
    for selector in selectors:
        for match in node.select(selector):
            text = match.get_text(" ", strip=True)
            if text:
                return text
    return ""


def _first_node(node: Tag, selectors: Iterable[str]) -> Optional[Tag]:
    for selector in selectors:
        match = node.select_one(selector)
        if match is not None:
            return match
    return None


def _body_text(node: Tag) -> str:
    """Plain text of *node* with ``<br>`` turned into newlines."""
    for br in node.find_all("br"):
        br.replace_with("\n")
    return node.get_text("")


def _number_posts(records: Iterable[tuple[str, str, str]]) -> list[Post]:
    """Assign consecutive ordinals to records with a non-empty body."""
    posts: list[Post] = []
    for author, meta, text in records:
        body = format_plain_body(text)
        if not body:
            continue
        posts.append(Post(ordinal=len(posts) + 1, author=author, meta=meta, body=body))
    return posts


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class ExtractionStrategy(ABC):
    """One heuristic for locating posts in a rendered thread."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used in log lines."""

    @abstractmethod
    def try_extract(self, soup: BeautifulSoup) -> list[Post]:
        """Return the posts found, or ``[]`` when the heuristic does not apply."""


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class SelectorStrategy(ExtractionStrategy):
    """Match known post containers, then author/date/body sub-elements."""

    def __init__(self, post_selectors: Sequence[str] = POST_SELECTORS) -> None:
        self.post_selectors = tuple(post_selectors)

    @property
    def name(self) -> str:
        return "selector"

    def _containers(self, soup: BeautifulSoup) -> list[Tag]:
        for selector in self.post_selectors:
            found = soup.select(selector)
            if found:
                return found
        return []

    def try_extract(self, soup: BeautifulSoup) -> list[Post]:
        records = []
        for node in self._containers(soup):
            author = _first_text(node, AUTHOR_SELECTORS)
            meta = " ".join(
                part
                for part in (_first_text(node, DATE_SELECTORS), _first_text(node, ID_SELECTORS))
                if part
            )
            body_node = _first_node(node, BODY_SELECTORS) or node
            records.append((author, meta, _body_text(body_node)))
        return _number_posts(records)


class DefinitionListStrategy(ExtractionStrategy):
    """Pair the i-th ``<dt>`` header with the i-th ``<dd>`` body.

    Headers look like ``1 ：名無しさん：2024/01/01(月) 00:00:00 ID:abc``.
    """

    @property
    def name(self) -> str:
        return "definition-list"

    @staticmethod
    def _split_header(dt: Tag) -> tuple[str, str]:
        text = dt.get_text(" ", strip=True)
        parts = _DT_SEP_RE.split(text, maxsplit=2)
        if len(parts) == 3:
            return parts[1], parts[2]
        bold = dt.find("b")
        return (bold.get_text(" ", strip=True) if bold else ""), text

    def try_extract(self, soup: BeautifulSoup) -> list[Post]:
        terms = soup.find_all("dt")
        definitions = soup.find_all("dd")
        records = []
        for dt, dd in zip(terms, definitions):
            author, meta = self._split_header(dt)
            records.append((author, meta, _body_text(dd)))
        return _number_posts(records)


class BulkTextStrategy(ExtractionStrategy):
    """Last resort: split a container's text on blank lines."""

    def __init__(self, max_segments: int = MAX_BULK_SEGMENTS) -> None:
        self.max_segments = max_segments

    @property
    def name(self) -> str:
        return "bulk-text"

    def try_extract(self, soup: BeautifulSoup) -> list[Post]:
        container = None
        for selector in BULK_CONTAINER_SELECTORS:
            container = soup.select_one(selector)
            if container is not None:
                break
        if container is None:
            return []

        for tag in container(["script", "style"]):
            tag.decompose()
        segments = [
            seg.strip()
            for seg in _BLANK_LINE_RE.split(container.get_text("\n"))
            if seg.strip()
        ]
        return _number_posts(("", "", seg) for seg in segments[: self.max_segments])


# ---------------------------------------------------------------------------
# Cascade
# ---------------------------------------------------------------------------

class FallbackExtractor:
    """Try strategies in order; return the first non-empty post list."""

    def __init__(self, strategies: list[ExtractionStrategy]) -> None:
        self._strategies = strategies

    def extract(self, html: str) -> list[Post]:
        for strategy in self._strategies:
            # Strategies mutate the tree (br replacement, decompose), so
            # each one gets a fresh parse.
            soup = BeautifulSoup(html, "html.parser")
            posts = strategy.try_extract(soup)
            if posts:
                logger.info("[extract] %s strategy found %d post(s)", strategy.name, len(posts))
                return posts
        logger.warning("[extract] no strategy found any posts")
        return []


def build_default_extractor() -> FallbackExtractor:
    """Selectors → definition list → bulk text."""
    return FallbackExtractor(
        [SelectorStrategy(), DefinitionListStrategy(), BulkTextStrategy()]
    )


def document_title(html: str) -> str:
    """Return the text of the document's ``<title>``, or ``""``."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.title is None:
        return ""
    return soup.title.get_text(" ", strip=True)
