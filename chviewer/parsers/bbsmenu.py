"""Parser for the board directory (``bbsmenu.html``).

The directory is a flat run of category headings (``<b>``) each followed by
board links.  Grouping is positional and best-effort: links before the
first heading are ignored, headings without links are dropped.
"""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup

from chviewer.models import BoardLink, CategoryMenu

HEADING_TAGS = ("b", "h1", "h2", "h3", "h4")


def parse_bbsmenu(html: str, base_url: str = "") -> list[CategoryMenu]:
    """Group the directory's board links under their category headings."""
    soup = BeautifulSoup(html, "html.parser")
    groups: list[tuple[str, list[BoardLink]]] = []

    for el in soup.find_all(list(HEADING_TAGS) + ["a"]):
        if el.name in HEADING_TAGS:
            # A heading nested inside a link is the link's label, not a category.
            if el.find_parent("a") is not None:
                continue
            heading = el.get_text(" ", strip=True)
            if heading:
                groups.append((heading, []))
            continue

        href = (el.get("href") or "").strip()
        name = el.get_text(" ", strip=True)
        if not groups or not href or not name or href.startswith(("#", "javascript:")):
            continue
        groups[-1][1].append(BoardLink(name=name, url=urljoin(base_url, href)))

    return [CategoryMenu(category=cat, boards=tuple(links)) for cat, links in groups if links]
