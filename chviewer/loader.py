"""Fetch orchestration: from a board or thread reference to parsed records.

Thread loading is a two-hop state machine::

    TryPrimary ──200──▶ Success (source="dat")
        │
        └─non-200 / transport failure─▶ TryFallback ──200──▶ Success (source="html")
                                              │
                                              └─otherwise─▶ UpstreamError / TransportFailure

There is no retry beyond the single primary → fallback hop; each hop uses
its own timeout.  Fallback failures are never absorbed.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from chviewer.config import Settings
from chviewer.errors import TransportFailure, UpstreamError
from chviewer.models import BoardPage, CategoryMenu, ProbeResult, ThreadPage
from chviewer.parsers.bbsmenu import parse_bbsmenu
from chviewer.parsers.dat import dat_title, parse_dat
from chviewer.parsers.fallback import FallbackExtractor, document_title
from chviewer.parsers.subject import parse_subject
from chviewer.scraper.charset import decode_bytes, resolve_charset
from chviewer.scraper.fetcher import ContentFetcher
from chviewer.scraper.urls import (
    dat_url,
    fallback_url,
    normalize_base,
    split_thread_url,
    subject_url,
    validate_board_url,
    validate_thread_id,
)

logger = logging.getLogger(__name__)


class ThreadLoader:
    """Load boards, threads and the board directory through a fetcher."""

    def __init__(
        self,
        fetcher: ContentFetcher,
        extractor: FallbackExtractor,
        settings: Settings,
    ) -> None:
        self.fetcher = fetcher
        self.extractor = extractor
        self.settings = settings

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------
    def load_board(self, base: str) -> BoardPage:
        """Fetch and parse a board's thread index.

        Raises:
            MalformedInput: If *base* is not an http(s) URL.
            UpstreamError: If the index is not served with status 200.
            TransportFailure: If the origin cannot be reached.
        """
        base = normalize_base(validate_board_url(base))
        url = subject_url(base)
        result = self.fetcher.fetch(
            url, as_binary=True, timeout=self.settings.request_timeout, referer=base
        )
        if not result.ok:
            raise UpstreamError.for_status(url, result.status)

        charset = resolve_charset(
            result.headers, result.body, self.settings.legacy_encoding, sniff=False
        )
        threads = parse_subject(decode_bytes(result.body, charset))
        logger.info("[board] %s: %d thread(s)", base, len(threads))
        return BoardPage(base_url=base, threads=threads)

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------
    def load_thread(self, base: str, thread_id: str) -> ThreadPage:
        """Load a thread from its post-log, falling back to the rendered page.

        Raises:
            MalformedInput: If *base* or *thread_id* is unusable.
            UpstreamError: If the fallback document is not served with 200.
            TransportFailure: If the fallback origin cannot be reached.
        """
        base = normalize_base(validate_board_url(base))
        thread_id = validate_thread_id(thread_id)
        # Raises MalformedInput for a base without a board segment, before any fetch.
        read_url = fallback_url(base, thread_id)

        page = self._try_primary(base, thread_id)
        if page is not None:
            return page
        return self._try_fallback(base, thread_id, read_url)

    def load_thread_url(self, url: str) -> ThreadPage:
        """Load a thread given its post-log or rendered-thread URL."""
        base, thread_id = split_thread_url(url)
        return self.load_thread(base, thread_id)

    def _try_primary(self, base: str, thread_id: str) -> Optional[ThreadPage]:
        url = dat_url(base, thread_id)
        try:
            result = self.fetcher.fetch(
                url, as_binary=True, timeout=self.settings.request_timeout, referer=base
            )
        except TransportFailure as exc:
            logger.warning("[thread] post-log unreachable (%s); trying fallback", exc.reason)
            return None

        if not result.ok:
            logger.info("[thread] post-log HTTP %s for %s; trying fallback", result.status, url)
            return None

        text = decode_bytes(result.body, self.settings.legacy_encoding)
        return ThreadPage(
            base_url=base,
            thread_id=thread_id,
            title=dat_title(text),
            posts=parse_dat(text),
            source="dat",
        )

    def _try_fallback(self, base: str, thread_id: str, url: str) -> ThreadPage:
        result = self.fetcher.fetch(
            url, as_binary=True, timeout=self.settings.fallback_timeout, referer=base
        )
        charset = resolve_charset(result.headers, result.body, self.settings.legacy_encoding)
        if not result.ok:
            logger.warning("[thread] fallback HTTP %s for %s", result.status, url)
            raise UpstreamError.for_status(url, result.status)

        html = decode_bytes(result.body, charset)
        return ThreadPage(
            base_url=base,
            thread_id=thread_id,
            title=document_title(html),
            posts=self.extractor.extract(html),
            source="html",
        )

    # ------------------------------------------------------------------
    # Board directory
    # ------------------------------------------------------------------
    def load_menus(self) -> list[CategoryMenu]:
        """Fetch the board directory and group its links by category."""
        url = self.settings.bbsmenu_url
        result = self.fetcher.fetch(url, as_binary=True, timeout=self.settings.request_timeout)
        if not result.ok:
            raise UpstreamError.for_status(url, result.status)
        charset = resolve_charset(result.headers, result.body, self.settings.legacy_encoding)
        menus = parse_bbsmenu(decode_bytes(result.body, charset), base_url=url)
        logger.info("[menus] %d categor(ies) from %s", len(menus), url)
        return menus

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def _probe(self, name: str, url: str) -> ProbeResult:
        try:
            result = self.fetcher.fetch(
                url, as_binary=True, timeout=self.settings.request_timeout
            )
        except TransportFailure as exc:
            return ProbeResult(name=name, url=url, error=exc.reason)
        return ProbeResult(name=name, url=url, status=result.status)

    def diagnose(self, base: str, thread_id: Optional[str] = None) -> list[ProbeResult]:
        """Report the upstream status of the index, post-log and fallback URLs.

        Probes are independent reads and run **in parallel**; results keep
        the order subject → dat → read.
        """
        base = normalize_base(validate_board_url(base))
        targets = [("subject", subject_url(base))]
        if thread_id:
            thread_id = validate_thread_id(thread_id)
            targets.append(("dat", dat_url(base, thread_id)))
            targets.append(("read", fallback_url(base, thread_id)))

        with ThreadPoolExecutor(max_workers=len(targets)) as pool:
            futures = [pool.submit(self._probe, name, url) for name, url in targets]
            results = [f.result() for f in futures]

        for r in results:
            logger.info("[diag] %s %s -> %s", r.name, r.url, r.status or r.error)
        return results
