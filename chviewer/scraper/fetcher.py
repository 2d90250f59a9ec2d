"""Outbound HTTP fetches with an optional relay hop and a TTL cache.

Every upstream read in the viewer goes through :class:`ContentFetcher`.
HTTP error statuses are *not* exceptions here: the caller inspects
``FetchResult.status``.  Only transport-level failures raise.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional
from urllib.parse import quote

import httpx
from cachetools import TTLCache

from chviewer.errors import TransportFailure
from chviewer.models import FetchResult

logger = logging.getLogger(__name__)

# Statuses below this bound are returned to the caller instead of raising.
_MAX_STATUS = 600


def build_client() -> httpx.Client:
    """Return the shared httpx client used by the application."""
    return httpx.Client(follow_redirects=True)


class ContentFetcher:
    """Fetch URLs through an optional relay, caching 200 responses.

    Args:
        client: An open ``httpx.Client``; the fetcher does not own it.
        relay_url: When non-empty, every request is sent to this endpoint
            with the real URL passed as its ``url`` query parameter.
        user_agent: Sent with every request.
        cache_ttl: Seconds a successful response stays cached.
        cache_size: Maximum number of cached responses.
        timer: Clock used by the cache; injectable for tests.
    """

    def __init__(
        self,
        client: httpx.Client,
        relay_url: str = "",
        user_agent: str = "Mozilla/5.0 5ch Viewer",
        cache_ttl: float = 90.0,
        cache_size: int = 512,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self.relay_url = relay_url.strip()
        self.user_agent = user_agent
        # Keyed by (as_binary, target_url).
        self.cache: TTLCache = TTLCache(maxsize=cache_size, ttl=cache_ttl, timer=timer)
        self._cache_lock = threading.Lock()

    def clear_cache(self) -> None:
        with self._cache_lock:
            self.cache.clear()

    def cached_count(self) -> int:
        """Number of live cache entries; expired ones are purged first."""
        with self._cache_lock:
            self.cache.expire()
            return len(self.cache)

    def target_for(self, url: str) -> str:
        """Return the URL actually requested for *url*."""
        if not self.relay_url:
            return url
        sep = "&" if "?" in self.relay_url else "?"
        if self.relay_url.endswith(("?", "&")):
            sep = ""
        return f"{self.relay_url}{sep}url={quote(url, safe='')}"

    def fetch(
        self,
        url: str,
        as_binary: bool = True,
        timeout: float = 10.0,
        referer: Optional[str] = None,
    ) -> FetchResult:
        """Fetch *url* and return a :class:`FetchResult`.

        Raises:
            TransportFailure: On timeouts, DNS errors, refused connections
                and other failures where no HTTP response was received.
        """
        target = self.target_for(url)
        key = (as_binary, target)

        with self._cache_lock:
            hit = self.cache.get(key)
        if hit is not None:
            logger.debug("[fetch] cache hit %s", target)
            return hit

        headers = {"User-Agent": self.user_agent, "Referer": referer or url}
        try:
            response = self._client.get(target, headers=headers, timeout=timeout)
        except httpx.RequestError as exc:
            logger.warning("[fetch] %s failed: %r", target, exc)
            raise TransportFailure(url, str(exc) or type(exc).__name__) from exc

        if response.status_code >= _MAX_STATUS:
            raise TransportFailure(url, f"invalid status {response.status_code}")

        body: bytes | str = response.content if as_binary else response.text
        result = FetchResult(
            status=response.status_code,
            body=body,
            headers=dict(response.headers),
        )
        logger.info("[fetch] HTTP %s %s", result.status, target)

        if result.ok:
            with self._cache_lock:
                self.cache[key] = result
        return result
