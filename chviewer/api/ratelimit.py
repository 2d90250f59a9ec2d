"""Per-client sliding-window rate limiting.

A :class:`RateLimiter` is created by the application lifespan and consulted
by the HTTP middleware registered in :func:`install_rate_limit`.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

EXEMPT_PATHS = frozenset({"/healthz"})


class RateLimiter:
    """Allow at most *max_requests* per *window* seconds for each key."""

    def __init__(
        self,
        max_requests: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window = window
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        """Number of clients currently tracked."""
        with self._lock:
            return len(self._hits)

    def _sweep(self, now: float) -> None:
        # Called with the lock held; at most once per window.
        if now - self._last_sweep < self.window:
            return
        self._last_sweep = now
        stale = [k for k, hits in self._hits.items() if not hits or now - hits[-1] >= self.window]
        for key in stale:
            del self._hits[key]

    def hit(self, key: str) -> float:
        """Record a request for *key*.

        Returns 0 when the request is allowed, otherwise the number of
        seconds until the oldest hit leaves the window.
        """
        now = self._clock()
        with self._lock:
            self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            while hits and now - hits[0] >= self.window:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return self.window - (now - hits[0])
            hits.append(now)
            return 0.0


def install_rate_limit(app: FastAPI) -> None:
    """Register middleware that answers 429 once a client exceeds its budget.

    The limiter is read from ``app.state.limiter`` at request time so the
    lifespan (or a test) decides which instance is used.
    """

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        limiter: RateLimiter | None = getattr(request.app.state, "limiter", None)
        if limiter is None or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        retry_after = limiter.hit(client)
        if retry_after > 0:
            return PlainTextResponse(
                "Too many requests. Please wait a moment.",
                status_code=429,
                headers={"Retry-After": str(max(1, int(retry_after + 0.999)))},
            )
        return await call_next(request)
