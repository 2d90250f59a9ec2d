"""FastAPI application factory.

Lifespan
--------
On startup the app builds the shared components once and stores them on
``app.state``:

    settings  — :class:`~chviewer.config.Settings`
    cache     — the fetcher's ``cachetools.TTLCache`` (successful fetches)
    fetcher   — :class:`~chviewer.scraper.fetcher.ContentFetcher`
    loader    — :class:`~chviewer.loader.ThreadLoader`
    limiter   — :class:`~chviewer.api.ratelimit.RateLimiter`

On shutdown the HTTP client is closed and the cache emptied.  Components
passed to :func:`create_app` are used instead of freshly built ones.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from chviewer import __version__
from chviewer.api.ratelimit import RateLimiter, install_rate_limit
from chviewer.api.routers import board as board_router
from chviewer.api.routers import diag as diag_router
from chviewer.api.routers import menus as menus_router
from chviewer.config import Settings, settings as default_settings
from chviewer.loader import ThreadLoader
from chviewer.logs import setup_logging
from chviewer.parsers.fallback import build_default_extractor
from chviewer.scraper.fetcher import ContentFetcher, build_client


def create_app(
    settings: Optional[Settings] = None,
    fetcher: Optional[ContentFetcher] = None,
    limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build the fetch pipeline on startup and release it on shutdown."""
        setup_logging(cfg.log_level)
        client = None
        active_fetcher = fetcher
        if active_fetcher is None:
            client = build_client()
            active_fetcher = ContentFetcher(
                client,
                relay_url=cfg.relay_url,
                user_agent=cfg.user_agent,
                cache_ttl=cfg.cache_ttl,
                cache_size=cfg.cache_size,
            )

        app.state.settings = cfg
        app.state.cache = active_fetcher.cache
        app.state.fetcher = active_fetcher
        app.state.loader = ThreadLoader(active_fetcher, build_default_extractor(), cfg)
        app.state.limiter = limiter or RateLimiter(cfg.rate_limit_max, cfg.rate_limit_window)
        try:
            yield
        finally:
            active_fetcher.clear_cache()
            if client is not None:
                client.close()

    app = FastAPI(
        title="Simple 5ch Viewer",
        description=(
            "Forward proxy and renderer for 5ch-style boards: thread indexes, "
            "post-logs with a rendered-page fallback, and the board directory."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    install_rate_limit(app)

    app.include_router(board_router.router, tags=["board"])
    app.include_router(menus_router.router, tags=["menus"])
    app.include_router(diag_router.router, tags=["diag"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn chviewer.api.app:app --reload
app = create_app()
