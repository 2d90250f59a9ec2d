"""Board and thread pages.

Routes
------
GET /                                   Home form
GET /board?url=<board base URL>         Thread index
GET /thread?base=<board URL>&dat=<id>   Thread posts
GET /thread?url=<dat or read.cgi URL>   Thread posts
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from chviewer.api.rendering import render, render_error
from chviewer.errors import (
    MalformedInput,
    TransportFailure,
    UpstreamError,
    UpstreamForbidden,
    UpstreamNotFound,
    ViewerError,
)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def thread_error_message(exc: UpstreamError) -> str:
    if isinstance(exc, UpstreamNotFound):
        return "This thread is likely gone (dat落ち): the origin answered HTTP 404."
    if isinstance(exc, UpstreamForbidden):
        return (
            "The origin refused access (HTTP 403). "
            "Setting RELAY_URL may get around the block."
        )
    return f"The origin answered HTTP {exc.status}."


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/", response_class=HTMLResponse)
def home(request: Request) -> HTMLResponse:
    settings = request.app.state.settings
    return render(request, "home.html", {"default_board_url": settings.default_board_url})


@router.get("/board", response_class=HTMLResponse)
def board(request: Request, url: Optional[str] = None) -> HTMLResponse:
    """Render a board's thread index; ``url`` defaults to DEFAULT_BOARD_URL."""
    base = (url or "").strip() or request.app.state.settings.default_board_url
    if not base:
        return render_error(request, 400, "A board URL is required (?url=...).")

    try:
        page = request.app.state.loader.load_board(base)
    except MalformedInput as exc:
        return render_error(request, 400, str(exc))
    except ViewerError as exc:
        return render_error(request, 500, f"Failed to load the board: {exc}")

    return render(request, "board.html", {"page": page})


@router.get("/thread", response_class=HTMLResponse)
def thread(
    request: Request,
    base: Optional[str] = None,
    dat: Optional[str] = None,
    url: Optional[str] = None,
) -> HTMLResponse:
    """Render a thread, via its post-log when possible, else the fallback page."""
    loader = request.app.state.loader
    try:
        if url:
            page = loader.load_thread_url(url)
        elif base and dat:
            page = loader.load_thread(base, dat)
        else:
            return render_error(request, 400, "Missing parameters: base and dat, or url.")
    except MalformedInput as exc:
        return render_error(request, 400, str(exc))
    except UpstreamError as exc:
        # Only error statuses are passed through; anything else is a bad gateway.
        status = exc.status if exc.status >= 400 else 502
        return render_error(request, status, thread_error_message(exc))
    except TransportFailure as exc:
        return render_error(request, 502, f"Could not reach the origin: {exc.reason}")

    return render(request, "thread.html", {"page": page})
