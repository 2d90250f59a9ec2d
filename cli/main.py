"""chviewer CLI — serve the viewer or run its fetch pipeline from a terminal.

Usage:
    python cli/main.py --help

Commands:
    serve    → run the HTTP viewer under uvicorn
    board    → print a board's thread index
    thread   → print a thread's posts (post-log, or the rendered fallback)
    menus    → print the board directory
    diag     → print upstream status codes for a board / thread
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from chviewer.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from contextlib import contextmanager
from typing import Iterator, Optional

import typer

from chviewer.config import settings
from chviewer.errors import ViewerError
from chviewer.loader import ThreadLoader
from chviewer.parsers.body import strip_tags
from chviewer.parsers.fallback import build_default_extractor
from chviewer.scraper.fetcher import ContentFetcher, build_client

app = typer.Typer(
    name="chviewer",
    help="Simple 5ch Viewer CLI.",
    no_args_is_help=True,
)


@contextmanager
def _loader() -> Iterator[ThreadLoader]:
    """Yield a loader wired like the server's, closing the client afterwards."""
    client = build_client()
    fetcher = ContentFetcher(
        client,
        relay_url=settings.relay_url,
        user_agent=settings.user_agent,
        cache_ttl=settings.cache_ttl,
        cache_size=settings.cache_size,
    )
    try:
        yield ThreadLoader(fetcher, build_default_extractor(), settings)
    finally:
        client.close()


def _plain(body: str) -> str:
    """Drop the anchor markup from a rendered body for terminal output."""
    return strip_tags(body)


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: HOST env)."),
    port: Optional[int] = typer.Option(None, help="Port (default: PORT env)."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the viewer under uvicorn."""
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"[serve] Listening on http://{bind_host}:{bind_port}")
    uvicorn.run("chviewer.api.app:app", host=bind_host, port=bind_port, reload=reload)


# ---------------------------------------------------------------------------
# Pipeline commands
# ---------------------------------------------------------------------------
@app.command("board")
def board(
    url: Optional[str] = typer.Option(None, help="Board base URL (default: DEFAULT_BOARD_URL)."),
) -> None:
    """Print a board's thread index."""
    base = url or settings.default_board_url
    if not base:
        typer.echo("[board] A board URL is required (--url or DEFAULT_BOARD_URL).")
        raise typer.Exit(1)

    with _loader() as loader:
        try:
            page = loader.load_board(base)
        except ViewerError as exc:
            typer.echo(f"[board] Failed: {exc}")
            raise typer.Exit(1)

    if not page.threads:
        typer.echo("[board] No threads.")
        return
    for t in page.threads:
        count = "" if t.reply_count is None else f" ({t.reply_count})"
        typer.echo(f"  {t.id}  {t.title}{count}")


@app.command("thread")
def thread(
    base: Optional[str] = typer.Option(None, help="Board base URL."),
    dat: Optional[str] = typer.Option(None, help="Thread id."),
    url: Optional[str] = typer.Option(None, help="Post-log or read.cgi URL."),
) -> None:
    """Print a thread's posts."""
    if not url and not (base and dat):
        typer.echo("[thread] Pass --base and --dat, or --url.")
        raise typer.Exit(1)

    with _loader() as loader:
        try:
            page = loader.load_thread_url(url) if url else loader.load_thread(base, dat)
        except ViewerError as exc:
            typer.echo(f"[thread] Failed: {exc}")
            raise typer.Exit(1)

    typer.echo(f"[thread] {page.title or page.thread_id}  (source={page.source}, {len(page.posts)} posts)")
    for p in page.posts:
        typer.echo("")
        typer.echo(f"{p.ordinal} {p.author} [{p.meta}]")
        typer.echo(_plain(p.body))


@app.command("menus")
def menus(
    cat: Optional[str] = typer.Option(None, help="Only list boards of this category."),
) -> None:
    """Print the board directory."""
    with _loader() as loader:
        try:
            categories = loader.load_menus()
        except ViewerError as exc:
            typer.echo(f"[menus] Failed: {exc}")
            raise typer.Exit(1)

    if cat:
        categories = [m for m in categories if m.category == cat]
        if not categories:
            typer.echo(f"[menus] Unknown category {cat!r}.")
            raise typer.Exit(1)

    for m in categories:
        typer.echo(f"{m.category} ({len(m.boards)})")
        for b in m.boards:
            typer.echo(f"  {b.name}  {b.url}")


@app.command("diag")
def diag(
    base: str = typer.Option(..., help="Board base URL."),
    dat: Optional[str] = typer.Option(None, help="Thread id."),
) -> None:
    """Print the upstream status of the index, post-log and fallback URLs."""
    with _loader() as loader:
        try:
            probes = loader.diagnose(base, dat)
        except ViewerError as exc:
            typer.echo(f"[diag] Failed: {exc}")
            raise typer.Exit(1)

    for p in probes:
        outcome = p.status if p.status is not None else f"error: {p.error}"
        typer.echo(f"  {p.name:<8} {outcome}  {p.url}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
