"""HTML rendering for the viewer pages.

Templates only ever receive model records (``ThreadSummary``, ``Post``,
``CategoryMenu`` ...) plus a few plain strings; they never see raw
upstream text.  ``Post.body`` is already escaped and is emitted with
``|safe``; every other value goes through Jinja2 autoescaping.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: dict[str, Any] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    """Render template *name* with *context*."""
    return templates.TemplateResponse(
        request, name, context or {}, status_code=status_code
    )


def render_error(request: Request, status_code: int, message: str) -> HTMLResponse:
    return render(
        request,
        "error.html",
        {"status_code": status_code, "message": message},
        status_code=status_code,
    )
