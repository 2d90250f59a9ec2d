"""Board directory browsing.

Routes
------
GET /boards               Every board, flat
GET /menus                Category list
GET /menus/c?cat=<name>   Boards of one category
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from chviewer.api.rendering import render, render_error
from chviewer.errors import ViewerError

router = APIRouter()


def _load_menus(request: Request):
    return request.app.state.loader.load_menus()


@router.get("/boards", response_class=HTMLResponse)
def boards(request: Request) -> HTMLResponse:
    try:
        menus = _load_menus(request)
    except ViewerError as exc:
        return render_error(request, 500, f"Failed to load the board directory: {exc}")
    links = [link for menu in menus for link in menu.boards]
    return render(request, "boards.html", {"boards": links})


@router.get("/menus", response_class=HTMLResponse)
def menus(request: Request) -> HTMLResponse:
    try:
        categories = _load_menus(request)
    except ViewerError as exc:
        return render_error(request, 500, f"Failed to load the board directory: {exc}")
    return render(request, "menus.html", {"menus": categories})


@router.get("/menus/c", response_class=HTMLResponse)
def category(request: Request, cat: Optional[str] = None) -> HTMLResponse:
    if not cat:
        return render_error(request, 400, "A category is required (?cat=...).")
    try:
        categories = _load_menus(request)
    except ViewerError as exc:
        return render_error(request, 500, f"Failed to load the board directory: {exc}")

    menu = next((m for m in categories if m.category == cat), None)
    if menu is None:
        return render_error(request, 404, f"Unknown category: {cat}")
    return render(request, "category.html", {"menu": menu})
