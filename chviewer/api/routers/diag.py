"""Operability endpoints.

Routes
------
GET /__diag?base=<board URL>&dat=<id>   Upstream status of subject/dat/read URLs
GET /healthz                            Liveness probe
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from chviewer.errors import MalformedInput

router = APIRouter()


@router.get("/__diag")
def diag(request: Request, base: Optional[str] = None, dat: Optional[str] = None) -> dict[str, Any]:
    """Probe the upstream URLs a board/thread view would use, in parallel."""
    base = (base or "").strip() or request.app.state.settings.default_board_url
    if not base:
        raise HTTPException(status_code=400, detail="base is required.")
    try:
        probes = request.app.state.loader.diagnose(base, dat or None)
    except MalformedInput as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "base": base,
        "dat": dat,
        "relay": bool(request.app.state.settings.relay_url),
        "probes": [asdict(p) for p in probes],
    }


@router.get("/healthz", response_class=PlainTextResponse)
def healthz() -> str:
    return "ok"
