"""Centralised settings for the viewer.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) 5ch Viewer"


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Upstream sources
    # ------------------------------------------------------------------
    default_board_url: str = field(
        default_factory=lambda: os.environ.get("DEFAULT_BOARD_URL", "").strip()
    )
    relay_url: str = field(
        default_factory=lambda: os.environ.get("RELAY_URL", "").strip()
    )
    bbsmenu_url: str = field(
        default_factory=lambda: os.environ.get(
            "BBSMENU_URL", "https://menu.5ch.net/bbsmenu.html"
        ).strip()
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("USER_AGENT", _DEFAULT_UA)
    )
    # Post-logs and indexes are always served in the legacy encoding.
    legacy_encoding: str = "cp932"

    # ------------------------------------------------------------------
    # Outbound fetches
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "10.0"))
    )
    fallback_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FALLBACK_TIMEOUT", "10.0"))
    )
    cache_ttl: float = field(
        default_factory=lambda: float(os.environ.get("CACHE_TTL", "90"))
    )
    cache_size: int = field(
        default_factory=lambda: int(os.environ.get("CACHE_SIZE", "512"))
    )

    # ------------------------------------------------------------------
    # Inbound requests
    # ------------------------------------------------------------------
    host: str = field(default_factory=lambda: os.environ.get("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", "3000")))
    rate_limit_max: int = field(
        default_factory=lambda: int(os.environ.get("RATE_LIMIT_MAX", "40"))
    )
    rate_limit_window: float = field(
        default_factory=lambda: float(os.environ.get("RATE_LIMIT_WINDOW", "60"))
    )

    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )


# Module-level singleton — import this everywhere:
#   from chviewer.config import settings
settings = Settings()
