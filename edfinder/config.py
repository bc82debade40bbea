"""Centralised settings for the ED System Finder proxy.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

The resulting :class:`Settings` value is built once at process start and
handed explicitly to :func:`edfinder.api.app.create_app` and
:class:`edfinder.upstream.fetcher.Fetcher`; nothing reads the environment
while a request is being served.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/91.0.4472.124 Safari/537.36"
)


def _optional_path(name: str) -> Optional[Path]:
    value = os.environ.get(name, "").strip()
    return Path(value) if value else None


@dataclass(frozen=True)
class Settings:
    # ------------------------------------------------------------------
    # Retry discipline
    # ------------------------------------------------------------------
    max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("FETCH_MAX_ATTEMPTS", "3"))
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "15.0"))
    )
    backoff_base: float = field(
        default_factory=lambda: float(os.environ.get("BACKOFF_BASE", "3.0"))
    )

    # ------------------------------------------------------------------
    # Upstreams
    # ------------------------------------------------------------------
    inara_base_url: str = field(
        default_factory=lambda: os.environ.get("INARA_BASE_URL", "https://inara.cz")
    )
    edsm_base_url: str = field(
        default_factory=lambda: os.environ.get("EDSM_BASE_URL", "https://www.edsm.net")
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("USER_AGENT", _BROWSER_UA)
    )

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------
    host: str = field(default_factory=lambda: os.environ.get("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", "3000")))
    static_dir: Optional[Path] = field(
        default_factory=lambda: _optional_path("STATIC_DIR")
    )


# Module-level default, built once at import:
#   from edfinder.config import settings
settings = Settings()
