"""FastAPI application factory.

State
-----
``create_app`` receives the process-wide :class:`Settings` and builds one
:class:`Fetcher` from it.  Both are stored on ``app.state`` and read by the
routes; neither holds per-request state.

Routers
-------
    /api/inara  — nearest systems scraped from Inara
    /api/edsm   — sphere search, bodies and coordinates from EDSM

When ``settings.static_dir`` points at a built frontend, its files are
served and every other GET falls back to its ``index.html``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from edfinder.api.errors import register_error_handlers
from edfinder.api.routers import edsm as edsm_router
from edfinder.api.routers import inara as inara_router
from edfinder.config import Settings, settings as default_settings
from edfinder.upstream.fetcher import Fetcher


def _mount_frontend(app: FastAPI, static_dir: Path) -> None:
    root = static_dir.resolve()
    index = root / "index.html"

    @app.get("/{path:path}", include_in_schema=False)
    async def frontend(path: str) -> FileResponse:
        candidate = (root / path).resolve()
        if path and candidate.is_relative_to(root) and candidate.is_file():
            return FileResponse(candidate)
        if index.is_file():
            return FileResponse(index)
        raise HTTPException(status_code=404, detail="Not Found")


def create_app(
    settings: Optional[Settings] = None,
    fetcher: Optional[Fetcher] = None,
) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    settings = settings or default_settings

    app = FastAPI(
        title="ED System Finder API",
        description=(
            "Proxy that fetches nearby-system data from Inara and EDSM with "
            "retries, and returns it in one normalised schema."
        ),
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.fetcher = fetcher or Fetcher.from_settings(settings)

    # The browser frontend may be served from another origin during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(inara_router.router, prefix="/api/inara", tags=["inara"])
    app.include_router(edsm_router.router, prefix="/api/edsm", tags=["edsm"])

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    if settings.static_dir is not None and settings.static_dir.is_dir():
        _mount_frontend(app, settings.static_dir)

    return app


# Module-level instance used by uvicorn:
#   uvicorn edfinder.api.app:app --reload
app = create_app()
