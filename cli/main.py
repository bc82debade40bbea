"""ED System Finder CLI — entry-point for the proxy and one-shot lookups.

Usage:
    python cli/main.py --help

Commands:
    serve     → run the HTTP proxy with uvicorn
    nearest   → nearest systems scraped from Inara
    sphere    → systems within a radius, from EDSM
    bodies    → EDSM body listing (raw JSON)
    system    → EDSM system coordinates (raw JSON)
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from edfinder.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
from typing import Any, List, Optional

import typer

from edfinder.config import settings
from edfinder.errors import MissingParameterError, UpstreamExhaustedError
from edfinder.models import NormalizedSystem
from edfinder.service import (
    nearest_systems,
    sphere_systems,
    system_bodies,
    system_coordinates,
)
from edfinder.upstream.fetcher import Fetcher

app = typer.Typer(
    name="edfinder",
    help="ED System Finder, the Inara / EDSM proxy.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run(tag: str, coro: Any) -> Any:
    """Run a service coroutine, turning its errors into a non-zero exit."""
    try:
        return asyncio.run(coro)
    except MissingParameterError as exc:
        typer.echo(f"[{tag}] {exc.message}", err=True)
        raise typer.Exit(2)
    except UpstreamExhaustedError as exc:
        typer.echo(f"[{tag}] Upstream request failed: {exc.details}", err=True)
        raise typer.Exit(1)


def _fetcher() -> Fetcher:
    return Fetcher.from_settings(settings)


def _fmt_distance(value: Optional[float]) -> str:
    return f"{value:.2f} Ly" if value is not None else "-"


def _fmt_direction(value: Optional[int]) -> str:
    return f"{value}°" if value is not None else "-"


def _echo_systems(tag: str, systems: List[NormalizedSystem], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps([s.model_dump(by_alias=True) for s in systems], indent=2))
        return
    if not systems:
        typer.echo(f"[{tag}] No systems found.")
        return
    for s in systems:
        typer.echo(
            f"  {s.name:<32} {_fmt_distance(s.distance):>11} {_fmt_direction(s.direction):>6}"
            f"  {s.economy or '-'} / {s.security or '-'} / {s.allegiance}"
            f"  factions={s.factions} stations={s.stations} bodies={s.body_count}"
        )
    typer.echo(f"[{tag}] {len(systems)} system(s).")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: $HOST)."),
    port: Optional[int] = typer.Option(None, help="Port (default: $PORT)."),
    reload: bool = typer.Option(False, help="Reload on source changes."),
) -> None:
    """Run the proxy API with uvicorn."""
    import uvicorn  # noqa: PLC0415

    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"[serve] ED System Finder server running at http://{bind_host}:{bind_port}")
    uvicorn.run("edfinder.api.app:app", host=bind_host, port=bind_port, reload=reload)


# ---------------------------------------------------------------------------
# One-shot lookups
# ---------------------------------------------------------------------------
@app.command("nearest")
def nearest(
    reference: str = typer.Argument(..., help="Reference system name."),
    any_population: bool = typer.Option(
        False, "--any-population", help="Include populated systems."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print normalised JSON."),
) -> None:
    """List systems nearest to REFERENCE, scraped from Inara."""
    systems = _run(
        "nearest", nearest_systems(_fetcher(), settings, reference, any_population)
    )
    _echo_systems("nearest", systems, as_json)


@app.command("sphere")
def sphere(
    system: str = typer.Argument(..., help="Centre system name."),
    radius: float = typer.Option(100, min=0, help="Outer radius in light years."),
    min_radius: float = typer.Option(0, "--min-radius", min=0, help="Inner radius."),
    as_json: bool = typer.Option(False, "--json", help="Print normalised JSON."),
) -> None:
    """List systems within RADIUS of SYSTEM, from EDSM."""
    systems = _run(
        "sphere", sphere_systems(_fetcher(), settings, system, radius, min_radius)
    )
    _echo_systems("sphere", systems, as_json)


@app.command("bodies")
def bodies(system: str = typer.Argument(..., help="System name.")) -> None:
    """Print EDSM's body listing for SYSTEM."""
    data = _run("bodies", system_bodies(_fetcher(), settings, system))
    typer.echo(json.dumps(data, indent=2))


@app.command("system")
def system(name: str = typer.Argument(..., help="System name.")) -> None:
    """Print EDSM's system record (with coordinates) for NAME."""
    data = _run("system", system_coordinates(_fetcher(), settings, name))
    typer.echo(json.dumps(data, indent=2))


if __name__ == "__main__":
    app()
