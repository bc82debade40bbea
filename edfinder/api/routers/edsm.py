"""EDSM endpoints — sphere search, body listing and coordinate lookup.

Routes
------
GET /api/edsm/sphere-systems?systemName=<name>&radius=100&minRadius=0
GET /api/edsm/bodies?systemName=<name>
GET /api/edsm/system?systemName=<name>

``sphere-systems`` is normalised; ``bodies`` and ``system`` pass EDSM's JSON
through unmodified.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional

from fastapi import APIRouter, Query, Request

from edfinder.api.errors import ProxyError, upstream_failure
from edfinder.errors import UpstreamExhaustedError
from edfinder.models import NormalizedSystem
from edfinder.service import sphere_systems, system_bodies, system_coordinates

router = APIRouter()


def _radius(raw: Optional[str], default: float, name: str) -> float:
    """Parse a radius query value; absent or blank means *default*."""
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value) or value < 0:
        raise ProxyError(
            400,
            "Invalid request parameters",
            f"query.{name}: Input should be a non-negative number",
        )
    return value


@router.get("/sphere-systems", response_model=List[NormalizedSystem])
async def sphere_systems_endpoint(
    request: Request,
    system_name: Optional[str] = Query(None, alias="systemName"),
    radius: Optional[str] = Query(None),
    min_radius: Optional[str] = Query(None, alias="minRadius"),
) -> List[NormalizedSystem]:
    try:
        return await sphere_systems(
            request.app.state.fetcher,
            request.app.state.settings,
            system_name,
            radius=_radius(radius, 100, "radius"),
            min_radius=_radius(min_radius, 0, "minRadius"),
        )
    except UpstreamExhaustedError as exc:
        raise upstream_failure("Failed to fetch data from EDSM sphere-systems", exc) from exc


@router.get("/bodies")
async def bodies_endpoint(
    request: Request,
    system_name: Optional[str] = Query(None, alias="systemName"),
) -> Any:
    try:
        return await system_bodies(
            request.app.state.fetcher, request.app.state.settings, system_name
        )
    except UpstreamExhaustedError as exc:
        raise upstream_failure("Failed to fetch data from EDSM", exc) from exc


@router.get("/system")
async def system_endpoint(
    request: Request,
    system_name: Optional[str] = Query(None, alias="systemName"),
) -> Any:
    try:
        return await system_coordinates(
            request.app.state.fetcher, request.app.state.settings, system_name
        )
    except UpstreamExhaustedError as exc:
        raise upstream_failure("Failed to fetch system data from EDSM", exc) from exc
