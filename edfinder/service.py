"""Use-case functions shared by the HTTP routes and the CLI.

Each function validates its identifying parameter, builds the upstream
request, runs it through the :class:`Fetcher` with the route's success
predicate and hands the payload to the extractor or normalizer.  Validation
happens before any network I/O.

Raises:
    MissingParameterError: The system name is absent or blank.
    UpstreamExhaustedError: The attempt budget was spent.
"""

from __future__ import annotations

import sys
from typing import Any, List, Optional

from edfinder.config import Settings
from edfinder.errors import MissingParameterError
from edfinder.models import NormalizedSystem, SourceKind
from edfinder.normalize import normalize
from edfinder.scraper.extractor import extract_systems
from edfinder.upstream.fetcher import Fetcher, accept_ok
from edfinder.upstream.models import UpstreamRequest
from edfinder.upstream.sources import (
    JSON_HEADERS,
    accept_json,
    accept_non_empty,
    accept_sphere,
    edsm_bodies_request,
    edsm_sphere_request,
    edsm_system_request,
    html_headers,
    inara_nearest_request,
)


def _require(request: UpstreamRequest, name: str, message: str) -> None:
    if request.missing():
        raise MissingParameterError(name, message)


async def nearest_systems(
    fetcher: Fetcher,
    settings: Settings,
    reference_system: Optional[str],
    any_population: bool = False,
) -> List[NormalizedSystem]:
    """Systems nearest to *reference_system*, scraped from Inara."""
    request = inara_nearest_request(settings, reference_system or "", any_population)
    _require(request, "referenceSystem", "Reference system is required")

    print(f"[inara] Proxying request to Inara.cz for: {reference_system}", file=sys.stderr)
    result = await fetcher.fetch(
        request.url,
        params=request.params,
        headers=html_headers(settings),
        accept=accept_ok,
        label="Inara.cz",
    )
    return normalize(SourceKind.INARA, extract_systems(result.payload))


async def sphere_systems(
    fetcher: Fetcher,
    settings: Settings,
    system_name: Optional[str],
    radius: float = 100,
    min_radius: float = 0,
) -> List[NormalizedSystem]:
    """Systems within *radius* light years of *system_name*, from EDSM."""
    request = edsm_sphere_request(settings, system_name or "", radius, min_radius)
    _require(request, "systemName", "System name is required")

    print(
        f"[edsm] Proxying request to EDSM sphere-systems: {system_name}, "
        f"radius: {request.params['radius']}",
        file=sys.stderr,
    )
    result = await fetcher.fetch(
        request.url,
        params=request.params,
        headers=JSON_HEADERS,
        accept=accept_sphere,
        label="EDSM sphere-systems",
    )
    return normalize(SourceKind.EDSM, result.payload)


async def system_bodies(
    fetcher: Fetcher, settings: Settings, system_name: Optional[str]
) -> Any:
    """EDSM body listing for *system_name*, passed through unmodified."""
    request = edsm_bodies_request(settings, system_name or "")
    _require(request, "systemName", "System name is required")

    print(f"[edsm] Proxying request to EDSM for system: {system_name}", file=sys.stderr)
    result = await fetcher.fetch(
        request.url,
        params=request.params,
        headers=JSON_HEADERS,
        accept=accept_non_empty,
        label="EDSM bodies",
    )
    return result.payload


async def system_coordinates(
    fetcher: Fetcher, settings: Settings, system_name: Optional[str]
) -> Any:
    """EDSM system record with coordinates, passed through unmodified."""
    request = edsm_system_request(settings, system_name or "")
    _require(request, "systemName", "System name is required")

    print(f"[edsm] Proxying request to EDSM for system coordinates: {system_name}", file=sys.stderr)
    result = await fetcher.fetch(
        request.url,
        params=request.params,
        headers=JSON_HEADERS,
        accept=accept_json,
        label="EDSM system",
    )
    return result.payload
