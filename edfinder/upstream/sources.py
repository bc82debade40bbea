"""Upstream request builders and per-route success predicates.

Inara only publishes HTML, so any 200 is accepted and body quality is left
to the extractor.  EDSM answers JSON, but its three endpoints signal "no
data" differently, and each predicate below keeps that distinction:

* sphere-systems: an empty array is a legitimate empty result, while an
  empty body or an ``{"error": ...}`` object is retried.
* bodies: an empty array or an empty body is retried.
* system: anything that decodes as JSON is accepted.
"""

from __future__ import annotations

from typing import Any, Dict, List

import httpx

from edfinder.config import Settings
from edfinder.errors import RetryableUpstreamError
from edfinder.upstream.models import UpstreamRequest

JSON_HEADERS = {"Accept": "application/json"}


def html_headers(settings: Settings) -> Dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml",
        "Accept-Language": "en-US,en;q=0.9",
    }


def _format_number(value: float) -> str:
    """Render *value* without losing precision; whole numbers drop the ``.0``."""
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


# ---------------------------------------------------------------------------
# Request builders
# ---------------------------------------------------------------------------

def inara_nearest_request(
    settings: Settings, reference_system: str, any_population: bool = False
) -> UpstreamRequest:
    """Inara's nearest-star-systems search.

    ``pi23`` selects the population filter: ``0`` for any population,
    ``-1`` for unpopulated systems only.
    """
    return UpstreamRequest(
        url=f"{settings.inara_base_url.rstrip('/')}/elite/nearest-starsystems/",
        params={
            "formbrief": "1",
            "ps1": reference_system,
            "pi3": "",
            "pi4": "0",
            "pi5": "0",
            "pi7": "0",
            "pi1": "0",
            "pi23": "0" if any_population else "-1",
            "pi6": "0",
            "pi26": "0",
            "ps3": "",
            "pi24": "0",
        },
        required=frozenset({"ps1"}),
    )


def edsm_sphere_request(
    settings: Settings, system_name: str, radius: float = 100, min_radius: float = 0
) -> UpstreamRequest:
    return UpstreamRequest(
        url=f"{settings.edsm_base_url.rstrip('/')}/api-v1/sphere-systems",
        params={
            "systemName": system_name,
            "radius": _format_number(radius),
            "minRadius": _format_number(min_radius),
            "showInformation": "1",
        },
        required=frozenset({"systemName"}),
    )


def edsm_bodies_request(settings: Settings, system_name: str) -> UpstreamRequest:
    return UpstreamRequest(
        url=f"{settings.edsm_base_url.rstrip('/')}/api-system-v1/bodies",
        params={"systemName": system_name},
        required=frozenset({"systemName"}),
    )


def edsm_system_request(settings: Settings, system_name: str) -> UpstreamRequest:
    return UpstreamRequest(
        url=f"{settings.edsm_base_url.rstrip('/')}/api-v1/system",
        params={"showCoordinates": "1", "systemName": system_name},
        required=frozenset({"systemName"}),
    )


# ---------------------------------------------------------------------------
# Success predicates
# ---------------------------------------------------------------------------

def _decode_json(response: httpx.Response) -> Any:
    if not response.content.strip():
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise RetryableUpstreamError(f"Invalid JSON received from EDSM: {exc}") from exc


def accept_json(response: httpx.Response) -> Any:
    """Any JSON document is a success."""
    return _decode_json(response)


def accept_sphere(response: httpx.Response) -> List[Any]:
    """Sphere-systems: an empty array is success, an error object is not."""
    data = _decode_json(response)
    if not data and not isinstance(data, (list, dict)):
        raise RetryableUpstreamError("Empty response received from EDSM sphere-systems")
    if isinstance(data, dict) and (data.get("errorCode") or data.get("error")):
        raise RetryableUpstreamError(str(data.get("error") or "EDSM API returned an error"))
    return data if isinstance(data, list) else []


def accept_non_empty(response: httpx.Response) -> Any:
    """Bodies: an empty payload is treated as a transient failure."""
    data = _decode_json(response)
    if not data and not isinstance(data, dict):
        raise RetryableUpstreamError("Empty response received from EDSM")
    return data
