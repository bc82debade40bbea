"""Inara endpoint — nearest systems scraped from the Inara website.

Routes
------
GET /api/inara/nearest-systems?referenceSystem=<name>&anyPopulation=true|false
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query, Request

from edfinder.api.errors import upstream_failure
from edfinder.errors import UpstreamExhaustedError
from edfinder.models import NormalizedSystem
from edfinder.service import nearest_systems

router = APIRouter()


@router.get("/nearest-systems", response_model=List[NormalizedSystem])
async def nearest_systems_endpoint(
    request: Request,
    reference_system: Optional[str] = Query(None, alias="referenceSystem"),
    any_population: Optional[str] = Query(None, alias="anyPopulation"),
) -> List[NormalizedSystem]:
    """Systems nearest to ``referenceSystem``.

    Only unpopulated systems are listed unless ``anyPopulation=true``.
    """
    try:
        return await nearest_systems(
            request.app.state.fetcher,
            request.app.state.settings,
            reference_system,
            any_population=any_population == "true",
        )
    except UpstreamExhaustedError as exc:
        raise upstream_failure("Failed to fetch data from Inara.cz", exc) from exc
