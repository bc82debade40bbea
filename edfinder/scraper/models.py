"""Data models for the Inara scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RawScrapedRow:
    """One row of Inara's nearest-star-systems table.

    ``distance`` and ``direction`` are ``None`` when the cell carries no
    usable value; they are never defaulted to zero.
    """

    name: str = ""
    economy: str = ""
    security: str = ""
    allegiance: str = ""
    factions: int = 0
    stations: int = 0
    distance: Optional[float] = None
    direction: Optional[int] = None
