"""Schema unification: map Inara rows and EDSM systems onto :class:`NormalizedSystem`.

Inara rows are already in the target shape and pass straight through.  EDSM
systems lose information on the way:

* ``factions`` is ``1`` when EDSM names a controlling faction, else ``0``;
  EDSM does not publish a faction count.
* ``stations`` is always ``0`` and ``direction`` always ``None``; the
  sphere-systems endpoint provides neither.
* ``allegiance`` falls back to ``"Independent"`` when absent, null or empty.

Malformed EDSM entries are kept as best-effort defaulted records, whereas
the Inara extractor drops short rows.
"""

from __future__ import annotations

from typing import Any, Iterable, List

from edfinder.models import NormalizedSystem, RawJsonSystem, SourceKind
from edfinder.scraper.models import RawScrapedRow

DEFAULT_ALLEGIANCE = "Independent"


def from_scraped(row: RawScrapedRow) -> NormalizedSystem:
    return NormalizedSystem(
        name=row.name,
        economy=row.economy,
        security=row.security,
        allegiance=row.allegiance,
        factions=row.factions,
        stations=row.stations,
        distance=row.distance,
        direction=row.direction,
        body_count=0,
    )


def from_edsm(system: RawJsonSystem) -> NormalizedSystem:
    info = system.information
    return NormalizedSystem(
        name=system.name or "",
        economy=(info.economy if info else None) or "",
        security=(info.security if info else None) or "",
        allegiance=(info.allegiance if info else None) or DEFAULT_ALLEGIANCE,
        factions=1 if info is not None and info.faction is not None else 0,
        stations=0,
        distance=system.distance,
        direction=None,
        body_count=max(system.body_count or 0, 0),
    )


def normalize(source: SourceKind, records: Iterable[Any]) -> List[NormalizedSystem]:
    """Normalise *records* from *source*, one output per input, order preserved.

    EDSM records may be given as decoded JSON or as :class:`RawJsonSystem`.
    """
    if source is SourceKind.INARA:
        return [from_scraped(row) for row in records]
    return [
        from_edsm(rec if isinstance(rec, RawJsonSystem) else RawJsonSystem.from_json(rec))
        for rec in records
    ]
