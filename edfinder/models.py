"""EDSM record types and the canonical nearby-system output contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class SourceKind(str, Enum):
    INARA = "inara"
    EDSM = "edsm"


# ---------------------------------------------------------------------------
# Field coercion
#
# EDSM omits keys, sends nulls and sends empty strings interchangeably.  Each
# helper maps all three to ``None`` so the defaulting rules in
# ``edfinder.normalize`` only ever see "value" or "no value".
# ---------------------------------------------------------------------------

def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value or None


def _int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _positive_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value else None


@dataclass(frozen=True)
class RawJsonInformation:
    """The optional ``information`` block of an EDSM system."""

    economy: Optional[str] = None
    security: Optional[str] = None
    allegiance: Optional[str] = None
    faction: Optional[Any] = None
    population: Optional[int] = None

    @classmethod
    def from_json(cls, obj: Any) -> Optional["RawJsonInformation"]:
        if not isinstance(obj, Mapping):
            return None
        faction = obj.get("faction")
        return cls(
            economy=_text(obj.get("economy")),
            security=_text(obj.get("security")),
            allegiance=_text(obj.get("allegiance")),
            faction=faction if faction not in (None, "", {}, []) else None,
            population=_int(obj.get("population")),
        )


@dataclass(frozen=True)
class RawJsonSystem:
    """One entry of an EDSM ``sphere-systems`` response."""

    name: Optional[str] = None
    information: Optional[RawJsonInformation] = None
    distance: Optional[float] = None
    body_count: Optional[int] = None

    @classmethod
    def from_json(cls, obj: Any) -> "RawJsonSystem":
        """Build from any decoded JSON value; non-objects give an all-absent record."""
        if not isinstance(obj, Mapping):
            return cls()
        return cls(
            name=_text(obj.get("name")),
            information=RawJsonInformation.from_json(obj.get("information")),
            distance=_positive_float(obj.get("distance")),
            body_count=_int(obj.get("bodyCount")),
        )


class NormalizedSystem(BaseModel):
    """A nearby star system, identical in shape whichever upstream produced it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    economy: str = ""
    security: str = ""
    allegiance: str = "Independent"
    factions: int = Field(0, ge=0)
    stations: int = Field(0, ge=0)
    distance: Optional[float] = None
    direction: Optional[int] = None
    body_count: int = Field(0, alias="bodyCount")
