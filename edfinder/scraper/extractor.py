"""Table extraction: turns an Inara nearest-systems page into :class:`RawScrapedRow` records."""

from __future__ import annotations

import re
import sys
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from edfinder.scraper.models import RawScrapedRow

_TABLE_SELECTOR = "table.tablesortercollapsed"
_MIN_CELLS = 7

_INT_RE = re.compile(r"^[+-]?\d+")
_DISTANCE_RE = re.compile(r"(\d+\.\d+)\s*Ly")
_ROTATE_RE = re.compile(r"rotate\((-?\d+)deg\)")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _cell_text(cell: Tag) -> str:
    return cell.get_text().strip()


def _parse_count(text: str) -> int:
    """Parse a leading integer, ``0`` when there is none.  Never negative."""
    match = _INT_RE.match(text.strip())
    if not match:
        return 0
    return max(int(match.group(0)), 0)


def _parse_distance(text: str) -> Optional[float]:
    match = _DISTANCE_RE.search(text)
    return float(match.group(1)) if match else None


def _parse_direction(cell: Tag) -> Optional[int]:
    """Read the compass angle from the ``rotate(<n>deg)`` style of the arrow span."""
    arrow = cell.select_one(".distancedirection")
    if arrow is None:
        return None
    style = arrow.get("style")
    if not style:
        return None
    match = _ROTATE_RE.search(str(style))
    return int(match.group(1)) if match else None


def _body_rows(table: Tag) -> List[Tag]:
    """Rows of every ``<tbody>``, or of the whole table when no tbody was emitted."""
    if table.find("tbody") is not None:
        return table.select("tbody tr")
    return [
        row
        for row in table.find_all("tr")
        if row.find_parent(["thead", "tfoot"]) is None
    ]


def _parse_row(cells: List[Tag]) -> RawScrapedRow:
    anchor = cells[0].find("a")
    distance_cell = cells[6]
    return RawScrapedRow(
        name=_cell_text(anchor) if anchor is not None else "",
        economy=_cell_text(cells[1]),
        security=_cell_text(cells[2]),
        allegiance=_cell_text(cells[3]),
        factions=_parse_count(_cell_text(cells[4])),
        stations=_parse_count(_cell_text(cells[5])),
        distance=_parse_distance(_cell_text(distance_cell)),
        direction=_parse_direction(distance_cell),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_rows(soup: BeautifulSoup) -> List[RawScrapedRow]:
    """Extract system rows from an already-parsed document.

    Rows with fewer than seven cells are skipped.  A document without the
    systems table yields an empty list.  Row order is preserved; Inara sorts
    by distance.
    """
    table = soup.select_one(_TABLE_SELECTOR)
    if table is None:
        print("[inara] No star system table found in the HTML", file=sys.stderr)
        return []

    rows: List[RawScrapedRow] = []
    for row in _body_rows(table):
        cells = row.find_all("td")
        if len(cells) < _MIN_CELLS:
            continue
        rows.append(_parse_row(cells))
    return rows


def extract_systems(html: str) -> List[RawScrapedRow]:
    """Parse *html* and extract its system rows.  Never raises on malformed markup."""
    return extract_rows(BeautifulSoup(html or "", "html.parser"))
