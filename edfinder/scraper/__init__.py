"""Scraper package — Inara HTML table extraction."""

from edfinder.scraper.extractor import extract_rows, extract_systems
from edfinder.scraper.models import RawScrapedRow

__all__ = ["extract_rows", "extract_systems", "RawScrapedRow"]
