"""Upstream package — retrying fetcher and Inara / EDSM request builders."""

from edfinder.upstream.fetcher import Fetcher, linear_backoff
from edfinder.upstream.models import FetchAttempt, FetchResult, Outcome, UpstreamRequest

__all__ = [
    "Fetcher",
    "linear_backoff",
    "FetchAttempt",
    "FetchResult",
    "Outcome",
    "UpstreamRequest",
]
