"""Data models for a single upstream call and its attempt history."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, List, Mapping


@dataclass(frozen=True)
class UpstreamRequest:
    """A fully-constructed upstream call: base URL plus query parameters."""

    url: str
    params: Mapping[str, str] = field(default_factory=dict)
    required: FrozenSet[str] = frozenset()

    def missing(self) -> List[str]:
        """Return the required parameter names that are absent or blank."""
        return sorted(
            name for name in self.required if not (self.params.get(name) or "").strip()
        )


class Outcome(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class FetchAttempt:
    """One try within a fetch.  ``wait`` is the backoff slept before it, in seconds."""

    index: int
    wait: float
    outcome: Outcome
    reason: str = ""


@dataclass(frozen=True)
class FetchResult:
    """The accepted payload plus every attempt that led to it."""

    payload: Any
    attempts: List[FetchAttempt] = field(default_factory=list)
