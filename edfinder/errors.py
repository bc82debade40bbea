"""Exception hierarchy shared by the fetcher, the use-cases and the API layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from edfinder.upstream.models import FetchAttempt


class FinderError(Exception):
    """Base class for every error raised by this package."""


class MissingParameterError(FinderError):
    """A required query parameter was absent or blank.

    Never retried; surfaced to the client as HTTP 400.
    """

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name
        self.message = message


class RetryableUpstreamError(FinderError):
    """Raised by a success predicate to reject a response and ask for a retry."""


class UpstreamExhaustedError(FinderError):
    """Every attempt in the budget failed.

    ``details`` holds the message of the last underlying failure and
    ``attempts`` the full attempt history for diagnostics.
    """

    def __init__(
        self,
        target: str,
        details: str,
        attempts: Sequence["FetchAttempt"] = (),
    ) -> None:
        super().__init__(f"{target}: {details}")
        self.target = target
        self.details = details
        self.attempts = list(attempts)
