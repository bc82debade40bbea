"""Retrying HTTP fetcher shared by every upstream route.

One :class:`Fetcher` call performs up to ``max_attempts`` sequential GETs
against a single URL.  Before attempt *n* (n > 1) it sleeps
``backoff(n - 1)`` seconds, where the default backoff is linear in the number
of failed attempts (3 s, 6 s, 9 s, ...).  Each attempt is bounded by its own
timeout.

What counts as success is upstream-specific, so callers inject an *accept*
predicate.  It receives the HTTP 200 :class:`httpx.Response` and returns the
decoded payload, or raises :class:`RetryableUpstreamError` to burn an attempt.
Non-200 statuses, transport errors and timeouts are always retryable.  Once
the budget is spent an :class:`UpstreamExhaustedError` carries the last
failure's message back to the caller.
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from typing import Any, Awaitable, Callable, List, Mapping, Optional

import httpx

from edfinder.config import Settings
from edfinder.errors import RetryableUpstreamError, UpstreamExhaustedError
from edfinder.upstream.models import FetchAttempt, FetchResult, Outcome

AcceptFn = Callable[[httpx.Response], Any]
BackoffFn = Callable[[int], float]
SleepFn = Callable[[float], Awaitable[None]]


def linear_backoff(base: float = 3.0) -> BackoffFn:
    """Return a backoff function waiting ``failed * base`` seconds."""

    def _backoff(failed: int) -> float:
        return failed * base

    return _backoff


def accept_ok(response: httpx.Response) -> str:
    """Default predicate: any HTTP 200 is a success; return the body text."""
    return response.text


class Fetcher:
    """GET with a fixed attempt budget and injectable backoff and success rules."""

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        timeout: float = 15.0,
        backoff: Optional[BackoffFn] = None,
        sleep: Optional[SleepFn] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._backoff = backoff or linear_backoff()
        self._sleep = sleep or asyncio.sleep
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "Fetcher":
        return cls(
            max_attempts=settings.max_attempts,
            timeout=settings.request_timeout,
            backoff=linear_backoff(settings.backoff_base),
            **kwargs,
        )

    async def _get(
        self,
        url: str,
        params: Optional[Mapping[str, str]],
        headers: Optional[Mapping[str, str]],
        timeout: float,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            return await client.get(url, params=params, headers=headers)

    async def fetch(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        accept: AcceptFn = accept_ok,
        label: Optional[str] = None,
        max_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> FetchResult:
        """Fetch *url*, retrying until *accept* succeeds or the budget is spent.

        Raises:
            ValueError: If the per-call budget is below one attempt.
            UpstreamExhaustedError: If every attempt failed.
        """
        budget = self.max_attempts if max_attempts is None else max_attempts
        if budget < 1:
            raise ValueError("max_attempts must be at least 1")
        per_attempt = self.timeout if timeout is None else timeout
        target = label or url
        attempts: List[FetchAttempt] = []
        last_error = "All attempts failed"

        for index in range(1, budget + 1):
            wait = self._backoff(index - 1) if index > 1 else 0.0
            if wait > 0:
                print(f"[fetch] Waiting {wait * 1000:.0f}ms before retry …", file=sys.stderr)
                await self._sleep(wait)

            print(f"[fetch] Request attempt {index}/{budget} for {target}", file=sys.stderr)
            try:
                response = await asyncio.wait_for(
                    self._get(url, params, headers, per_attempt), per_attempt
                )
                if response.status_code != 200:
                    raise RetryableUpstreamError(
                        f"Request failed with status code {response.status_code}"
                    )
                payload = accept(response)
            except asyncio.TimeoutError:
                last_error = f"timeout of {per_attempt * 1000:.0f}ms exceeded"
            except (httpx.HTTPError, RetryableUpstreamError) as exc:
                last_error = str(exc) or exc.__class__.__name__
            else:
                attempts.append(FetchAttempt(index, wait, Outcome.SUCCESS))
                return FetchResult(payload=payload, attempts=attempts)

            print(f"[fetch] Attempt {index} failed: {last_error}", file=sys.stderr)
            attempts.append(FetchAttempt(index, wait, Outcome.RETRYABLE, last_error))

        attempts[-1] = replace(attempts[-1], outcome=Outcome.TERMINAL)
        print(f"[fetch] All request attempts failed for {target}", file=sys.stderr)
        raise UpstreamExhaustedError(target, last_error, attempts)
