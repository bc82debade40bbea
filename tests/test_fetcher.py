"""Tests for the retrying fetcher and the per-route success predicates.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made.
- Backoff sleeps go through an injected recorder, so tests assert the exact
  waits without actually sleeping.
- The per-attempt timeout is exercised by replacing ``Fetcher._get`` with a
  coroutine that outlives a tiny timeout.
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import httpx
import pytest
import respx

from edfinder.config import Settings
from edfinder.errors import RetryableUpstreamError, UpstreamExhaustedError
from edfinder.upstream.fetcher import Fetcher, accept_ok, linear_backoff
from edfinder.upstream.models import Outcome, UpstreamRequest
from edfinder.upstream.sources import (
    accept_json,
    accept_non_empty,
    accept_sphere,
    edsm_sphere_request,
    inara_nearest_request,
)

_URL = "https://upstream.example.com/data"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records the requested waits."""

    def __init__(self) -> None:
        self.waits: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)


def _fetcher(**kwargs) -> tuple[Fetcher, SleepRecorder]:
    sleep = SleepRecorder()
    return Fetcher(sleep=sleep, **kwargs), sleep


def _attempt_lines(captured: str) -> list[str]:
    return [line for line in captured.splitlines() if "Request attempt" in line]


def _response(body, status_code: int = 200) -> httpx.Response:
    if isinstance(body, str):
        return httpx.Response(status_code, text=body)
    return httpx.Response(status_code, json=body)


# ---------------------------------------------------------------------------
# Backoff
# ---------------------------------------------------------------------------

class TestLinearBackoff:
    def test_default_waits_are_three_six_nine_seconds(self) -> None:
        backoff = linear_backoff()
        assert [backoff(n) for n in (1, 2, 3)] == [3.0, 6.0, 9.0]

    def test_custom_base(self) -> None:
        assert linear_backoff(0.5)(4) == 2.0


# ---------------------------------------------------------------------------
# Fetcher.fetch
# ---------------------------------------------------------------------------

class TestFetch:
    def test_first_attempt_success_does_not_sleep(self, capsys) -> None:
        fetcher, sleep = _fetcher()
        with respx.mock:
            respx.get(url__startswith=_URL).mock(return_value=_response("payload"))
            result = asyncio.run(fetcher.fetch(_URL))

        assert result.payload == "payload"
        assert sleep.waits == []
        assert [a.outcome for a in result.attempts] == [Outcome.SUCCESS]
        assert len(_attempt_lines(capsys.readouterr().err)) == 1

    def test_fail_then_succeed_within_budget(self, capsys) -> None:
        fetcher, sleep = _fetcher()
        with respx.mock:
            route = respx.get(url__startswith=_URL).mock(
                side_effect=[
                    httpx.ConnectError("connection refused"),
                    _response("busy", status_code=503),
                    _response("payload"),
                ]
            )
            result = asyncio.run(fetcher.fetch(_URL))

        assert result.payload == "payload"
        assert route.call_count == 3
        assert len(_attempt_lines(capsys.readouterr().err)) == 3
        assert [a.index for a in result.attempts] == [1, 2, 3]
        assert [a.outcome for a in result.attempts] == [
            Outcome.RETRYABLE,
            Outcome.RETRYABLE,
            Outcome.SUCCESS,
        ]

    def test_backoff_before_attempts_two_and_three(self) -> None:
        fetcher, sleep = _fetcher()
        with respx.mock:
            respx.get(url__startswith=_URL).mock(
                side_effect=[_response("", 500), _response("", 500), _response("ok")]
            )
            result = asyncio.run(fetcher.fetch(_URL))

        assert sleep.waits == [3.0, 6.0]
        assert [a.wait for a in result.attempts] == [0.0, 3.0, 6.0]

    def test_exhausted_budget_raises_after_exactly_max_attempts(self, capsys) -> None:
        fetcher, sleep = _fetcher()
        with respx.mock:
            route = respx.get(url__startswith=_URL).mock(
                return_value=_response("down", status_code=502)
            )
            with pytest.raises(UpstreamExhaustedError) as info:
                asyncio.run(fetcher.fetch(_URL, label="Test upstream"))

        assert route.call_count == 3
        assert len(_attempt_lines(capsys.readouterr().err)) == 3
        assert info.value.details == "Request failed with status code 502"
        assert info.value.target == "Test upstream"
        assert [a.outcome for a in info.value.attempts] == [
            Outcome.RETRYABLE,
            Outcome.RETRYABLE,
            Outcome.TERMINAL,
        ]

    def test_terminal_error_carries_last_cause(self) -> None:
        fetcher, _ = _fetcher()
        with respx.mock:
            respx.get(url__startswith=_URL).mock(
                side_effect=[
                    _response("", 500),
                    _response("", 503),
                    httpx.ConnectError("name resolution failed"),
                ]
            )
            with pytest.raises(UpstreamExhaustedError) as info:
                asyncio.run(fetcher.fetch(_URL))

        assert info.value.details == "name resolution failed"

    def test_custom_budget_is_honoured(self) -> None:
        fetcher, sleep = _fetcher(max_attempts=5)
        with respx.mock:
            route = respx.get(url__startswith=_URL).mock(return_value=_response("", 500))
            with pytest.raises(UpstreamExhaustedError):
                asyncio.run(fetcher.fetch(_URL))

        assert route.call_count == 5
        assert sleep.waits == [3.0, 6.0, 9.0, 12.0]

    def test_per_call_budget_overrides_default(self) -> None:
        fetcher, _ = _fetcher()
        with respx.mock:
            route = respx.get(url__startswith=_URL).mock(return_value=_response("", 500))
            with pytest.raises(UpstreamExhaustedError):
                asyncio.run(fetcher.fetch(_URL, max_attempts=1))

        assert route.call_count == 1

    def test_transport_timeout_is_retryable(self) -> None:
        fetcher, _ = _fetcher()
        with respx.mock:
            route = respx.get(url__startswith=_URL).mock(
                side_effect=[httpx.ReadTimeout("read timed out"), _response("ok")]
            )
            result = asyncio.run(fetcher.fetch(_URL))

        assert result.payload == "ok"
        assert route.call_count == 2

    def test_per_attempt_timeout_does_not_extend_budget(self) -> None:
        fetcher, _ = _fetcher(timeout=0.01)
        calls = []

        async def _slow_get(*args, **kwargs):
            calls.append(args)
            await asyncio.sleep(1)

        with patch.object(fetcher, "_get", _slow_get):
            with pytest.raises(UpstreamExhaustedError) as info:
                asyncio.run(fetcher.fetch(_URL))

        assert len(calls) == 3
        assert info.value.details == "timeout of 10ms exceeded"

    def test_predicate_rejection_triggers_retry(self) -> None:
        fetcher, _ = _fetcher()
        seen = []

        def _accept(response: httpx.Response) -> str:
            seen.append(response.text)
            if response.text != "good":
                raise RetryableUpstreamError("not good yet")
            return response.text

        with respx.mock:
            respx.get(url__startswith=_URL).mock(
                side_effect=[_response("bad"), _response("good")]
            )
            result = asyncio.run(fetcher.fetch(_URL, accept=_accept))

        assert seen == ["bad", "good"]
        assert result.payload == "good"
        assert result.attempts[0].reason == "not good yet"

    def test_query_params_and_headers_are_sent(self) -> None:
        fetcher, _ = _fetcher()
        with respx.mock:
            route = respx.get(url__startswith=_URL).mock(return_value=_response("ok"))
            asyncio.run(
                fetcher.fetch(
                    _URL,
                    params={"systemName": "Sol"},
                    headers={"Accept": "application/json"},
                )
            )

        request = route.calls.last.request
        assert request.url.params["systemName"] == "Sol"
        assert request.headers["Accept"] == "application/json"

    def test_rejects_empty_budget(self) -> None:
        with pytest.raises(ValueError):
            Fetcher(max_attempts=0)

    @pytest.mark.parametrize("budget", [0, -1])
    def test_rejects_empty_per_call_budget(self, budget) -> None:
        fetcher, _ = _fetcher()
        with respx.mock(assert_all_called=False) as respx_mock:
            route = respx_mock.get(url__startswith=_URL).mock(return_value=_response("ok"))
            with pytest.raises(ValueError):
                asyncio.run(fetcher.fetch(_URL, max_attempts=budget))

        assert route.call_count == 0

    def test_from_settings(self) -> None:
        settings = Settings(max_attempts=4, request_timeout=2.0, backoff_base=1.5)
        fetcher = Fetcher.from_settings(settings)
        assert fetcher.max_attempts == 4
        assert fetcher.timeout == 2.0
        assert fetcher._backoff(2) == 3.0


# ---------------------------------------------------------------------------
# Success predicates
# ---------------------------------------------------------------------------

class TestAcceptPredicates:
    def test_accept_ok_returns_text(self) -> None:
        assert accept_ok(_response("<html></html>")) == "<html></html>"

    def test_sphere_empty_array_is_success(self) -> None:
        assert accept_sphere(_response([])) == []

    def test_sphere_empty_object_is_success(self) -> None:
        assert accept_sphere(_response({})) == []

    def test_sphere_empty_body_is_retryable(self) -> None:
        with pytest.raises(RetryableUpstreamError, match="Empty response"):
            accept_sphere(_response(""))

    def test_sphere_error_object_is_retryable(self) -> None:
        with pytest.raises(RetryableUpstreamError, match="Unknown system"):
            accept_sphere(_response({"error": "Unknown system"}))

    def test_sphere_error_code_without_message(self) -> None:
        with pytest.raises(RetryableUpstreamError, match="EDSM API returned an error"):
            accept_sphere(_response({"errorCode": 5}))

    def test_sphere_returns_list(self) -> None:
        assert accept_sphere(_response([{"name": "Sol"}])) == [{"name": "Sol"}]

    def test_bodies_empty_array_is_retryable(self) -> None:
        with pytest.raises(RetryableUpstreamError, match="Empty response received from EDSM"):
            accept_non_empty(_response([]))

    def test_bodies_object_passes_through(self) -> None:
        data = {"name": "Sol", "bodies": [{"name": "Earth"}]}
        assert accept_non_empty(_response(data)) == data

    def test_invalid_json_is_retryable(self) -> None:
        with pytest.raises(RetryableUpstreamError, match="Invalid JSON"):
            accept_json(_response("<html>maintenance</html>"))

    def test_system_accepts_any_json(self) -> None:
        assert accept_json(_response([])) == []


# ---------------------------------------------------------------------------
# Request builders
# ---------------------------------------------------------------------------

class TestUpstreamRequests:
    def test_inara_population_filter(self) -> None:
        settings = Settings()
        assert inara_nearest_request(settings, "Sol").params["pi23"] == "-1"
        assert inara_nearest_request(settings, "Sol", any_population=True).params["pi23"] == "0"

    def test_inara_url(self) -> None:
        request = inara_nearest_request(Settings(inara_base_url="https://inara.test/"), "Sol")
        assert request.url == "https://inara.test/elite/nearest-starsystems/"
        assert request.params["ps1"] == "Sol"

    def test_sphere_params(self) -> None:
        request = edsm_sphere_request(Settings(), "Sol", radius=50, min_radius=12.5)
        assert request.params == {
            "systemName": "Sol",
            "radius": "50",
            "minRadius": "12.5",
            "showInformation": "1",
        }

    def test_sphere_radius_keeps_full_precision(self) -> None:
        params = edsm_sphere_request(
            Settings(), "Sol", radius=12.3456789, min_radius=1234567
        ).params
        assert params["radius"] == "12.3456789"
        assert params["minRadius"] == "1234567"

    def test_missing_reports_blank_required_params(self) -> None:
        request = UpstreamRequest(url=_URL, params={"a": " ", "b": "x"}, required=frozenset({"a", "b", "c"}))
        assert request.missing() == ["a", "c"]
