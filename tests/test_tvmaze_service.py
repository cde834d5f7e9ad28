from __future__ import annotations

import httpx
import pytest

from conftest import network_item, run, web_item
from whatsontv.services import tvmaze_service
from whatsontv.services.tvmaze_service import TvMazeClient, UpstreamFetchError


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    async def _sleep(_seconds):
        return None

    monkeypatch.setattr(tvmaze_service.asyncio, "sleep", _sleep)


def _client(handler, **kwargs) -> TvMazeClient:
    return TvMazeClient("https://tvmaze.test/", transport=httpx.MockTransport(handler), **kwargs)


def test_network_schedule_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[network_item()])

    items = run(_client(handler).get_network_schedule("2026-10-18", "US"))

    assert len(items) == 1
    assert seen[0].url.path == "/schedule"
    assert seen[0].url.params["date"] == "2026-10-18"
    assert seen[0].url.params["country"] == "US"


def test_web_schedule_request_has_no_country() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[web_item(), web_item(show_id=3)])

    items = run(_client(handler).get_web_schedule("2026-10-18"))

    assert len(items) == 2
    assert seen[0].url.path == "/schedule/web"
    assert "country" not in seen[0].url.params


def test_non_list_body_is_treated_as_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"message": "unexpected"})

    assert run(_client(handler).get_network_schedule("2026-10-18")) == []


def test_server_errors_are_retried() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(503)
        return httpx.Response(200, json=[network_item()])

    items = run(_client(handler, max_retries=3).get_network_schedule("2026-10-18", "US"))

    assert calls["count"] == 3
    assert len(items) == 1


def test_transport_errors_exhaust_retries() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamFetchError):
        run(_client(handler, max_retries=2).get_web_schedule("2026-10-18"))

    assert calls["count"] == 2


def test_client_errors_are_not_retried() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(404, json={"name": "Not Found"})

    with pytest.raises(UpstreamFetchError, match="HTTP 404"):
        run(_client(handler, max_retries=3).get_network_schedule("2026-10-18", "US"))

    assert calls["count"] == 1


def test_invalid_json_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(UpstreamFetchError, match="invalid JSON"):
        run(_client(handler).get_network_schedule("2026-10-18", "US"))


def test_redirect_loop_raises_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.TooManyRedirects("loop", request=request)

    with pytest.raises(UpstreamFetchError, match="loop"):
        run(_client(handler).get_network_schedule("2026-10-18", "US"))
