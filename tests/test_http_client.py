from __future__ import annotations

import httpx
import pytest

from reconstruct.core.http.client import request
from reconstruct.core.http.errors import ReconstructHTTPNetworkError, ReconstructHTTPStatusError


def test_request_returns_success_response(monkeypatch) -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda req: httpx.Response(200, json={"ok": True})))
    monkeypatch.setattr("reconstruct.core.http.client.get_http_client", lambda: client)

    response = request("GET", "http://service.local/test")

    assert response.json() == {"ok": True}


def test_error_status_makes_single_attempt(monkeypatch) -> None:
    calls = {"count": 0}

    def handler(req: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(503, request=req, text="backend overloaded")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    monkeypatch.setattr("reconstruct.core.http.client.get_http_client", lambda: client)

    with pytest.raises(ReconstructHTTPStatusError) as excinfo:
        request("POST", "http://service.local/generate")

    assert calls["count"] == 1
    assert excinfo.value.status_code == 503
    assert excinfo.value.body == "backend overloaded"


def test_transport_timeout_surfaces_as_network_error(monkeypatch) -> None:
    def handler(req: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=req)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    monkeypatch.setattr("reconstruct.core.http.client.get_http_client", lambda: client)

    with pytest.raises(ReconstructHTTPNetworkError) as excinfo:
        request("GET", "http://service.local/slow", redact_url=True)

    assert "service.local" not in str(excinfo.value)


def test_timeout_override_comes_from_environment_defaults(monkeypatch) -> None:
    monkeypatch.setenv("RECONSTRUCT_HTTP_CONNECT_TIMEOUT_S", "2")
    seen: list[dict] = []

    def handler(req: httpx.Request) -> httpx.Response:
        seen.append(req.extensions["timeout"])
        return httpx.Response(200, json={})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    monkeypatch.setattr("reconstruct.core.http.client.get_http_client", lambda: client)

    request("GET", "http://service.local/test", timeout_override=30)

    assert seen[0]["read"] == 30
    assert seen[0]["connect"] == 2
