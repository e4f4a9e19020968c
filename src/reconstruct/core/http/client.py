from __future__ import annotations

import os
import threading

import httpx

from reconstruct.core.settings import get_float_env

from .errors import ReconstructHTTPNetworkError, ReconstructHTTPStatusError

_DEFAULT_TIMEOUT_S = 15.0
_DEFAULT_CONNECT_TIMEOUT_S = 5.0
_DEFAULT_USER_AGENT = "industrial-reconstruct/1.0"
_ERROR_BODY_LIMIT = 500

_client: httpx.Client | None = None
_client_lock = threading.Lock()


def _build_timeout(total_s: float | None = None) -> httpx.Timeout:
    connect_s = max(0.1, get_float_env("RECONSTRUCT_HTTP_CONNECT_TIMEOUT_S", _DEFAULT_CONNECT_TIMEOUT_S))
    read_total = max(0.1, total_s if total_s is not None else get_float_env("RECONSTRUCT_HTTP_TIMEOUT_S", _DEFAULT_TIMEOUT_S))
    return httpx.Timeout(read_total, connect=min(connect_s, read_total))


def get_http_client() -> httpx.Client:
    global _client
    if _client is not None:
        return _client

    with _client_lock:
        if _client is None:
            user_agent = os.getenv("RECONSTRUCT_HTTP_USER_AGENT", _DEFAULT_USER_AGENT)
            _client = httpx.Client(timeout=_build_timeout(), headers={"User-Agent": user_agent})
    return _client


def request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    json: object | None = None,
    timeout_override: float | None = None,
    redact_url: bool = False,
) -> httpx.Response:
    """Issue exactly one request on the shared client; non-2xx and transport failures raise typed errors."""
    safe_url = "[redacted-url]" if redact_url else url
    try:
        response = get_http_client().request(
            method,
            url,
            headers=headers,
            json=json,
            timeout=_build_timeout(timeout_override) if timeout_override is not None else None,
        )
    except httpx.HTTPError as exc:
        raise ReconstructHTTPNetworkError(f"HTTP request error for {safe_url}: {exc.__class__.__name__}") from exc

    status = response.status_code
    if 200 <= status < 300:
        return response
    raise ReconstructHTTPStatusError(
        f"HTTP status {status} for {safe_url}",
        status_code=status,
        body=response.text[:_ERROR_BODY_LIMIT],
    )
