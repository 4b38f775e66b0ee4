"""Pytest configuration shared across the suite."""

from __future__ import annotations

from urllib.parse import parse_qsl

import httpx
import pytest

_GATEWAY_ENV_VARS = (
    "TIKTOK_CLIENT_KEY",
    "TIKTOK_CLIENT_SECRET",
    "KV_BACKEND",
    "KV_SQLITE_PATH",
    "KV_DYNAMODB_TABLE",
    "TOKEN_ENCRYPTION_SECRET",
    "OAUTH_STATE_SECRET",
    "OAUTH_VERIFY_STATE",
    "OAUTH_STATE_TTL",
    "API_ACCESS_TOKEN",
    "OAUTH_HTTP_TIMEOUT",
)


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_gateway_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell configuration out of settings objects."""
    for key in _GATEWAY_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


class ProviderStub:
    """Scripted stand-in for the TikTok token endpoint."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response | Exception] = []

    def queue_json(self, body, status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, json=body))

    def queue(self, response: httpx.Response | Exception) -> None:
        self.responses.append(response)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected provider call to {request.url}")
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def form(self, index: int = -1) -> dict[str, str]:
        return dict(parse_qsl(self.requests[index].content.decode("utf-8")))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()
