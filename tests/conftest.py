"""
Pytest fixtures for Token Safety tests. A fake Rugcheck API served through
httpx.MockTransport stands in for the remote authority; no network access.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from tokensafety.gateway.client import RugcheckGateway

BASE_URL = "https://rugcheck.test/v1"
TOKEN = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class FakeRugcheck:
    """
    Records every request and answers by API path (without the /v1 prefix).

    responses[path] may be a JSON-able payload, an httpx.Response, an exception
    instance (raised), or a callable taking the request. Unlisted paths return default.
    """

    def __init__(self, default: Any = None) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, Any] = {}
        self.default = {"score": 90} if default is None else default

    @staticmethod
    def relative_path(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/v1"):] if path.startswith("/v1") else path

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        value = self.responses.get(self.relative_path(request), self.default)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, httpx.Response):
            return value
        if callable(value):
            return value(request)
        return httpx.Response(200, json=value)

    def paths(self) -> list[str]:
        return [self.relative_path(r) for r in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def token_path(action: str, address: str = TOKEN) -> str:
    return f"/tokens/{action}/solana/{address}"


@pytest.fixture
def fake_api() -> FakeRugcheck:
    return FakeRugcheck()


@pytest.fixture
def gateway(fake_api: FakeRugcheck) -> RugcheckGateway:
    return RugcheckGateway(BASE_URL, transport=fake_api.transport())


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every env var the config layer reads."""
    for name in (
        "RUGCHECK_API_BASE",
        "RUGCHECK_API_KEY",
        "RUGCHECK_TIMEOUT_SEC",
        "TOKENSAFETY_FAIL_FAST",
        "API_HOST",
        "API_PORT",
        "RUGCHECK_KEYPAIR_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
