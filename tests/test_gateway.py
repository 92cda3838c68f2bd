"""
Tests for the Rugcheck gateway: request paths/params, credential handling,
failure mapping to RemoteFetchError, input validation, wallet login.

The remote API is an httpx.MockTransport (see conftest.FakeRugcheck).
"""

from __future__ import annotations

import asyncio
import dataclasses
import json

import httpx
import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from conftest import BASE_URL, TOKEN, FakeRugcheck, token_path
from tokensafety.config.settings import Settings
from tokensafety.core.exceptions import InvalidInputError, RemoteFetchError
from tokensafety.gateway.auth import DEFAULT_SIGN_IN_MESSAGE, KeypairWallet, build_sign_message
from tokensafety.gateway.client import RugcheckGateway
from tokensafety.gateway.context import RequestContext


def _call(gateway: RugcheckGateway, method: str, *args):
    async def go():
        async with gateway:
            return await getattr(gateway, method)(*args)

    return asyncio.run(go())


# --- Paths ---


@pytest.mark.parametrize(
    "method,action",
    [
        ("get_token_safety", "scan"),
        ("get_liquidity_analysis", "liquidity"),
        ("get_contract_verification", "source-code"),
        ("get_risk_assessment", "risk"),
        ("get_honeypot_check", "honeypot"),
        ("get_token_metadata", "metadata"),
        ("get_social_media_presence", "social"),
        ("get_developer_activity", "developer-activity"),
        ("get_trading_volume_analysis", "volume"),
        ("get_price_manipulation_detection", "price-manipulation"),
        ("get_rug_score", "rug-score"),
        ("get_safety_score", "safety-score"),
        ("get_comprehensive_report", "report"),
        ("get_market_sentiment", "sentiment"),
        ("get_community_trust_score", "community-trust"),
        ("get_audit_status", "audit"),
        ("get_team_information", "team"),
        ("get_funding_analysis", "funding"),
        ("get_regulatory_compliance", "compliance"),
        ("get_realtime_alerts", "alerts"),
    ],
)
def test_token_dimension_requests_one_get(gateway, fake_api, method, action):
    fake_api.responses[token_path(action)] = {"score": 55, "dimension": action}
    out = _call(gateway, method, TOKEN)
    assert out == {"score": 55, "dimension": action}
    assert len(fake_api.requests) == 1
    req = fake_api.requests[0]
    assert req.method == "GET"
    assert req.url.path == "/v1" + token_path(action)
    assert req.url.host == "rugcheck.test"


@pytest.mark.parametrize(
    "method,path",
    [
        ("get_pool_safety", f"/pools/scan/solana/{TOKEN}"),
        ("get_wallet_analysis", f"/wallets/risk-rating/solana/{TOKEN}"),
    ],
)
def test_pool_and_wallet_paths(gateway, fake_api, method, path):
    _call(gateway, method, TOKEN)
    assert fake_api.paths() == [path]


def test_service_endpoints(gateway, fake_api):
    async def go():
        async with gateway:
            await gateway.get_api_usage_stats()
            await gateway.get_supported_networks()
            await gateway.health_check()

    asyncio.run(go())
    assert fake_api.paths() == ["/stats/usage", "/networks", "/health"]


def test_comprehensive_analysis_forces_rescan(gateway, fake_api):
    _call(gateway, "get_comprehensive_analysis", TOKEN)
    req = fake_api.requests[0]
    assert fake_api.paths() == [token_path("scan")]
    assert req.url.params["forceRescan"] == "true"


def test_historical_safety_timeframe(gateway, fake_api):
    async def go():
        async with gateway:
            await gateway.get_historical_safety_data(TOKEN)
            await gateway.get_historical_safety_data(TOKEN, "7d")
            await gateway.get_historical_safety_data(TOKEN, "   ")

    asyncio.run(go())
    assert [r.url.params["timeframe"] for r in fake_api.requests] == ["30d", "7d", "30d"]
    assert fake_api.paths() == [token_path("historical-safety")] * 3


def test_search_tokens_params(gateway, fake_api):
    _call(gateway, "search_tokens", "bonk")
    req = fake_api.requests[0]
    assert fake_api.paths() == ["/tokens/search"]
    assert req.url.params["query"] == "bonk"
    assert req.url.params["limit"] == "10"


def test_website_analysis_passes_url(gateway, fake_api):
    _call(gateway, "get_website_analysis", "https://example.com/token")
    req = fake_api.requests[0]
    assert fake_api.paths() == ["/website/analysis"]
    assert req.url.params["url"] == "https://example.com/token"


def test_subscribe_posts_email(gateway, fake_api):
    fake_api.responses[token_path("subscribe")] = {"subscribed": True}
    out = _call(gateway, "subscribe_to_alerts", TOKEN, "ops@example.com")
    req = fake_api.requests[0]
    assert out == {"subscribed": True}
    assert req.method == "POST"
    assert json.loads(req.content) == {"email": "ops@example.com"}


# --- Input validation ---


@pytest.mark.parametrize(
    "method,args",
    [
        ("get_honeypot_check", ("",)),
        ("get_token_safety", ("   ",)),
        ("get_pool_safety", ("",)),
        ("get_wallet_analysis", (None,)),
        ("get_website_analysis", ("",)),
        ("search_tokens", ("  ",)),
        ("subscribe_to_alerts", (TOKEN, "")),
        ("subscribe_to_alerts", ("", "ops@example.com")),
    ],
)
def test_empty_identifier_raises_without_io(gateway, fake_api, method, args):
    with pytest.raises(InvalidInputError):
        _call(gateway, method, *args)
    assert fake_api.requests == []


# --- Failures ---


def test_non_2xx_raises_remote_fetch_error(gateway, fake_api):
    fake_api.responses[token_path("liquidity")] = httpx.Response(503, json={"error": "down"})
    with pytest.raises(RemoteFetchError) as exc_info:
        _call(gateway, "get_liquidity_analysis", TOKEN)
    err = exc_info.value
    assert err.dimension == "liquidity"
    assert err.status_code == 503
    assert isinstance(err.cause, httpx.HTTPStatusError)


def test_timeout_raises_remote_fetch_error(gateway, fake_api):
    fake_api.responses[token_path("honeypot")] = httpx.ReadTimeout("read timed out")
    with pytest.raises(RemoteFetchError) as exc_info:
        _call(gateway, "get_honeypot_check", TOKEN)
    assert exc_info.value.dimension == "honeypot"
    assert isinstance(exc_info.value.cause, httpx.TimeoutException)
    assert exc_info.value.status_code is None


def test_connect_error_raises_remote_fetch_error(gateway, fake_api):
    fake_api.responses["/health"] = httpx.ConnectError("connection refused")
    with pytest.raises(RemoteFetchError) as exc_info:
        _call(gateway, "health_check")
    assert exc_info.value.dimension == "health"


def test_undecodable_body_raises_remote_fetch_error(gateway, fake_api):
    fake_api.responses[token_path("audit")] = httpx.Response(200, content=b"<html>oops</html>")
    with pytest.raises(RemoteFetchError) as exc_info:
        _call(gateway, "get_audit_status", TOKEN)
    assert exc_info.value.dimension == "audit"
    assert isinstance(exc_info.value.cause, ValueError)


def test_error_message_hides_transport_details(gateway, fake_api):
    fake_api.responses[token_path("team")] = httpx.ConnectError("secret-host:443 refused")
    with pytest.raises(RemoteFetchError) as exc_info:
        _call(gateway, "get_team_information", TOKEN)
    assert "secret-host" not in str(exc_info.value)
    assert "team" in str(exc_info.value)


def test_default_timeout_is_fifteen_seconds():
    async def go():
        gw = RugcheckGateway(BASE_URL, transport=FakeRugcheck().transport())
        async with gw:
            return gw._get_client().timeout

    timeout = asyncio.run(go())
    assert timeout.read == 15.0
    assert timeout.connect == 15.0


# --- Credential ---


def test_no_authorization_header_by_default(gateway, fake_api):
    _call(gateway, "health_check")
    assert "authorization" not in fake_api.requests[0].headers


def test_set_api_key_applies_to_later_requests(gateway, fake_api):
    async def go():
        async with gateway:
            await gateway.health_check()
            gateway.set_api_key("abc123")
            await gateway.health_check()
            gateway.clear_api_key()
            await gateway.health_check()

    asyncio.run(go())
    auth = [r.headers.get("authorization") for r in fake_api.requests]
    assert auth == [None, "Bearer abc123", None]


def test_placeholder_or_empty_key_ignored(gateway, fake_api):
    gateway.set_api_key("real")
    gateway.set_api_key("free_no_key_required")
    gateway.set_api_key("")
    _call(gateway, "health_check")
    assert fake_api.requests[0].headers["authorization"] == "Bearer real"


def test_request_context_is_immutable():
    ctx = RequestContext().with_bearer("t1")
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.bearer_token = "t2"  # type: ignore[misc]
    assert ctx.headers() == {"Authorization": "Bearer t1"}
    assert ctx.without_bearer().headers() == {}


def test_in_flight_request_keeps_its_credential_snapshot():
    """A credential swap while a request is in flight only affects requests issued afterwards."""
    seen: list[str | None] = []
    started = asyncio.Event()
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("authorization"))
        if len(seen) == 1:
            started.set()
            await release.wait()
        return httpx.Response(200, json={})

    async def go():
        gw = RugcheckGateway(BASE_URL, transport=httpx.MockTransport(handler))
        gw.set_api_key("first")
        async with gw:
            slow = asyncio.create_task(gw.health_check())
            await started.wait()
            gw.set_api_key("second")
            await gw.get_supported_networks()
            release.set()
            await slow

    asyncio.run(go())
    assert seen == ["Bearer first", "Bearer second"]


def test_from_settings_applies_base_timeout_and_key():
    fake = FakeRugcheck()
    settings = Settings(
        rugcheck_api_base="https://other.test/v1",
        rugcheck_api_key="k-1",
        request_timeout_sec=5.0,
        fail_fast=True,
        api_host="127.0.0.1",
        api_port=8000,
    )
    gw = RugcheckGateway.from_settings(settings, transport=fake.transport())
    _call(gw, "health_check")
    req = fake.requests[0]
    assert req.url.host == "other.test"
    assert req.headers["authorization"] == "Bearer k-1"


# --- Wallet login ---


def test_build_sign_message_is_compact_json():
    msg = build_sign_message("PubKey111", "hello", timestamp_ms=1700000000000)
    assert msg == '{"message":"hello","timestamp":1700000000000,"publicKey":"PubKey111"}'


def test_build_sign_message_requires_public_key():
    with pytest.raises(InvalidInputError):
        build_sign_message("", "hello")


def test_authenticate_with_wallet_signs_and_adopts_token(gateway, fake_api):
    keypair = Keypair()
    wallet = KeypairWallet(keypair)
    fake_api.responses["/auth/login/solana"] = {"token": "jwt-xyz"}

    async def go():
        async with gateway:
            out = await gateway.authenticate_with_wallet(wallet)
            await gateway.health_check()
            return out

    out = asyncio.run(go())
    assert out == {"token": "jwt-xyz"}

    login, after = fake_api.requests
    assert login.method == "POST"
    body = json.loads(login.content)
    assert body["wallet"] == str(keypair.pubkey())
    signed = json.loads(body["message"])
    assert signed["message"] == DEFAULT_SIGN_IN_MESSAGE
    assert signed["publicKey"] == str(keypair.pubkey())
    assert isinstance(signed["timestamp"], int)
    assert body["signature"]["type"] == "ed25519"
    sig = Signature.from_bytes(bytes(body["signature"]["data"]))
    assert sig.verify(Pubkey.from_string(body["wallet"]), body["message"].encode("utf-8"))

    assert after.headers["authorization"] == "Bearer jwt-xyz"


def test_authenticate_without_token_keeps_context(gateway, fake_api):
    fake_api.responses["/auth/login/solana"] = {"error": "rate limited"}
    _call(gateway, "authenticate_with_wallet", KeypairWallet(Keypair()))
    assert gateway.context.bearer_token is None


def test_authenticate_failure_raises_auth_dimension(gateway, fake_api):
    fake_api.responses["/auth/login/solana"] = httpx.Response(401, json={"error": "bad signature"})
    with pytest.raises(RemoteFetchError) as exc_info:
        _call(gateway, "authenticate_with_wallet", KeypairWallet(Keypair()))
    assert exc_info.value.dimension == "auth"
    assert exc_info.value.status_code == 401
