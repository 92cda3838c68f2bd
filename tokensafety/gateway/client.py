"""
Rugcheck gateway: one coroutine per safety dimension against the Rugcheck API.

Every method issues exactly one request and returns the decoded JSON body,
opaque to this layer. Failures (transport, timeout, non-2xx, bad JSON) surface as
RemoteFetchError carrying the dimension name and the underlying cause; nothing is
retried and no default payload is synthesized. Empty identifiers raise
InvalidInputError before any I/O.

Credential: an immutable RequestContext. set_api_key() swaps it; each request
reads it once when issued, so a concurrent swap only affects later requests.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from tokensafety.config.env import DEFAULT_RUGCHECK_API_BASE, DEFAULT_TIMEOUT_SEC
from tokensafety.config.settings import Settings
from tokensafety.core.exceptions import InvalidInputError, RemoteFetchError
from tokensafety.gateway.auth import (
    DEFAULT_SIGN_IN_MESSAGE,
    LOGIN_PATH,
    SigningWallet,
    build_login_body,
)
from tokensafety.gateway.context import RequestContext
from tokensafety.tokensafety_logging import get_logger

logger = get_logger(__name__)

NETWORK = "solana"
DEFAULT_SEARCH_LIMIT = 10
DEFAULT_TIMEFRAME = "30d"


def require_identifier(field: str, value: str | None) -> str:
    """Return value stripped; raise InvalidInputError if it is empty."""
    if value is None or not str(value).strip():
        raise InvalidInputError(field)
    return str(value).strip()


def _short(value: str) -> str:
    return value[:16] + "..." if len(value) > 16 else value


class RugcheckGateway:
    """Async client for the Rugcheck API. Use as `async with` or call aclose()."""

    def __init__(
        self,
        base_url: str = DEFAULT_RUGCHECK_API_BASE,
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        context: RequestContext | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._context = context or RequestContext()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "RugcheckGateway":
        context = RequestContext().with_bearer(settings.rugcheck_api_key)
        return cls(
            settings.rugcheck_api_base,
            timeout=settings.request_timeout_sec,
            context=context,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def context(self) -> RequestContext:
        return self._context

    def set_api_key(self, api_key: str | None) -> None:
        """Attach a bearer credential to all subsequently issued requests."""
        self._context = self._context.with_bearer(api_key)

    def clear_api_key(self) -> None:
        self._context = self._context.without_bearer()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RugcheckGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        dimension: str,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Issue one request and decode its JSON body; raise RemoteFetchError on any failure."""
        headers = self._context.headers()
        client = self._get_client()
        try:
            resp = await client.request(method, path, params=params, json=json, headers=headers)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(
                "rugcheck_request_failed",
                dimension=dimension,
                path=path,
                status=status,
                error=str(e),
            )
            raise RemoteFetchError(dimension, e, status_code=status) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "rugcheck_request_failed",
                dimension=dimension,
                path=path,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise RemoteFetchError(dimension, e) from e

    async def _get_token(self, dimension: str, action: str, token_address: str, **params: Any) -> Any:
        address = require_identifier("token_address", token_address)
        path = f"/tokens/{action}/{NETWORK}/{quote(address, safe='')}"
        logger.debug("rugcheck_fetch", dimension=dimension, token_address=_short(address))
        return await self._request(dimension, "GET", path, params=params or None)

    # ------------------------------------------------------------------
    # Token dimensions
    # ------------------------------------------------------------------

    async def get_token_safety(self, token_address: str) -> Any:
        return await self._get_token("safety", "scan", token_address)

    async def get_comprehensive_analysis(self, token_address: str) -> Any:
        """Token scan with forceRescan=true (bypasses the API's cached report)."""
        return await self._get_token("comprehensive_analysis", "scan", token_address, forceRescan=True)

    async def get_liquidity_analysis(self, token_address: str) -> Any:
        return await self._get_token("liquidity", "liquidity", token_address)

    async def get_contract_verification(self, token_address: str) -> Any:
        return await self._get_token("contract", "source-code", token_address)

    async def get_risk_assessment(self, token_address: str) -> Any:
        return await self._get_token("risk", "risk", token_address)

    async def get_honeypot_check(self, token_address: str) -> Any:
        return await self._get_token("honeypot", "honeypot", token_address)

    async def get_token_metadata(self, token_address: str) -> Any:
        return await self._get_token("metadata", "metadata", token_address)

    async def get_social_media_presence(self, token_address: str) -> Any:
        return await self._get_token("social", "social", token_address)

    async def get_developer_activity(self, token_address: str) -> Any:
        return await self._get_token("developer", "developer-activity", token_address)

    async def get_trading_volume_analysis(self, token_address: str) -> Any:
        return await self._get_token("volume", "volume", token_address)

    async def get_price_manipulation_detection(self, token_address: str) -> Any:
        return await self._get_token("price_manipulation", "price-manipulation", token_address)

    async def get_rug_score(self, token_address: str) -> Any:
        return await self._get_token("rug_score", "rug-score", token_address)

    async def get_safety_score(self, token_address: str) -> Any:
        return await self._get_token("safety_score", "safety-score", token_address)

    async def get_comprehensive_report(self, token_address: str) -> Any:
        return await self._get_token("report", "report", token_address)

    async def get_market_sentiment(self, token_address: str) -> Any:
        return await self._get_token("sentiment", "sentiment", token_address)

    async def get_historical_safety_data(
        self, token_address: str, timeframe: str = DEFAULT_TIMEFRAME
    ) -> Any:
        return await self._get_token(
            "historical",
            "historical-safety",
            token_address,
            timeframe=(timeframe or "").strip() or DEFAULT_TIMEFRAME,
        )

    async def get_community_trust_score(self, token_address: str) -> Any:
        return await self._get_token("community", "community-trust", token_address)

    async def get_audit_status(self, token_address: str) -> Any:
        return await self._get_token("audit", "audit", token_address)

    async def get_team_information(self, token_address: str) -> Any:
        return await self._get_token("team", "team", token_address)

    async def get_funding_analysis(self, token_address: str) -> Any:
        return await self._get_token("funding", "funding", token_address)

    async def get_regulatory_compliance(self, token_address: str) -> Any:
        return await self._get_token("compliance", "compliance", token_address)

    async def get_realtime_alerts(self, token_address: str) -> Any:
        return await self._get_token("alerts", "alerts", token_address)

    async def subscribe_to_alerts(self, token_address: str, email: str) -> Any:
        address = require_identifier("token_address", token_address)
        email = require_identifier("email", email)
        path = f"/tokens/subscribe/{NETWORK}/{quote(address, safe='')}"
        return await self._request("subscribe", "POST", path, json={"email": email})

    async def search_tokens(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> Any:
        query = require_identifier("query", query)
        return await self._request(
            "search", "GET", "/tokens/search", params={"query": query, "limit": limit}
        )

    # ------------------------------------------------------------------
    # Pools, wallets, websites
    # ------------------------------------------------------------------

    async def get_pool_safety(self, pool_address: str) -> Any:
        address = require_identifier("pool_address", pool_address)
        return await self._request("pool", "GET", f"/pools/scan/{NETWORK}/{quote(address, safe='')}")

    async def get_wallet_analysis(self, wallet_address: str) -> Any:
        address = require_identifier("wallet_address", wallet_address)
        return await self._request(
            "wallet", "GET", f"/wallets/risk-rating/{NETWORK}/{quote(address, safe='')}"
        )

    async def get_website_analysis(self, website_url: str) -> Any:
        url = require_identifier("website_url", website_url)
        return await self._request("website", "GET", "/website/analysis", params={"url": url})

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------

    async def get_api_usage_stats(self) -> Any:
        return await self._request("usage_stats", "GET", "/stats/usage")

    async def get_supported_networks(self) -> Any:
        return await self._request("networks", "GET", "/networks")

    async def health_check(self) -> Any:
        return await self._request("health", "GET", "/health")

    async def authenticate_with_wallet(
        self,
        wallet: SigningWallet,
        message: str = DEFAULT_SIGN_IN_MESSAGE,
    ) -> Any:
        """
        Sign in with a Solana wallet for higher rate limits.

        On success the returned token (if any) becomes this gateway's bearer
        credential for all subsequent requests.
        """
        body = build_login_body(wallet, message)
        data = await self._request("auth", "POST", LOGIN_PATH, json=body)
        token = data.get("token") if isinstance(data, dict) else None
        if token:
            self.set_api_key(str(token))
            logger.info("rugcheck_wallet_authenticated", wallet=_short(body["wallet"]))
        else:
            logger.warning("rugcheck_wallet_auth_no_token", wallet=_short(body["wallet"]))
        return data
