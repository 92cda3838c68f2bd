"""
Token safety analyzer: fan out per-dimension fetches, fan in, score.

analyze() issues the 18 token dimension requests concurrently, merges the
payloads into a ComprehensiveSafetyRecord and scores it synchronously.

Failure policy:
  fail_fast=True (default): the first failed dimension cancels the in-flight
    siblings and is re-raised unmodified; no partial record is returned.
  fail_fast=False: failed dimensions are left out of the record and listed in
    failed_dimensions; the score is computed from what succeeded.

Single-dimension helpers (pool, website, wallet, history, alerts, ...) return
the raw payload and log failures under their operation name.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Sequence

from tokensafety.analysis.reports import (
    DIM_AUDIT,
    DIM_COMMUNITY,
    DIM_COMPLIANCE,
    DIM_CONTRACT,
    DIM_DEVELOPER,
    DIM_FUNDING,
    DIM_HONEYPOT,
    DIM_LIQUIDITY,
    DIM_METADATA,
    DIM_PRICE_MANIPULATION,
    DIM_RISK,
    DIM_RUG_SCORE,
    DIM_SAFETY,
    DIM_SAFETY_SCORE,
    DIM_SENTIMENT,
    DIM_SOCIAL,
    DIM_TEAM,
    DIM_VOLUME,
    TOKEN_DIMENSIONS,
    ComprehensiveSafetyRecord,
    SafetyLevel,
    SubReport,
)
from tokensafety.analysis.scoring import aggregate, classify, color_for, compute_overall_score
from tokensafety.core.exceptions import InvalidInputError, RemoteFetchError
from tokensafety.gateway.auth import DEFAULT_SIGN_IN_MESSAGE, SigningWallet
from tokensafety.gateway.client import (
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_TIMEFRAME,
    RugcheckGateway,
    require_identifier,
)
from tokensafety.tokensafety_logging import bind_token, get_logger

logger = get_logger(__name__)

Fetcher = Callable[[], Awaitable[Any]]


async def _fan_out(
    fetchers: dict[str, Fetcher],
    *,
    fail_fast: bool,
) -> tuple[dict[str, Any], dict[str, RemoteFetchError]]:
    """
    Run all fetchers concurrently. Returns (payloads, failures) keyed by name.

    fail_fast: re-raise the first failure (in fetcher order among those done)
    after cancelling the rest. Otherwise RemoteFetchErrors are collected; any
    other exception propagates.
    """
    tasks = {
        name: asyncio.create_task(fetch(), name=f"rugcheck:{name}")
        for name, fetch in fetchers.items()
    }
    if not tasks:
        return {}, {}

    if fail_fast:
        pending = set(tasks.values())
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
                failed = [t for t in tasks.values() if t in done and not t.cancelled() and t.exception()]
                if failed:
                    raise failed[0].exception()
        finally:
            # Also reached when the caller cancels us mid-wait.
            for t in pending:
                t.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        return {name: t.result() for name, t in tasks.items()}, {}

    results = await asyncio.gather(*tasks.values(), return_exceptions=True)
    payloads: dict[str, Any] = {}
    failures: dict[str, RemoteFetchError] = {}
    for name, result in zip(tasks, results):
        if isinstance(result, RemoteFetchError):
            failures[name] = result
        elif isinstance(result, BaseException):
            raise result
        else:
            payloads[name] = result
    return payloads, failures


class TokenSafetyAnalyzer:
    """Orchestrates a RugcheckGateway into full and single-dimension analyses."""

    def __init__(self, gateway: RugcheckGateway, *, fail_fast: bool = True) -> None:
        self._gateway = gateway
        self._fail_fast = fail_fast

    @property
    def gateway(self) -> RugcheckGateway:
        return self._gateway

    @property
    def fail_fast(self) -> bool:
        return self._fail_fast

    def set_api_key(self, api_key: str | None) -> None:
        self._gateway.set_api_key(api_key)

    async def aclose(self) -> None:
        await self._gateway.aclose()

    def _token_fetchers(self, address: str) -> dict[str, Fetcher]:
        g = self._gateway
        methods: dict[str, Callable[[str], Awaitable[Any]]] = {
            DIM_SAFETY: g.get_token_safety,
            DIM_RUG_SCORE: g.get_rug_score,
            DIM_SAFETY_SCORE: g.get_safety_score,
            DIM_HONEYPOT: g.get_honeypot_check,
            DIM_LIQUIDITY: g.get_liquidity_analysis,
            DIM_CONTRACT: g.get_contract_verification,
            DIM_RISK: g.get_risk_assessment,
            DIM_METADATA: g.get_token_metadata,
            DIM_SOCIAL: g.get_social_media_presence,
            DIM_DEVELOPER: g.get_developer_activity,
            DIM_VOLUME: g.get_trading_volume_analysis,
            DIM_PRICE_MANIPULATION: g.get_price_manipulation_detection,
            DIM_COMMUNITY: g.get_community_trust_score,
            DIM_AUDIT: g.get_audit_status,
            DIM_TEAM: g.get_team_information,
            DIM_FUNDING: g.get_funding_analysis,
            DIM_COMPLIANCE: g.get_regulatory_compliance,
            DIM_SENTIMENT: g.get_market_sentiment,
        }
        return {dim: (lambda m=methods[dim]: m(address)) for dim in TOKEN_DIMENSIONS}

    async def analyze(self, token_address: str) -> ComprehensiveSafetyRecord:
        """
        Full token analysis: all dimensions concurrently, then aggregate.

        Raises InvalidInputError for an empty address (no I/O), RemoteFetchError
        when a dimension fails and fail_fast is on.
        """
        address = require_identifier("token_address", token_address)
        log = bind_token(address)
        log.info("token_analysis_started", dimensions=len(TOKEN_DIMENSIONS), fail_fast=self._fail_fast)

        try:
            payloads, failures = await _fan_out(self._token_fetchers(address), fail_fast=self._fail_fast)
        except RemoteFetchError as e:
            log.error(
                "token_analysis_failed",
                dimension=e.dimension,
                status=e.status_code,
                error=str(e.cause),
            )
            raise

        if failures:
            log.warning(
                "token_analysis_partial",
                failed_dimensions=sorted(failures),
                errors={d: str(e.cause) for d, e in failures.items()},
            )

        reports = {dim: SubReport(dim, payloads[dim]) for dim in TOKEN_DIMENSIONS if dim in payloads}
        result = aggregate(reports)
        record = ComprehensiveSafetyRecord(
            token_address=address,
            timestamp=datetime.now(timezone.utc).isoformat(),
            reports=reports,
            result=result,
            failed_dimensions=tuple(d for d in TOKEN_DIMENSIONS if d in failures),
        )
        log.info(
            "token_analysis_done",
            overall_score=round(result.overall_score, 2),
            safety_level=result.safety_level.value,
            contributing_dimensions=list(result.contributing_dimensions),
        )
        return record

    async def _run(self, operation: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except RemoteFetchError as e:
            logger.error(
                "rugcheck_operation_failed",
                operation=operation,
                dimension=e.dimension,
                status=e.status_code,
                error=str(e.cause),
            )
            raise

    async def analyze_pool(self, pool_address: str) -> Any:
        return await self._run("analyze_pool", self._gateway.get_pool_safety(pool_address))

    async def analyze_website(self, website_url: str) -> Any:
        return await self._run("analyze_website", self._gateway.get_website_analysis(website_url))

    async def analyze_wallet(self, wallet_address: str) -> Any:
        return await self._run("analyze_wallet", self._gateway.get_wallet_analysis(wallet_address))

    async def get_historical_safety(self, token_address: str, timeframe: str = DEFAULT_TIMEFRAME) -> Any:
        return await self._run(
            "historical_safety",
            self._gateway.get_historical_safety_data(token_address, timeframe),
        )

    async def get_realtime_alerts(self, token_address: str) -> Any:
        return await self._run("realtime_alerts", self._gateway.get_realtime_alerts(token_address))

    async def subscribe_to_alerts(self, token_address: str, email: str) -> Any:
        return await self._run("subscribe_to_alerts", self._gateway.subscribe_to_alerts(token_address, email))

    async def get_comprehensive_report(self, token_address: str) -> Any:
        return await self._run("comprehensive_report", self._gateway.get_comprehensive_report(token_address))

    async def search_tokens(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> Any:
        return await self._run("search_tokens", self._gateway.search_tokens(query, limit))

    async def get_api_usage_stats(self) -> Any:
        return await self._run("usage_stats", self._gateway.get_api_usage_stats())

    async def get_supported_networks(self) -> Any:
        return await self._run("supported_networks", self._gateway.get_supported_networks())

    async def health_check(self) -> Any:
        return await self._run("health_check", self._gateway.health_check())

    async def authenticate_with_wallet(
        self, wallet: SigningWallet, message: str = DEFAULT_SIGN_IN_MESSAGE
    ) -> Any:
        return await self._run("authenticate", self._gateway.authenticate_with_wallet(wallet, message))

    async def batch_check_tokens(self, token_addresses: Sequence[str]) -> dict[str, Any]:
        """Token scan for every address concurrently; any failure fails the batch."""
        if not token_addresses:
            raise InvalidInputError("token_addresses", "at least one token address is required")
        addresses = list(dict.fromkeys(require_identifier("token_address", a) for a in token_addresses))
        fetchers: dict[str, Fetcher] = {
            a: (lambda a=a: self._gateway.get_token_safety(a)) for a in addresses
        }
        try:
            payloads, _ = await _fan_out(fetchers, fail_fast=True)
        except RemoteFetchError as e:
            logger.error(
                "rugcheck_operation_failed",
                operation="batch_check_tokens",
                dimension=e.dimension,
                status=e.status_code,
                error=str(e.cause),
            )
            raise
        logger.info("batch_check_done", token_count=len(payloads))
        return payloads

    # Score helpers for callers holding raw records.

    @staticmethod
    def compute_overall_score(record: Any) -> float:
        return compute_overall_score(record)

    @staticmethod
    def classify(score: Any) -> SafetyLevel:
        return classify(score)

    @staticmethod
    def color_for(level: Any) -> str:
        return color_for(level)
