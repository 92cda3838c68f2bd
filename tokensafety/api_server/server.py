"""
FastAPI server — token safety reports over HTTP.

Thin surface over TokenSafetyAnalyzer. Invalid input maps to 400; a failed
Rugcheck request maps to 502 with a generic per-operation message (the cause is
logged, never returned). Config via env (see tokensafety.config).

Run: uvicorn tokensafety.api_server.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Awaitable

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from tokensafety import __version__
from tokensafety.analysis.analyzer import TokenSafetyAnalyzer
from tokensafety.analysis.reports import ComprehensiveSafetyRecord
from tokensafety.config import get_settings
from tokensafety.core.exceptions import InvalidInputError, RemoteFetchError, user_message
from tokensafety.gateway.client import DEFAULT_SEARCH_LIMIT, DEFAULT_TIMEFRAME, RugcheckGateway
from tokensafety.tokensafety_logging import get_logger

logger = get_logger(__name__)

_analyzer: TokenSafetyAnalyzer | None = None


def get_analyzer() -> TokenSafetyAnalyzer:
    """Dependency: one analyzer (and gateway) per process, built from settings on first use."""
    global _analyzer
    if _analyzer is None:
        settings = get_settings()
        _analyzer = TokenSafetyAnalyzer(
            RugcheckGateway.from_settings(settings),
            fail_fast=settings.fail_fast,
        )
        logger.info(
            "api_analyzer_created",
            rugcheck_api_base=settings.rugcheck_api_base,
            authenticated=settings.rugcheck_api_key is not None,
            fail_fast=settings.fail_fast,
        )
    return _analyzer


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the shared gateway's HTTP client on shutdown."""
    global _analyzer
    yield
    if _analyzer is not None:
        await _analyzer.aclose()
        _analyzer = None
        logger.info("api_analyzer_closed")


app = FastAPI(title="Token Safety API", version=__version__, lifespan=lifespan)


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------

class TokenSafetyResponse(BaseModel):
    """GET /token/{address}/safety response: aggregate plus raw sub-reports."""

    token_address: str = Field(..., description="Token mint address (base58)")
    timestamp: str = Field(..., description="ISO 8601 time the analysis completed")
    overall_score: float = Field(..., description="Weighted safety score (0–100)")
    safety_level: str = Field(..., description="SAFE | MODERATE | RISKY | DANGEROUS")
    safety_color: str = Field(..., description="Display color for the safety level")
    contributing_dimensions: list[str] = Field(default_factory=list, description="Dimensions that carried a score")
    failed_dimensions: list[str] = Field(default_factory=list, description="Dimensions that failed (partial mode only)")
    reports: dict[str, Any] = Field(default_factory=dict, description="Raw sub-report per dimension")

    @classmethod
    def from_record(cls, record: ComprehensiveSafetyRecord) -> "TokenSafetyResponse":
        return cls(
            token_address=record.token_address,
            timestamp=record.timestamp,
            overall_score=record.overall_score,
            safety_level=record.safety_level.value,
            safety_color=record.safety_color,
            contributing_dimensions=list(record.result.contributing_dimensions),
            failed_dimensions=list(record.failed_dimensions),
            reports={dim: report.payload for dim, report in record.reports.items()},
        )


class SubscribeRequest(BaseModel):
    """POST /token/{address}/subscribe body."""

    email: str = Field(..., max_length=320, description="Address that receives alerts")


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

async def _call(operation: str, call: Awaitable[Any]) -> Any:
    """Await call; map InvalidInputError -> 400, RemoteFetchError -> 502 (generic detail)."""
    try:
        return await call
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except RemoteFetchError as e:
        logger.error(
            "api_request_failed",
            operation=operation,
            dimension=e.dimension,
            status=e.status_code,
            error=str(e.cause),
        )
        raise HTTPException(status_code=502, detail=user_message(operation)) from e


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe for this service (does not call Rugcheck)."""
    return {"status": "ok", "version": __version__}


@app.get("/rugcheck/health")
async def rugcheck_health(analyzer: TokenSafetyAnalyzer = Depends(get_analyzer)) -> Any:
    return await _call("health_check", analyzer.health_check())


@app.get("/token/{address}/safety", response_model=TokenSafetyResponse)
async def token_safety(
    address: str,
    partial: bool = Query(False, description="Return a partial report instead of failing on one dimension"),
    analyzer: TokenSafetyAnalyzer = Depends(get_analyzer),
) -> TokenSafetyResponse:
    if partial and analyzer.fail_fast:
        analyzer = TokenSafetyAnalyzer(analyzer.gateway, fail_fast=False)
    record = await _call("analyze_token", analyzer.analyze(address))
    return TokenSafetyResponse.from_record(record)


@app.get("/token/{address}/history")
async def token_history(
    address: str,
    timeframe: str = Query(DEFAULT_TIMEFRAME, max_length=16),
    analyzer: TokenSafetyAnalyzer = Depends(get_analyzer),
) -> Any:
    return await _call("historical_safety", analyzer.get_historical_safety(address, timeframe))


@app.get("/token/{address}/alerts")
async def token_alerts(address: str, analyzer: TokenSafetyAnalyzer = Depends(get_analyzer)) -> Any:
    return await _call("realtime_alerts", analyzer.get_realtime_alerts(address))


@app.get("/token/{address}/report")
async def token_report(address: str, analyzer: TokenSafetyAnalyzer = Depends(get_analyzer)) -> Any:
    return await _call("comprehensive_report", analyzer.get_comprehensive_report(address))


@app.post("/token/{address}/subscribe")
async def token_subscribe(
    address: str,
    body: SubscribeRequest,
    analyzer: TokenSafetyAnalyzer = Depends(get_analyzer),
) -> Any:
    return await _call("subscribe_to_alerts", analyzer.subscribe_to_alerts(address, body.email))


@app.get("/pool/{address}")
async def pool_safety(address: str, analyzer: TokenSafetyAnalyzer = Depends(get_analyzer)) -> Any:
    return await _call("analyze_pool", analyzer.analyze_pool(address))


@app.get("/wallet/{address}")
async def wallet_risk(address: str, analyzer: TokenSafetyAnalyzer = Depends(get_analyzer)) -> Any:
    return await _call("analyze_wallet", analyzer.analyze_wallet(address))


@app.get("/website")
async def website_analysis(
    url: str = Query(..., max_length=2048),
    analyzer: TokenSafetyAnalyzer = Depends(get_analyzer),
) -> Any:
    return await _call("analyze_website", analyzer.analyze_website(url))


@app.get("/search")
async def search(
    query: str = Query(..., max_length=256),
    limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1, le=100),
    analyzer: TokenSafetyAnalyzer = Depends(get_analyzer),
) -> Any:
    return await _call("search_tokens", analyzer.search_tokens(query, limit))


@app.get("/networks")
async def networks(analyzer: TokenSafetyAnalyzer = Depends(get_analyzer)) -> Any:
    return await _call("supported_networks", analyzer.get_supported_networks())


@app.get("/stats/usage")
async def usage_stats(analyzer: TokenSafetyAnalyzer = Depends(get_analyzer)) -> Any:
    return await _call("usage_stats", analyzer.get_api_usage_stats())
