"""
Application-level exceptions.

- InvalidInputError: caller supplied an empty identifier; raised before any I/O.
- RemoteFetchError: one dimension fetch against the Rugcheck API failed
  (transport, timeout, non-2xx status, undecodable body). Never retried.

A degenerate aggregation (no dimension carried a score) is a value, not an error.
"""

from __future__ import annotations

# Generic, user-facing messages per operation. Transport details stay in the logs.
OPERATION_MESSAGES: dict[str, str] = {
    "analyze_token": "Failed to analyze token safety",
    "analyze_pool": "Failed to analyze pool safety",
    "analyze_website": "Failed to analyze website",
    "analyze_wallet": "Failed to analyze wallet",
    "batch_check_tokens": "Failed to batch check tokens",
    "historical_safety": "Failed to fetch historical safety data",
    "realtime_alerts": "Failed to fetch real-time alerts",
    "subscribe_to_alerts": "Failed to subscribe to alerts",
    "comprehensive_report": "Failed to fetch comprehensive report",
    "search_tokens": "Failed to search tokens",
    "usage_stats": "Failed to fetch API usage stats",
    "supported_networks": "Failed to fetch supported networks",
    "health_check": "Failed to perform health check",
    "authenticate": "Failed to authenticate with wallet",
}


def user_message(operation: str) -> str:
    """Return the generic message for an operation; unknown operations get a default."""
    return OPERATION_MESSAGES.get(operation, "Token safety request failed")


class TokenSafetyError(Exception):
    """Base class for all token safety errors."""


class InvalidInputError(TokenSafetyError, ValueError):
    """Raised when an identifier is empty or missing. No request is made."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"{field} is required")


class RemoteFetchError(TokenSafetyError):
    """Raised when a request to the risk-scoring API fails for one dimension."""

    def __init__(
        self,
        dimension: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        self.dimension = dimension
        self.cause = cause
        self.status_code = status_code
        super().__init__(f"rugcheck request failed: {dimension}")
