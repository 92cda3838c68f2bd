"""
Per-request context for the Rugcheck gateway.

Immutable: the gateway swaps the whole object when the credential changes, and
each request reads the context once when it is issued.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from tokensafety.config.env import FREE_TIER_API_KEY


@dataclass(frozen=True)
class RequestContext:
    bearer_token: str | None = None

    def with_bearer(self, token: str | None) -> "RequestContext":
        """Return a copy carrying token; empty or placeholder tokens keep the current one."""
        if not token or token == FREE_TIER_API_KEY:
            return self
        return replace(self, bearer_token=token)

    def without_bearer(self) -> "RequestContext":
        return replace(self, bearer_token=None)

    def headers(self) -> dict[str, str]:
        if self.bearer_token:
            return {"Authorization": f"Bearer {self.bearer_token}"}
        return {}
