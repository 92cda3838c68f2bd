"""
Application settings.

Collects the env getters from config.env into one typed, immutable object used
by the API server and CLI tools to build the gateway and analyzer.
"""

from __future__ import annotations

from dataclasses import dataclass

from tokensafety.config.env import (
    get_api_host,
    get_api_port,
    get_fail_fast,
    get_request_timeout,
    get_rugcheck_api_base,
    get_rugcheck_api_key,
)


@dataclass(frozen=True)
class Settings:
    """Resolved configuration. Read from env on every get_settings() call."""

    rugcheck_api_base: str
    rugcheck_api_key: str | None
    request_timeout_sec: float
    fail_fast: bool
    api_host: str
    api_port: int


def get_settings() -> Settings:
    """Return the current application settings."""
    return Settings(
        rugcheck_api_base=get_rugcheck_api_base(),
        rugcheck_api_key=get_rugcheck_api_key(),
        request_timeout_sec=get_request_timeout(),
        fail_fast=get_fail_fast(),
        api_host=get_api_host(),
        api_port=get_api_port(),
    )
