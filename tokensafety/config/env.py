"""
Environment variable loading and validation for Token Safety.

- RUGCHECK_API_BASE: Rugcheck API base URL (default: https://api.rugcheck.xyz/v1)
- RUGCHECK_API_KEY: optional bearer credential attached to every request
- RUGCHECK_TIMEOUT_SEC: per-request timeout in seconds (default: 15)
- TOKENSAFETY_FAIL_FAST: 1 = any failed dimension fails the analysis (default), 0 = partial records
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is tokensafety/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_RUGCHECK_API_BASE = "https://api.rugcheck.xyz/v1"
DEFAULT_TIMEOUT_SEC = 15.0
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 8000

# Placeholder key shipped in sample configs; means "no key".
FREE_TIER_API_KEY = "free_no_key_required"


def load_tokensafety_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    load_dotenv(_ENV_PATH)


def _truthy(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_rugcheck_api_base() -> str:
    """Return RUGCHECK_API_BASE without trailing slash."""
    load_tokensafety_env()
    url = (os.getenv("RUGCHECK_API_BASE") or "").strip()
    return (url or DEFAULT_RUGCHECK_API_BASE).rstrip("/")


def get_rugcheck_api_key() -> str | None:
    """Return RUGCHECK_API_KEY, or None when unset or the free-tier placeholder."""
    load_tokensafety_env()
    key = (os.getenv("RUGCHECK_API_KEY") or "").strip()
    if not key or key == FREE_TIER_API_KEY:
        return None
    return key


def get_request_timeout() -> float:
    """Return RUGCHECK_TIMEOUT_SEC as float; invalid or non-positive values fall back to 15."""
    load_tokensafety_env()
    raw = (os.getenv("RUGCHECK_TIMEOUT_SEC") or "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SEC
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_TIMEOUT_SEC


def get_fail_fast() -> bool:
    """Return True unless TOKENSAFETY_FAIL_FAST is explicitly disabled."""
    load_tokensafety_env()
    raw = (os.getenv("TOKENSAFETY_FAIL_FAST") or "").strip()
    if not raw:
        return True
    return _truthy(raw)


def get_api_host() -> str:
    load_tokensafety_env()
    return (os.getenv("API_HOST") or "").strip() or DEFAULT_API_HOST


def get_api_port() -> int:
    load_tokensafety_env()
    raw = (os.getenv("API_PORT") or "").strip()
    try:
        return int(raw) if raw else DEFAULT_API_PORT
    except ValueError:
        return DEFAULT_API_PORT
