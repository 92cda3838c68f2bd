"""
Core utilities — error taxonomy shared by the gateway, analyzer, API server and CLI.
"""

from tokensafety.core.exceptions import (  # noqa: F401
    InvalidInputError,
    RemoteFetchError,
    TokenSafetyError,
    user_message,
)

__all__ = ["InvalidInputError", "RemoteFetchError", "TokenSafetyError", "user_message"]
