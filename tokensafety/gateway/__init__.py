"""
Remote data gateway — async access to the Rugcheck risk-scoring API.
"""

from tokensafety.gateway.auth import KeypairWallet, SigningWallet  # noqa: F401
from tokensafety.gateway.client import RugcheckGateway  # noqa: F401
from tokensafety.gateway.context import RequestContext  # noqa: F401

__all__ = ["KeypairWallet", "RequestContext", "RugcheckGateway", "SigningWallet"]
