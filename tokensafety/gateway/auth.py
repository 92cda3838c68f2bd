"""
Wallet-signature login for the Rugcheck API.

The wallet signs a compact JSON payload {message, timestamp, publicKey}; the
signature, public key and the exact signed JSON are posted to the login
endpoint, which answers with a bearer token.
"""

from __future__ import annotations

import json
import time
from typing import Any, Protocol

from solders.keypair import Keypair

from tokensafety.core.exceptions import InvalidInputError

DEFAULT_SIGN_IN_MESSAGE = "Sign-in to Rugcheck.xyz"
LOGIN_PATH = "/auth/login/solana"
SIGNATURE_TYPE = "ed25519"


class SigningWallet(Protocol):
    """Anything that exposes a base58 public key and signs raw message bytes."""

    @property
    def public_key(self) -> str: ...

    def sign_message(self, message: bytes) -> bytes: ...


class KeypairWallet:
    """SigningWallet backed by a local solders Keypair."""

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @classmethod
    def from_json_file(cls, path: str) -> "KeypairWallet":
        """Load a Solana CLI keypair file (JSON array of 64 ints)."""
        with open(path, encoding="utf-8") as f:
            secret = json.load(f)
        if not isinstance(secret, list) or len(secret) != 64:
            raise ValueError(f"{path}: expected a JSON array of 64 ints")
        return cls(Keypair.from_bytes(bytes(secret)))

    @property
    def public_key(self) -> str:
        return str(self._keypair.pubkey())

    def sign_message(self, message: bytes) -> bytes:
        return bytes(self._keypair.sign_message(message))


def build_sign_message(public_key: str, message: str, timestamp_ms: int | None = None) -> str:
    """Return the JSON string the wallet signs. Compact separators, key order fixed."""
    if not public_key or not public_key.strip():
        raise InvalidInputError("public_key")
    payload = {
        "message": message,
        "timestamp": timestamp_ms if timestamp_ms is not None else int(time.time() * 1000),
        "publicKey": public_key,
    }
    return json.dumps(payload, separators=(",", ":"))


def build_login_body(wallet: SigningWallet, message: str = DEFAULT_SIGN_IN_MESSAGE) -> dict[str, Any]:
    """Sign the sign-in message with wallet and return the login request body."""
    public_key = str(wallet.public_key)
    signed = build_sign_message(public_key, message)
    signature = wallet.sign_message(signed.encode("utf-8"))
    return {
        "signature": {"data": list(bytes(signature)), "type": SIGNATURE_TYPE},
        "wallet": public_key,
        "message": signed,
    }
