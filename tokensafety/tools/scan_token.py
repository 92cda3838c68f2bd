"""
Scan one or more Solana tokens and print their safety score, tier and color.

How to run:
    From project root (with .env configured):
        py -m tokensafety.tools.scan_token <MINT> [<MINT> ...]
        py -m tokensafety.tools.scan_token <MINT> --partial --json

Env vars:
    RUGCHECK_API_BASE     (optional; default https://api.rugcheck.xyz/v1)
    RUGCHECK_API_KEY      (optional; bearer token for higher rate limits)
    RUGCHECK_TIMEOUT_SEC  (optional; default 15)
    RUGCHECK_KEYPAIR_PATH (optional; sign in with this Solana CLI keypair first)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys

from tokensafety.analysis.analyzer import TokenSafetyAnalyzer
from tokensafety.config import get_settings
from tokensafety.core.exceptions import InvalidInputError, RemoteFetchError, user_message
from tokensafety.gateway.auth import KeypairWallet
from tokensafety.gateway.client import RugcheckGateway
from tokensafety.tokensafety_logging import get_logger

logger = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scan Solana tokens via the Rugcheck API")
    parser.add_argument("tokens", nargs="+", help="Token mint address(es)")
    parser.add_argument(
        "--partial",
        action="store_true",
        help="Keep going when a dimension fails (report is scored from what succeeded)",
    )
    parser.add_argument("--json", action="store_true", help="Print full records as JSON")
    parser.add_argument(
        "--keypair",
        default=os.getenv("RUGCHECK_KEYPAIR_PATH", "").strip() or None,
        help="Solana CLI keypair file used to sign in before scanning",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, gateway: RugcheckGateway | None = None) -> int:
    """Scan every token in args.tokens sequentially. Returns process exit code."""
    settings = get_settings()
    gateway = gateway or RugcheckGateway.from_settings(settings)
    fail_fast = settings.fail_fast and not args.partial
    analyzer = TokenSafetyAnalyzer(gateway, fail_fast=fail_fast)
    exit_code = 0
    async with gateway:
        if args.keypair:
            try:
                wallet = KeypairWallet.from_json_file(args.keypair)
            except (OSError, ValueError) as e:
                logger.error("scan_token_keypair_invalid", path=args.keypair, error=str(e))
                print(f"[scan_token] cannot load keypair {args.keypair}: {e}")
                return 1
            try:
                await analyzer.authenticate_with_wallet(wallet)
            except RemoteFetchError:
                print(f"[scan_token] {user_message('authenticate')}; continuing unauthenticated")

        for token in args.tokens:
            try:
                record = await analyzer.analyze(token)
            except InvalidInputError as e:
                print(f"[scan_token] invalid token address: {e}")
                exit_code = 1
                continue
            except RemoteFetchError:
                print(f"[scan_token] {token}: {user_message('analyze_token')}")
                exit_code = 1
                continue

            if args.json:
                print(json.dumps(record.to_dict(), indent=2, default=str))
                continue
            print(
                f"{record.token_address} score={record.overall_score:.2f} "
                f"level={record.safety_level.value} color={record.safety_color}"
            )
            if record.result.is_degenerate:
                print("  no scored dimensions returned")
            if record.failed_dimensions:
                print(f"  failed: {', '.join(record.failed_dimensions)}")
    return exit_code


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logger.info("scan_token_started", token_count=len(args.tokens), partial=args.partial)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
