"""
Token Safety — Solana token safety reports aggregated from the Rugcheck API.

Fetches per-dimension sub-reports (honeypot, liquidity, contract, social, ...)
concurrently, merges them into one record, and computes an overall safety
score, tier and display color. Modular layout: gateway (remote API), analysis
(scoring + orchestration), API server and CLI tools.
"""

__version__ = "0.1.0"
