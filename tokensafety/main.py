"""
Main entrypoint: run the token safety FastAPI server with uvicorn.

Env: API_HOST, API_PORT, RUGCHECK_API_BASE, RUGCHECK_API_KEY, LOG_LEVEL, LOG_FORMAT.
"""

from __future__ import annotations

import uvicorn

from tokensafety.config import get_settings
from tokensafety.tokensafety_logging import get_logger

logger = get_logger("main")


def main() -> None:
    settings = get_settings()
    logger.info(
        "main_api_starting",
        host=settings.api_host,
        port=settings.api_port,
        rugcheck_api_base=settings.rugcheck_api_base,
    )
    uvicorn.run(
        "tokensafety.api_server.server:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
