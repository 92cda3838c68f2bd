"""
structlog setup for tokensafety.

Every line is one JSON object: event_type, level, timestamp, logger, then the
lookup keys (token_address, operation, dimension, status, error) in that order,
then anything else the call site passed. Any other LOG_FORMAT switches to the
structlog dev renderer; LOG_LEVEL filters.

Writes to stderr so the scan_token CLI keeps stdout for reports. Imports nothing
from tokensafety.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

# Leading keys of every line, in output order.
KEY_ORDER = (
    "event_type",
    "level",
    "timestamp",
    "logger",
    "token_address",
    "operation",
    "dimension",
    "status",
    "error",
)


def _add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _rename_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _order_keys(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Lookup keys first so token/dimension failures line up when grepping."""
    ordered = {k: event_dict.pop(k) for k in KEY_ORDER if k in event_dict}
    ordered.update(event_dict)
    return ordered


def configure_structlog() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
    ]
    if LOG_FORMAT == "json":
        processors += [_rename_event, _order_keys, structlog.processors.JSONRenderer()]
    else:
        # dev renderer keys its headline off "event"
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger with logger=name bound.

        logger = get_logger(__name__)
        logger.error("rugcheck_request_failed", dimension="honeypot", status=502)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_token(token_address: str) -> structlog.BoundLogger:
    """Logger for one token analysis; token_address is on every line."""
    return get_logger("tokensafety").bind(token_address=token_address)
