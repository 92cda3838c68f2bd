"""
Structured logging for Token Safety.

JSON logs with timestamp, token_address, event_type, dimension.
Use get_logger() in all modules for aggregation-friendly output.
"""

from tokensafety.tokensafety_logging.logger import bind_token, get_logger

__all__ = ["bind_token", "get_logger"]
