"""
Utils package for shared utilities and cross-cutting concerns.

This package contains logging utilities, payload helpers, token utilities
and the message catalogue used across the client.

The handler decorators live in utils.decorators and are imported from there
directly, since they depend on services.exceptions.
"""

from .logging import (configure_logging, log_error, log_request, log_response,
                      setup_logger)
from .messages import format_amount, set_locale, translate
from .responses import (HTTPStatus, encode_body, error_message_from,
                        unwrap_data)
from .security import decode_token_claims, mask_token, token_expired

__all__ = [
    # Logging
    "configure_logging",
    "setup_logger",
    "log_request",
    "log_response",
    "log_error",
    # Messages
    "translate",
    "set_locale",
    "format_amount",
    # Payloads
    "HTTPStatus",
    "encode_body",
    "error_message_from",
    "unwrap_data",
    # Tokens
    "decode_token_claims",
    "token_expired",
    "mask_token",
]
