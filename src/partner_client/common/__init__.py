"""Common infrastructure shared across partner clients."""

from partner_client.common.exceptions import (
    AuthError,
    AuthExchangeError,
    ConfigurationError,
    ErrorCategory,
    PartnerClientError,
    PermanentError,
    classify_http_status,
)
from partner_client.common.logging import (
    LoggedClass,
    get_logger,
    log_exception,
    log_with_context,
    setup_logging,
)

__all__ = [
    "ErrorCategory",
    "PartnerClientError",
    "AuthError",
    "AuthExchangeError",
    "PermanentError",
    "ConfigurationError",
    "classify_http_status",
    "LoggedClass",
    "get_logger",
    "log_exception",
    "log_with_context",
    "setup_logging",
]
