"""
Exception types and error classification for partner_client.

Provides:
- ErrorCategory enum for handling decisions
- Typed exception hierarchy for partner client errors
- HTTP status classification for log context
"""

from enum import Enum
from typing import Optional


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed later
                   (e.g., network timeouts, 429/503 errors)
        AUTH: Authentication failures requiring credential refresh
              (e.g., 401 errors, failed credential exchange)
        PERMANENT: Failures that won't succeed on retry
                   (e.g., 404, invalid configuration)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class PartnerClientError(Exception):
    """
    Base exception for all partner client errors.

    Attributes:
        message: Human-readable error description
        category: Error classification
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthError(PartnerClientError):
    """Base class for authentication errors."""

    category = ErrorCategory.AUTH


class AuthExchangeError(AuthError):
    """
    Credential exchange failed.

    Raised when the exchange endpoint errors, or returns a token whose
    expiry cannot be determined. The credential cache is left invalid.
    """

    def __init__(
        self,
        message: str,
        partner: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        context = {}
        if partner:
            context["partner"] = partner
        if status_code is not None:
            context["http_status"] = status_code
        super().__init__(message, cause, context)
        self.partner = partner
        self.status_code = status_code


# =============================================================================
# Permanent Errors
# =============================================================================


class PermanentError(PartnerClientError):
    """Base class for non-retriable errors."""

    category = ErrorCategory.PERMANENT


class ConfigurationError(PermanentError):
    """Invalid or missing configuration."""

    pass


# =============================================================================
# Classification
# =============================================================================


def classify_http_status(status_code: int) -> ErrorCategory:
    """
    Classify HTTP status code into error category.

    Args:
        status_code: HTTP response status

    Returns:
        Appropriate ErrorCategory
    """
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code == 401:
        return ErrorCategory.AUTH

    if status_code == 429:
        return ErrorCategory.TRANSIENT  # Rate limited

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT

    if status_code >= 500:
        return ErrorCategory.TRANSIENT

    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "PartnerClientError",
    "AuthError",
    "AuthExchangeError",
    "PermanentError",
    "ConfigurationError",
    "classify_http_status",
]
