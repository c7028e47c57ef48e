"""
Partner authentication.

Components:
    - CredentialCache: last known bearer credential and its expiry
    - RefreshCoordinator: single-flight credential exchange per partner
    - AuthenticatedRequestHandler: attaches credentials, retries once on 401
    - clone_request: buffered, independent request copies for resend
    - StaticBasicAuthHandler: stateless Basic header stamping
"""

from partner_client.auth.basic import StaticBasicAuthHandler
from partner_client.auth.cloning import clone_request
from partner_client.auth.credential_cache import (
    EMPTY_CREDENTIAL,
    Credential,
    CredentialCache,
    utc_now,
)
from partner_client.auth.exchange import (
    CredentialExchange,
    ExchangeResult,
    HttpCredentialExchange,
    credential_from_exchange,
    decode_jwt_claims,
)
from partner_client.auth.middleware import AuthenticatedRequestHandler
from partner_client.auth.refresh import RefreshCoordinator
from partner_client.auth.strategies import (
    BASIC,
    BEARER,
    AuthorizationScheme,
    encode_basic_credentials,
)

__all__ = [
    # Credential cache
    "Credential",
    "CredentialCache",
    "EMPTY_CREDENTIAL",
    "utc_now",
    # Exchange
    "CredentialExchange",
    "ExchangeResult",
    "HttpCredentialExchange",
    "credential_from_exchange",
    "decode_jwt_claims",
    # Refresh + middleware
    "RefreshCoordinator",
    "AuthenticatedRequestHandler",
    "StaticBasicAuthHandler",
    "clone_request",
    # Strategies
    "AuthorizationScheme",
    "BEARER",
    "BASIC",
    "encode_basic_credentials",
]
