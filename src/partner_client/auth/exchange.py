"""
Credential exchange: trading configured credentials for a bearer token.

CredentialExchange is the collaborator the refresh coordinator calls.
HttpCredentialExchange is the default implementation: it POSTs to the
partner's auth endpoint through a plain transport, never through the
authenticated pipeline, so a refresh can't recurse into another refresh.
"""

import base64
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from partner_client.auth.credential_cache import Credential
from partner_client.common.exceptions import AuthExchangeError
from partner_client.common.logging import LoggedClass
from partner_client.config import DEFAULT_AUTH_PATH
from partner_client.http.handler import RequestHandler
from partner_client.http.models import OutgoingRequest, RequestContent


class ExchangeResult(BaseModel):
    """Token returned by a credential exchange.

    Accepts ``token`` or ``access_token`` for the token, and an optional
    ``expires_in`` (seconds). Without expires_in, expiry comes from the
    token's ``exp`` claim.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    token: str = Field(validation_alias=AliasChoices("token", "access_token", "accessToken"))
    expires_in: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("expires_in", "expiresIn")
    )

    @field_validator("token")
    @classmethod
    def token_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("token is empty")
        return v.strip()

    @field_validator("expires_in")
    @classmethod
    def expires_in_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("expires_in must be positive")
        return v


def decode_jwt_claims(token: str) -> Dict[str, Any]:
    """
    Decode the claims of a JWT without verifying its signature.

    Only used to read ``exp``; the partner validates the signature.

    Raises:
        ValueError: If the token is not a decodable JWT
    """
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("Token is not a JWT")

    payload_b64 = parts[1]
    # base64url doesn't require padding
    payload_b64 += "=" * (-len(payload_b64) % 4)

    claims = json.loads(base64.urlsafe_b64decode(payload_b64).decode("utf-8"))
    if not isinstance(claims, dict):
        raise ValueError("JWT payload is not an object")
    return claims


def credential_from_exchange(
    result: ExchangeResult,
    now: datetime,
    partner: Optional[str] = None,
) -> Credential:
    """
    Build a Credential from an exchange result.

    An explicit expires_in wins over the token's ``exp`` claim.

    Raises:
        AuthExchangeError: If no expiry can be derived
    """
    if result.expires_in is not None:
        return Credential(result.token, now + timedelta(seconds=result.expires_in))

    try:
        exp = decode_jwt_claims(result.token)["exp"]
        expires_at = datetime.fromtimestamp(float(exp), tz=timezone.utc)
    except (ValueError, KeyError, TypeError, OverflowError, OSError) as e:
        raise AuthExchangeError(
            "Unable to determine token expiry", partner=partner, cause=e
        ) from e

    return Credential(result.token, expires_at)


class CredentialExchange(ABC):
    """Exchanges client/user credentials for a bearer token."""

    @abstractmethod
    async def exchange(
        self,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
    ) -> ExchangeResult:
        """
        Perform the exchange.

        Raises:
            AuthExchangeError: If the exchange fails or the response is unusable
        """


class HttpCredentialExchange(CredentialExchange, LoggedClass):
    """
    Exchange credentials by POSTing JSON to the partner's auth endpoint.

    The transport passed here must be the bare transport (or any handler that
    does not include the authenticated middleware).
    """

    log_component = "exchange"

    def __init__(
        self,
        transport: RequestHandler,
        auth_path: str = DEFAULT_AUTH_PATH,
        partner: Optional[str] = None,
    ):
        self.transport = transport
        self.auth_path = auth_path
        self.partner = partner
        super().__init__()

    async def exchange(
        self,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
    ) -> ExchangeResult:
        request = OutgoingRequest(
            "POST",
            self.auth_path,
            headers={"Accept": "application/json"},
            content=RequestContent.from_json(
                {
                    "clientId": client_id,
                    "clientSecret": client_secret,
                    "username": username,
                    "password": password,
                }
            ),
        )

        response = await self.transport.send(request)

        if not response.ok:
            self._log(
                logging.WARNING,
                "Credential exchange rejected",
                http_status=response.status,
            )
            raise AuthExchangeError(
                f"Credential exchange returned {response.status}",
                partner=self.partner,
                status_code=response.status,
            )

        try:
            return ExchangeResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise AuthExchangeError(
                "Credential exchange returned an unparseable token",
                partner=self.partner,
                status_code=response.status,
                cause=e,
            ) from e


__all__ = [
    "CredentialExchange",
    "ExchangeResult",
    "HttpCredentialExchange",
    "credential_from_exchange",
    "decode_jwt_claims",
]
