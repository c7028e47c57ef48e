"""
Header attachment strategies.

A partner's credential goes into one header, optionally prefixed by a
scheme. Partners differ only in this value, not in middleware subclasses.
"""

import base64
from dataclasses import dataclass
from typing import Optional

from partner_client.http.models import OutgoingRequest


@dataclass(frozen=True)
class AuthorizationScheme:
    """Where and how a credential is attached to a request."""

    scheme: Optional[str] = "Bearer"
    header: str = "Authorization"

    def header_value(self, parameter: str) -> str:
        if self.scheme:
            return f"{self.scheme} {parameter}"
        return parameter

    def apply(self, request: OutgoingRequest, parameter: str) -> None:
        """Set the credential header, replacing any existing value."""
        request.headers[self.header] = self.header_value(parameter)


BEARER = AuthorizationScheme("Bearer")
BASIC = AuthorizationScheme("Basic")


def encode_basic_credentials(username: str, password: str) -> str:
    """Encode username:password to Base64 for Basic auth."""
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


__all__ = ["AuthorizationScheme", "BEARER", "BASIC", "encode_basic_credentials"]
