"""Static Basic-auth middleware for partners without a token exchange."""

from typing import Callable, Optional

from partner_client.auth.cloning import clone_request
from partner_client.auth.strategies import BASIC, AuthorizationScheme, encode_basic_credentials
from partner_client.config import mock_clients_enabled
from partner_client.http.handler import DelegatingHandler, RequestHandler
from partner_client.http.models import OutgoingRequest, PartnerResponse


class StaticBasicAuthHandler(DelegatingHandler):
    """
    Stamp a Basic Authorization header on every request.

    No caching beyond the encoded header and no retry. Skipped entirely
    when the bypass flag is set.
    """

    log_component = "basic_auth"

    def __init__(
        self,
        inner_handler: RequestHandler,
        username: str,
        password: str,
        scheme: AuthorizationScheme = BASIC,
        bypass: Callable[[], bool] = mock_clients_enabled,
        partner: Optional[str] = None,
    ):
        super().__init__(inner_handler)
        self._encoded = encode_basic_credentials(username, password)
        self._scheme = scheme
        self._bypass = bypass
        self.partner = partner

    async def send(self, request: OutgoingRequest) -> PartnerResponse:
        if self._bypass():
            return await self.inner_handler.send(request)

        stamped = await clone_request(request)
        self._scheme.apply(stamped, self._encoded)
        return await self.inner_handler.send(stamped)


__all__ = ["StaticBasicAuthHandler"]
