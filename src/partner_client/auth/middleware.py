"""
Authenticated request middleware.

Sits in a partner pipeline in front of the transport. Attaches a cached
bearer credential to each request, and when the partner answers 401 it
refreshes the credential and resends a clone of the request exactly once.
"""

import logging
from typing import Callable, Optional

from partner_client.auth.cloning import clone_request
from partner_client.auth.refresh import RefreshCoordinator
from partner_client.auth.strategies import BEARER, AuthorizationScheme
from partner_client.config import DEFAULT_AUTH_PATH, mock_clients_enabled
from partner_client.http.handler import DelegatingHandler, RequestHandler
from partner_client.http.models import OutgoingRequest, PartnerResponse


class AuthenticatedRequestHandler(DelegatingHandler):
    """
    Credential-attaching handler with one-shot retry on 401.

    Send flow:
    1. Bypass flag set -> forward unchanged
    2. Request targets the auth endpoint -> forward unchanged
    3. Snapshot the request, ensure a valid credential, attach it to a copy,
       forward
    4. On 401: invalidate the rejected credential, refresh, attach the new
       credential to a fresh copy, forward once more and return that
       response whatever its status
    5. Otherwise return the response

    The caller's request object is never modified. At most two sends per
    call; transport errors propagate unchanged and don't touch the cache.

    Usage:
        transport = AiohttpTransport(config.url)
        exchange = HttpCredentialExchange(transport, config.auth_path)
        coordinator = RefreshCoordinator(exchange, config.exchange_credentials)
        handler = AuthenticatedRequestHandler(transport, coordinator)
        response = await handler.send(OutgoingRequest("GET", "/orders"))
    """

    log_component = "auth"

    def __init__(
        self,
        inner_handler: RequestHandler,
        coordinator: RefreshCoordinator,
        scheme: AuthorizationScheme = BEARER,
        auth_path: str = DEFAULT_AUTH_PATH,
        bypass: Callable[[], bool] = mock_clients_enabled,
        partner: Optional[str] = None,
    ):
        """
        Args:
            inner_handler: Next stage of the pipeline
            coordinator: This partner's refresh coordinator
            scheme: How the credential is attached
            auth_path: Path suffix identifying the credential exchange endpoint
            bypass: Returns True when auth handling is disabled; called per request
            partner: Partner name for log context
        """
        super().__init__(inner_handler)
        self._coordinator = coordinator
        self._scheme = scheme
        self._auth_path = auth_path.lower()
        self._bypass = bypass
        self.partner = partner

    def is_auth_endpoint(self, request: OutgoingRequest) -> bool:
        return request.path.lower().endswith(self._auth_path)

    async def send(self, request: OutgoingRequest) -> PartnerResponse:
        if self._bypass():
            return await self.inner_handler.send(request)

        if self.is_auth_endpoint(request):
            return await self.inner_handler.send(request)

        snapshot = await clone_request(request)

        credential = await self._coordinator.ensure_valid()
        attempt = await clone_request(snapshot)
        self._scheme.apply(attempt, credential.token)

        response = await self.inner_handler.send(attempt)
        if not response.is_auth_failure:
            return response

        self._log(
            logging.INFO,
            "Credential rejected, refreshing and retrying",
            api_method=request.method,
            api_path=request.path,
        )
        self._coordinator.cache.invalidate(credential.token)

        retry = await clone_request(snapshot)
        credential = await self._coordinator.ensure_valid()
        self._scheme.apply(retry, credential.token)

        response = await self.inner_handler.send(retry)
        if response.is_auth_failure:
            self._log(
                logging.WARNING,
                "Credential rejected after refresh",
                api_method=request.method,
                api_path=request.path,
                http_status=response.status,
            )
        return response


__all__ = ["AuthenticatedRequestHandler"]
