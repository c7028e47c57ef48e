"""
Pipeline builder.

Builds the handler chain for a partner from its PartnerConfig:

    bearer_exchange: AuthenticatedRequestHandler -> AiohttpTransport
    static_basic:    StaticBasicAuthHandler -> AiohttpTransport
    none:            AiohttpTransport

The credential exchange is wired to the bare transport so it never passes
back through the authenticated handler.
"""

import logging
from typing import Callable, Optional

from partner_client.auth.basic import StaticBasicAuthHandler
from partner_client.auth.credential_cache import CredentialCache
from partner_client.auth.exchange import CredentialExchange, HttpCredentialExchange
from partner_client.auth.middleware import AuthenticatedRequestHandler
from partner_client.auth.refresh import RefreshCoordinator
from partner_client.common.logging import get_logger, log_with_context
from partner_client.config import AuthMode, PartnerConfig, mock_clients_enabled
from partner_client.http.handler import RequestHandler
from partner_client.http.models import OutgoingRequest, PartnerResponse
from partner_client.http.transport import AiohttpTransport

logger = get_logger(__name__)


class PartnerPipeline:
    """
    A partner's handler chain plus the transport it owns.

    Usage:
        async with create_pipeline(config) as pipeline:
            response = await pipeline.send(OutgoingRequest("GET", "/orders"))
    """

    def __init__(
        self,
        config: PartnerConfig,
        handler: RequestHandler,
        transport: AiohttpTransport,
        coordinator: Optional[RefreshCoordinator] = None,
    ):
        self.config = config
        self.handler = handler
        self.transport = transport
        self.coordinator = coordinator

    async def __aenter__(self) -> "PartnerPipeline":
        await self.transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def send(self, request: OutgoingRequest) -> PartnerResponse:
        return await self.handler.send(request)

    async def close(self) -> None:
        """Close the transport and drop the cached credential."""
        await self.transport.close()
        if self.coordinator is not None:
            self.coordinator.cache.clear()


def create_pipeline(
    config: PartnerConfig,
    transport: Optional[AiohttpTransport] = None,
    exchange: Optional[CredentialExchange] = None,
    cache: Optional[CredentialCache] = None,
    bypass: Callable[[], bool] = mock_clients_enabled,
) -> PartnerPipeline:
    """
    Build the pipeline for one partner.

    Each call creates its own coordinator and cache, so two partners never
    share credential state.

    Args:
        config: Partner configuration (validated here)
        transport: Terminal transport (default: AiohttpTransport on config.url)
        exchange: Credential exchange (default: HttpCredentialExchange on transport)
        cache: Credential cache for the coordinator (default: new cache)
        bypass: Bypass flag, evaluated per request

    Returns:
        PartnerPipeline ready to send requests

    Raises:
        ConfigurationError: If required settings are missing
    """
    config.validate()

    if transport is None:
        transport = AiohttpTransport(
            base_url=config.url,
            timeout_seconds=config.timeout_seconds,
            max_concurrent=config.max_concurrent,
        )

    coordinator = None
    handler: RequestHandler

    if config.auth_mode == AuthMode.BEARER_EXCHANGE:
        if exchange is None:
            exchange = HttpCredentialExchange(
                transport, auth_path=config.auth_path, partner=config.name
            )
        coordinator = RefreshCoordinator(
            exchange,
            config.exchange_credentials,
            cache=cache,
            partner=config.name,
        )
        handler = AuthenticatedRequestHandler(
            transport,
            coordinator,
            auth_path=config.auth_path,
            bypass=bypass,
            partner=config.name,
        )
    elif config.auth_mode == AuthMode.STATIC_BASIC:
        handler = StaticBasicAuthHandler(
            transport,
            config.username,
            config.password,
            bypass=bypass,
            partner=config.name,
        )
    else:
        handler = transport

    log_with_context(
        logger,
        logging.DEBUG,
        "Partner pipeline created",
        partner=config.name,
        auth_mode=config.auth_mode.value,
    )

    return PartnerPipeline(config, handler, transport, coordinator)


__all__ = ["PartnerPipeline", "create_pipeline"]
