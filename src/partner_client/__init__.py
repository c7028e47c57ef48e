"""
Partner API client pipelines with managed authentication.

Usage:
    from partner_client import OutgoingRequest, PartnerConfig, create_pipeline

    config = PartnerConfig.from_env("thinkco")
    async with create_pipeline(config) as pipeline:
        response = await pipeline.send(OutgoingRequest("GET", "/orders"))
"""

from partner_client.auth import (
    AuthenticatedRequestHandler,
    Credential,
    CredentialCache,
    RefreshCoordinator,
    StaticBasicAuthHandler,
    clone_request,
)
from partner_client.config import AuthMode, PartnerConfig, load_partner_configs
from partner_client.http import (
    AiohttpTransport,
    OutgoingRequest,
    PartnerResponse,
    RequestContent,
)
from partner_client.pipeline import PartnerPipeline, create_pipeline

__version__ = "0.1.0"

__all__ = [
    "AuthenticatedRequestHandler",
    "Credential",
    "CredentialCache",
    "RefreshCoordinator",
    "StaticBasicAuthHandler",
    "clone_request",
    "AuthMode",
    "PartnerConfig",
    "load_partner_configs",
    "AiohttpTransport",
    "OutgoingRequest",
    "PartnerResponse",
    "RequestContent",
    "PartnerPipeline",
    "create_pipeline",
]
