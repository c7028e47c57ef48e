"""HTTP pipeline primitives: request/response models, handlers, transport."""

from partner_client.http.handler import DelegatingHandler, RequestHandler
from partner_client.http.models import OutgoingRequest, PartnerResponse, RequestContent
from partner_client.http.transport import AiohttpTransport

__all__ = [
    "OutgoingRequest",
    "PartnerResponse",
    "RequestContent",
    "RequestHandler",
    "DelegatingHandler",
    "AiohttpTransport",
]
