"""
Handler chain primitives.

A pipeline is a chain of RequestHandler instances. Each DelegatingHandler
does its work and forwards to ``inner_handler``; the last link is a transport
that performs network I/O.
"""

from abc import ABC, abstractmethod

from partner_client.common.logging import LoggedClass
from partner_client.http.models import OutgoingRequest, PartnerResponse


class RequestHandler(ABC):
    """One stage of an outgoing request pipeline."""

    @abstractmethod
    async def send(self, request: OutgoingRequest) -> PartnerResponse:
        """Send request and return the response."""


class DelegatingHandler(RequestHandler, LoggedClass):
    """Handler that forwards to an inner handler."""

    def __init__(self, inner_handler: RequestHandler):
        self.inner_handler = inner_handler
        super().__init__()

    async def send(self, request: OutgoingRequest) -> PartnerResponse:
        return await self.inner_handler.send(request)


__all__ = ["RequestHandler", "DelegatingHandler"]
