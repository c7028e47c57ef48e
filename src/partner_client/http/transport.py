"""
aiohttp transport: the terminal stage of a partner pipeline.

Performs the actual network I/O. Transport failures (aiohttp.ClientError,
asyncio.TimeoutError) are logged and re-raised unchanged.
"""

import asyncio
import logging
from typing import Optional

import aiohttp
from multidict import CIMultiDict
from yarl import URL

from partner_client.common.exceptions import classify_http_status
from partner_client.common.logging import LoggedClass
from partner_client.http.handler import RequestHandler
from partner_client.http.models import OutgoingRequest, PartnerResponse


class AiohttpTransport(RequestHandler, LoggedClass):
    """
    Send OutgoingRequest objects over an aiohttp ClientSession.

    Usage:
        async with AiohttpTransport("https://api.partner.example/v1") as transport:
            response = await transport.send(OutgoingRequest("GET", "/orders"))

    Session management:
        By default the transport creates and owns its session. Pass a shared
        session to reuse a connection pool; a shared session is never closed
        by the transport.
    """

    log_component = "transport"

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: float = 30,
        max_concurrent: int = 20,
    ):
        """
        Initialize transport.

        Args:
            base_url: Base URL that relative request URLs are joined onto
            session: Optional shared aiohttp session
            timeout_seconds: Total timeout per request
            max_concurrent: Connection pool size when the session is owned
        """
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout_seconds = timeout_seconds
        self.max_concurrent = max_concurrent

        self._session = session
        self._owns_session = session is None

        super().__init__()

    async def __aenter__(self) -> "AiohttpTransport":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> None:
        """Create aiohttp session if not exists."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_concurrent,
                limit_per_host=self.max_concurrent,
            )
            self._session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True

    async def close(self) -> None:
        """Close the HTTP session if owned."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    def resolve_url(self, url: URL) -> URL:
        """Join a relative request URL onto the base URL."""
        if url.is_absolute() or not self.base_url:
            return url
        return URL(f"{self.base_url}/{str(url).lstrip('/')}")

    async def send(self, request: OutgoingRequest) -> PartnerResponse:
        await self._ensure_session()
        assert self._session is not None  # for mypy

        url = self.resolve_url(request.url)
        headers = CIMultiDict(request.headers)
        data = None

        if request.content is not None:
            data = request.content.data
            if request.content.content_type and "Content-Type" not in headers:
                headers["Content-Type"] = request.content.content_type
            # Content headers replace same-named request headers
            for name in set(request.content.headers.keys()):
                headers.popall(name, None)
            headers.extend(request.content.headers)

        try:
            async with self._session.request(
                request.method,
                url,
                headers=headers,
                data=data,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                body = await response.read()
                result = PartnerResponse(
                    status=response.status,
                    headers=CIMultiDict(response.headers),
                    body=body,
                    reason=response.reason,
                    request=request,
                )

        except asyncio.TimeoutError as e:
            self._log_exception(
                e,
                "Partner request timeout",
                level=logging.WARNING,
                api_method=request.method,
                api_path=url.path,
                error_category="transient",
            )
            raise

        except aiohttp.ClientError as e:
            self._log_exception(
                e,
                "Partner connection error",
                level=logging.WARNING,
                api_method=request.method,
                api_path=url.path,
                error_category="transient",
            )
            raise

        if not result.ok:
            self._log(
                logging.DEBUG,
                "Partner returned error status",
                api_method=request.method,
                api_path=url.path,
                http_status=result.status,
                error_category=classify_http_status(result.status).value,
            )

        return result


__all__ = ["AiohttpTransport"]
