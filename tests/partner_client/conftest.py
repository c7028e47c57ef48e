"""
Shared fakes and fixtures for partner_client tests.

Provides:
- FakeExchange: counts exchange calls, hands out token-1, token-2, ...
- ScriptedHandler: stands in for the wrapped pipeline, records every request
- Factories for coordinators and authenticated handlers
"""

import asyncio
import base64
import json
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import pytest

from partner_client.auth.credential_cache import CredentialCache
from partner_client.auth.exchange import CredentialExchange, ExchangeResult
from partner_client.auth.middleware import AuthenticatedRequestHandler
from partner_client.auth.refresh import RefreshCoordinator
from partner_client.config import ExchangeCredentials
from partner_client.http.handler import RequestHandler
from partner_client.http.models import OutgoingRequest, PartnerResponse


class FakeExchange(CredentialExchange):
    """Credential exchange double returning sequential tokens."""

    def __init__(
        self,
        expires_in: Optional[float] = 3600,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.expires_in = expires_in
        self.delay = delay
        self.error = error
        self.gate = gate
        self.calls = 0
        self.received: List[tuple] = []

    async def exchange(self, client_id, client_secret, username, password):
        self.calls += 1
        self.received.append((client_id, client_secret, username, password))
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ExchangeResult(token=f"token-{self.calls}", expires_in=self.expires_in)


class ScriptedHandler(RequestHandler):
    """
    Wrapped pipeline double.

    Returns statuses from ``statuses`` in order (the last one repeats), or
    asks ``responder`` for a status per request. With ``gate``, send number
    ``gate_call`` waits on the gate after being recorded.
    """

    def __init__(
        self,
        statuses: Optional[List[int]] = None,
        responder: Optional[Callable[[OutgoingRequest], int]] = None,
        error: Optional[Exception] = None,
        body: bytes = b"",
        gate: Optional[asyncio.Event] = None,
        gate_call: int = 1,
    ):
        self.statuses = list(statuses or [200])
        self.responder = responder
        self.error = error
        self.body = body
        self.gate = gate
        self.gate_call = gate_call
        self.requests: List[OutgoingRequest] = []
        self.authorizations: List[Optional[str]] = []
        self.bodies: List[Optional[bytes]] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def send(self, request: OutgoingRequest) -> PartnerResponse:
        self.requests.append(request)
        self.authorizations.append(request.headers.get("Authorization"))
        self.bodies.append(
            await request.content.read() if request.content is not None else None
        )
        if self.gate is not None and self.calls == self.gate_call:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

        if self.responder is not None:
            status = self.responder(request)
        elif len(self.statuses) > 1:
            status = self.statuses.pop(0)
        else:
            status = self.statuses[0]

        return PartnerResponse(status=status, body=self.body, request=request)


def make_jwt(claims: dict) -> str:
    """Unsigned JWT carrying ``claims``."""

    def _b64(data: dict) -> str:
        raw = json.dumps(data).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    return f"{_b64({'alg': 'HS256', 'typ': 'JWT'})}.{_b64(claims)}.signature"


class FrozenClock:
    """Settable UTC clock for cache tests."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def credentials():
    return ExchangeCredentials(
        client_id="client-id",
        client_secret="client-secret",
        username="api-user",
        password="api-pass",
    )


@pytest.fixture
def fake_exchange():
    return FakeExchange()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def make_coordinator(credentials):
    """Factory for RefreshCoordinator bound to a fake exchange."""

    def _make(exchange=None, cache=None, partner="thinkco"):
        return RefreshCoordinator(
            exchange or FakeExchange(),
            credentials,
            cache=cache or CredentialCache(),
            partner=partner,
        )

    return _make


@pytest.fixture
def make_handler(make_coordinator):
    """Factory for AuthenticatedRequestHandler over a scripted pipeline."""

    def _make(inner=None, exchange=None, coordinator=None, bypass=lambda: False, **kwargs):
        inner = inner or ScriptedHandler()
        coordinator = coordinator or make_coordinator(exchange=exchange)
        handler = AuthenticatedRequestHandler(
            inner, coordinator, bypass=bypass, partner="thinkco", **kwargs
        )
        return handler, inner, coordinator

    return _make


@pytest.fixture
def scripted_handler_cls():
    return ScriptedHandler


@pytest.fixture
def fake_exchange_cls():
    return FakeExchange


@pytest.fixture
def jwt_factory():
    return make_jwt


@pytest.fixture
def frozen_clock_cls():
    return FrozenClock
