"""
Single-flight credential refresh for one partner.

When many requests find the cached credential invalid at once, exactly one
of them performs the exchange; the rest wait on the partner's lock and then
pick up the credential it stored.
"""

import asyncio
import logging
from typing import Optional

from partner_client.auth.credential_cache import Credential, CredentialCache
from partner_client.auth.exchange import CredentialExchange, credential_from_exchange
from partner_client.common.exceptions import AuthExchangeError
from partner_client.common.logging import LoggedClass
from partner_client.config import ExchangeCredentials


class RefreshCoordinator(LoggedClass):
    """
    Guarantees at most one in-flight credential exchange per partner.

    Algorithm (double-checked):
    1. Cache valid without the lock -> return it
    2. Acquire the partner's lock (suspends this task only)
    3. Cache valid under the lock -> another caller refreshed, return it
    4. Exchange, derive expiry, store
    5. Release the lock, also on failure or cancellation

    One coordinator per partner; never share one across partners.

    Usage:
        coordinator = RefreshCoordinator(exchange, config.exchange_credentials)
        credential = await coordinator.ensure_valid()
    """

    log_component = "refresh"

    def __init__(
        self,
        exchange: CredentialExchange,
        credentials: ExchangeCredentials,
        cache: Optional[CredentialCache] = None,
        partner: Optional[str] = None,
    ):
        """
        Args:
            exchange: Collaborator performing the exchange (must not route
                through the authenticated middleware)
            credentials: Client and user credentials sent to the exchange
            cache: Credential cache (default: new empty cache)
            partner: Partner name for log context
        """
        self._exchange = exchange
        self._credentials = credentials
        self._cache = cache if cache is not None else CredentialCache()
        self._lock = asyncio.Lock()
        self.partner = partner
        super().__init__()

    @property
    def cache(self) -> CredentialCache:
        return self._cache

    @property
    def is_refreshing(self) -> bool:
        """True while some caller holds the refresh lock."""
        return self._lock.locked()

    async def ensure_valid(self) -> Credential:
        """
        Return a valid credential, exchanging for a new one if needed.

        Raises:
            AuthExchangeError: If the exchange fails; the cache stays invalid
        """
        credential = self._cache.read()
        if credential.is_valid(self._cache.now()):
            return credential

        async with self._lock:
            credential = self._cache.read()
            if credential.is_valid(self._cache.now()):
                self._log(logging.DEBUG, "Credential refreshed by concurrent caller")
                return credential

            return await self._refresh()

    async def _refresh(self) -> Credential:
        self._log(logging.DEBUG, "Exchanging credentials for new token")

        try:
            result = await self._exchange.exchange(
                self._credentials.client_id,
                self._credentials.client_secret,
                self._credentials.username,
                self._credentials.password,
            )
            credential = credential_from_exchange(
                result, now=self._cache.now(), partner=self.partner
            )
            if not credential.is_valid(self._cache.now()):
                raise AuthExchangeError(
                    "Credential exchange returned an already expired token",
                    partner=self.partner,
                )
        except AuthExchangeError as e:
            self._log_exception(e, "Credential exchange failed", level=logging.WARNING)
            raise
        except Exception as e:
            self._log_exception(e, "Credential exchange failed", level=logging.WARNING)
            raise AuthExchangeError(
                f"Credential exchange failed: {e}", partner=self.partner, cause=e
            ) from e

        self._cache.store(credential)
        self._log(
            logging.INFO,
            "Credential refreshed",
            expires_at=credential.expires_at.isoformat(),
        )
        return credential


__all__ = ["RefreshCoordinator"]
