"""
Credential cache for a single partner.

Holds the current bearer token and its expiry. Every operation is a single
attribute read or swap under a threading.Lock, so callers never block on it
for longer than that swap. Waiting for a refresh happens in RefreshCoordinator.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from partner_client.common.logging import get_logger, log_with_context

logger = get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Credential:
    """Bearer token with its absolute expiry (UTC)."""

    token: str = ""
    expires_at: datetime = _EPOCH

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Valid iff the token is non-empty and has not yet expired."""
        if not self.token:
            return False
        now = now or utc_now()
        return now < self.expires_at

    def __repr__(self) -> str:
        # Never expose the token itself
        state = "set" if self.token else "empty"
        return f"Credential(token=<{state}>, expires_at={self.expires_at.isoformat()})"


EMPTY_CREDENTIAL = Credential()


class CredentialCache:
    """
    Last known credential for one partner.

    A credential rejected by the partner is dropped with invalidate(), which
    leaves a newer credential stored by a concurrent refresh in place.
    clear() drops whatever is cached, e.g. when a pipeline is closed.

    Usage:
        cache = CredentialCache()
        if not cache.is_valid():
            cache.store(Credential(token, expires_at))
        token = cache.read().token
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        """
        Args:
            clock: Returns the current UTC time (injectable for tests)
        """
        self._clock = clock
        self._credential = EMPTY_CREDENTIAL
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return self._clock()

    def is_valid(self) -> bool:
        with self._lock:
            credential = self._credential
        return credential.is_valid(self._clock())

    def read(self) -> Credential:
        """Return the last known credential, which may be invalid."""
        with self._lock:
            return self._credential

    def store(self, credential: Credential) -> None:
        with self._lock:
            self._credential = credential

    def clear(self) -> None:
        with self._lock:
            self._credential = EMPTY_CREDENTIAL
        log_with_context(logger, logging.DEBUG, "Cleared credential cache")

    def invalidate(self, token: str) -> bool:
        """
        Clear the cache only if it still holds ``token``.

        A caller that saw ``token`` rejected must not throw away a newer
        credential another caller already stored.

        Returns:
            True if the cache was cleared
        """
        with self._lock:
            if not token or self._credential.token != token:
                return False
            self._credential = EMPTY_CREDENTIAL
        log_with_context(logger, logging.DEBUG, "Invalidated rejected credential")
        return True


__all__ = ["Credential", "CredentialCache", "EMPTY_CREDENTIAL", "utc_now"]
