"""Replay protection for broadcast envelopes.

Keys are content hashes only; no user or session data is stored. A hash is
claimed before broadcast and released again if the broadcast fails, so a
failed attempt never blocks a corrected resubmission.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ReplayGuard:
    """Bounded, expiring registry of content hashes already broadcast.

    Example:
        if not await guard.claim(tx_hash):
            return rejected(ErrorKind.REPLAY_DETECTED)
        try:
            await broadcast(...)
        except Exception:
            await guard.release(tx_hash)
            raise
    """

    def __init__(
        self,
        ttl_seconds: float = 86400,
        max_entries: int = 100000,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize the guard.

        Args:
            ttl_seconds: How long a claimed hash stays blocked
            max_entries: Oldest hashes are evicted beyond this size
            clock: Time source (monotonic seconds), injectable for tests
        """
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, float]" = OrderedDict()
        self._lock = asyncio.Lock()

    def _prune(self, now: float) -> None:
        while self._entries:
            oldest_hash, expires_at = next(iter(self._entries.items()))
            if expires_at > now and len(self._entries) <= self.max_entries:
                break
            self._entries.pop(oldest_hash)

    async def claim(self, tx_hash: str) -> bool:
        """Atomically mark ``tx_hash`` as in flight.

        Returns:
            False if the hash was already claimed and has not expired
        """
        key = tx_hash.lower()
        async with self._lock:
            now = self._clock()
            self._prune(now)
            if key in self._entries:
                logger.warning("Replay blocked for %s", key)
                return False
            self._entries[key] = now + self.ttl_seconds
            self._prune(now)
            return True

    async def release(self, tx_hash: str) -> None:
        """Forget a hash whose broadcast did not go through."""
        async with self._lock:
            self._entries.pop(tx_hash.lower(), None)

    async def contains(self, tx_hash: str) -> bool:
        async with self._lock:
            self._prune(self._clock())
            return tx_hash.lower() in self._entries

    def clear(self) -> None:
        """Drop all entries (for testing)."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
