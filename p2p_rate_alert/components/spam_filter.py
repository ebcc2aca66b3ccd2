"""
Spam filter for advertiser notifications.

Keeps the time each advertiser was last notified about and suppresses
repeat notifications inside the spam window. Expired entries are evicted
by a background task on a fixed cadence rather than on lookup.
"""

import asyncio
import threading
import time
from typing import Callable, Dict, Optional

from ..utils.logging import get_logger

logger = get_logger("spam.filter")

SPAM_WINDOW_SECONDS = 5 * 60 * 60
EVICTION_INTERVAL_SECONDS = 60.0


class SpamFilterStore:
    """Thread-safe map of advertiser nickname to last-notified epoch seconds."""

    def __init__(
        self,
        window_seconds: float = SPAM_WINDOW_SECONDS,
        eviction_interval: float = EVICTION_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.window_seconds = window_seconds
        self.eviction_interval = eviction_interval
        self._clock = clock
        self._entries: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _is_expired(self, timestamp: float, now: float) -> bool:
        return timestamp < now - self.window_seconds

    def record(self, identity: str, now: Optional[float] = None) -> None:
        """Mark ``identity`` as notified at ``now`` (default: current time)."""
        timestamp = self._clock() if now is None else now
        with self._lock:
            self._entries[identity] = timestamp

    def is_suppressed(self, identity: str, now: Optional[float] = None) -> bool:
        """True if an unexpired entry exists for ``identity``."""
        now = self._clock() if now is None else now
        with self._lock:
            timestamp = self._entries.get(identity)

        return timestamp is not None and not self._is_expired(timestamp, now)

    def evict_expired(self, now: Optional[float] = None) -> int:
        """
        Remove every entry older than the spam window.

        Returns:
            Number of evicted entries.
        """
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                identity
                for identity, timestamp in self._entries.items()
                if self._is_expired(timestamp, now)
            ]
            for identity in expired:
                del self._entries[identity]

        if expired:
            logger.debug(
                "Evicted expired spam filter entries",
                extra={"evicted": len(expired), "remaining": len(self)},
            )

        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, identity: str) -> bool:
        with self._lock:
            return identity in self._entries

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Evict expired entries every ``eviction_interval`` until shutdown."""
        logger.info(
            "Spam filter eviction started",
            extra={
                "window_seconds": self.window_seconds,
                "interval_seconds": self.eviction_interval,
            },
        )

        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(
                    shutdown_event.wait(), timeout=self.eviction_interval
                )
            except asyncio.TimeoutError:
                self.evict_expired()

        logger.info("Spam filter eviction stopped")
