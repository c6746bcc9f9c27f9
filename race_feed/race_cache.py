"""Process-wide TTL cache for parsed race listings.

Entries are keyed by source (a URL or file path). Readers get their own
list so a refresh never shows up half-written in another caller's hands.
A background thread evicts stale entries until stop() is called; the stop
signal is observed at the next interval boundary.
"""

from __future__ import annotations

import logging
import threading
import time

from race_feed.config import CACHE_EVICTION_INTERVAL_SECONDS, CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


class RaceCache:
    """Lock-protected cache of race lists with TTL staleness."""

    def __init__(self, ttl: float = CACHE_TTL_SECONDS, clock=time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, list]] = {}
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _is_fresh(self, fetched_at: float) -> bool:
        return self._clock() - fetched_at < self.ttl

    def get(self, source: str, loader) -> list:
        """Return cached races for source, calling loader() when stale or missing.

        Loader errors propagate and leave the cache untouched.
        """
        with self._lock:
            entry = self._entries.get(source)
            if entry and self._is_fresh(entry[0]):
                logger.info(f"Returning cached races for {source}")
                return list(entry[1])

        logger.info(f"Cache miss or expired for {source}, loading")
        races = list(loader())

        with self._lock:
            self._entries[source] = (self._clock(), races)
        return list(races)

    def evict_expired(self) -> int:
        """Remove entries older than the TTL. Returns the number removed."""
        with self._lock:
            stale = [key for key, (fetched_at, _) in self._entries.items() if not self._is_fresh(fetched_at)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.info(f"Evicted {len(stale)} expired cache entries")
        return len(stale)

    def __contains__(self, source: str) -> bool:
        with self._lock:
            return source in self._entries

    def start_eviction(self, interval: float = CACHE_EVICTION_INTERVAL_SECONDS) -> None:
        """Start the background eviction loop if it is not already running."""
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._eviction_loop, args=(interval,), name="race-cache-eviction", daemon=True
        )
        self._thread.start()

    def _eviction_loop(self, interval: float) -> None:
        while not self._stop.wait(interval):
            self.evict_expired()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the eviction loop to exit and wait for it."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
