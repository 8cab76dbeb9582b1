"""Time-based shrine cache with serialized refreshes."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import threading
import time
from typing import Any, Callable

from .pipeline import ShrinePipeline, ShrineSnapshot
from .sources import ShrineServiceError

logger = logging.getLogger(__name__)

FALLBACK_PAYLOAD: dict[str, Any] = {
    "source": "fallback",
    "lastUpdated": None,
    "perks": [],
}


def fallback_payload(error: str = "Upstream fetch failed") -> dict[str, Any]:
    """Minimal valid document served when no snapshot has ever been fetched."""

    return {**FALLBACK_PAYLOAD, "perks": [], "error": error}


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    snapshot: ShrineSnapshot
    fetched_at: float


@dataclass(frozen=True, slots=True)
class ShrineRead:
    """Outcome of a read applying the degraded-response policy."""

    snapshot: ShrineSnapshot | None
    error: ShrineServiceError | None = None

    @property
    def stale(self) -> bool:
        """Whether a previous snapshot is served because the refresh failed."""

        return self.snapshot is not None and self.error is not None


class ShrineCache:
    """Owns the current snapshot and decides when to refresh it.

    The snapshot reference is swapped as a whole after each successful refresh so
    readers never see a partial update. Refreshes are serialized by a lock.
    """

    def __init__(
        self,
        pipeline: ShrinePipeline,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._pipeline = pipeline
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: _CacheEntry | None = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def snapshot(self) -> ShrineSnapshot | None:
        entry = self._entry
        return entry.snapshot if entry else None

    @property
    def is_warm(self) -> bool:
        return self._entry is not None

    @property
    def refreshing(self) -> bool:
        """Whether a refresh currently holds the lock."""

        return self._lock.locked()

    def age_ms(self) -> int | None:
        """Milliseconds since the current snapshot was fetched, if any."""

        entry = self._entry
        if entry is None:
            return None
        return int((self._clock() - entry.fetched_at) * 1000)

    def _is_fresh(self, entry: _CacheEntry | None) -> bool:
        return entry is not None and self._clock() - entry.fetched_at < self._ttl

    def get(self, force: bool = False) -> ShrineSnapshot:
        """Return a snapshot, refreshing it when expired or when ``force`` is set.

        Failures propagate and leave the previous snapshot in place.
        """

        observed = self._entry
        if not force and self._is_fresh(observed):
            return observed.snapshot

        with self._lock:
            current = self._entry
            # Another caller refreshed while this one waited for the lock.
            if current is not observed and self._is_fresh(current):
                return current.snapshot

            logger.info(
                "Weekly refresh: fetching Shrine data..." if force else "Fetching fresh Shrine data..."
            )
            started = self._clock()
            snapshot = self._pipeline.run(
                fetched_at=datetime.fromtimestamp(started, tz=timezone.utc)
            )
            self._entry = _CacheEntry(snapshot=snapshot, fetched_at=started)
            return snapshot

    def read(self) -> ShrineRead:
        """Return the snapshot for an external caller without raising on upstream failures."""

        try:
            return ShrineRead(snapshot=self.get())
        except ShrineServiceError as exc:
            logger.error("Shrine refresh failed: %s", exc)
            return ShrineRead(snapshot=self.snapshot, error=exc)


class ShrineRefresher:
    """Background thread that warms the cache and refreshes it every TTL."""

    def __init__(
        self,
        cache: ShrineCache,
        *,
        interval: float | None = None,
        warm_on_start: bool = True,
        repeat: bool = True,
    ) -> None:
        self._cache = cache
        self._interval = interval if interval is not None else cache.ttl_seconds
        self._warm_on_start = warm_on_start
        self._repeat = repeat
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Launch the refresher thread if it is not already running."""

        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="shrine-refresher", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the thread to exit and wait for it."""

        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def join(self, timeout: float | None = None) -> None:
        """Wait for the refresher thread to finish its current work and exit."""

        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def refresh_once(self, reason: str = "Weekly refresh") -> bool:
        """Force a refresh, logging instead of raising on failure."""

        try:
            self._cache.get(force=True)
        except Exception:
            logger.exception("%s failed", reason)
            return False
        return True

    def _run(self) -> None:
        if self._warm_on_start:
            self.refresh_once("Initial fetch")
        if not self._repeat:
            return
        while not self._stop.wait(self._interval):
            self.refresh_once()
