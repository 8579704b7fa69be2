"""
Cache for audio conversions.

Provides a bounded in-memory LRU of completed results plus a
single-flight registry: concurrent requests for the same key wait on one
shared computation instead of starting their own.
"""

import logging
import os
import threading
from collections import OrderedDict
from concurrent import futures
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Optional

from .cancellation import CancellationToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioFingerprint:
    """Identity of an input file: name, byte size and modification time."""

    name: str
    size: int
    modified: float

    @classmethod
    def from_path(cls, path: str) -> "AudioFingerprint":
        stat = os.stat(path)
        return cls(name=Path(path).name, size=stat.st_size, modified=stat.st_mtime)

    def __str__(self) -> str:
        return f"{self.name}-{self.size}-{self.modified}"


class ConversionCache:
    """
    Thread-safe LRU cache with single-flight computation.

    Features:
    - LRU (Least Recently Used) eviction at ``max_size`` entries
    - One in-flight computation per key; other callers share its Future
    - Results rejected by ``should_store`` are not kept, and waiters that
      received one compute again
    - Exceptions reach every waiter and are never cached
    - A waiter whose token is cancelled stops waiting; the shared run goes on
    """

    def __init__(
        self,
        max_size: int = 128,
        should_store: Optional[Callable[[Any], bool]] = None,
        poll_interval: float = 0.05,
    ):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of completed results kept
            should_store: Predicate deciding whether a result may be cached
            poll_interval: Seconds between cancellation checks while waiting
        """
        self.max_size = max_size
        self.should_store = should_store or (lambda value: True)
        self.poll_interval = poll_interval
        self._cache: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._in_flight: Dict[Hashable, futures.Future] = {}
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._misses = 0
        self._shared = 0
        self._evictions = 0

    def get(self, key: Hashable) -> Optional[Any]:
        """Get a completed result, or None."""
        with self._lock:
            if key not in self._cache:
                return None
            self._cache.move_to_end(key)
            return self._cache[key]

    def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], Any],
        token: Optional[CancellationToken] = None,
    ) -> Any:
        """
        Return the cached result for ``key``, computing it at most once.

        Args:
            key: Cache key (typically an AudioFingerprint)
            compute: Zero-argument function producing the result
            token: Caller's cancellation token, checked while waiting on
                another caller's in-flight computation

        Returns:
            The cached, shared or freshly computed result

        Raises:
            ConversionCancelledError: If ``token`` is cancelled while waiting.
                The shared computation keeps running for its other callers.
        """
        while True:
            with self._lock:
                if key in self._cache:
                    self._cache.move_to_end(key)
                    self._hits += 1
                    logger.debug("Cache hit: %s", key)
                    return self._cache[key]

                future = self._in_flight.get(key)
                if future is None:
                    future = futures.Future()
                    self._in_flight[key] = future
                    self._misses += 1
                    break
                self._shared += 1
                logger.debug("Joining in-flight conversion: %s", key)

            value = self._wait(future, token)
            if self.should_store(value):
                return value
            # The shared run produced a result that must not be reused
            # (e.g. its owner cancelled); start over with our own run.

        try:
            value = compute()
        except BaseException as e:
            with self._lock:
                self._in_flight.pop(key, None)
            future.set_exception(e)
            raise

        with self._lock:
            self._in_flight.pop(key, None)
            if self.should_store(value):
                self._store(key, value)
            else:
                logger.debug("Not caching result for %s", key)
        future.set_result(value)
        return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store a result directly."""
        with self._lock:
            self._store(key, value)

    def delete(self, key: Hashable) -> bool:
        """Remove a completed result. Returns True if it was present."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    def clear(self) -> None:
        """Drop all completed results. In-flight work is unaffected."""
        with self._lock:
            self._cache.clear()

    def in_flight(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._in_flight

    def stats(self) -> Dict[str, int]:
        """Cache statistics for diagnostics."""
        with self._lock:
            return {
                "size": len(self._cache),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "shared": self._shared,
                "evictions": self._evictions,
                "in_flight": len(self._in_flight),
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    def _wait(self, future: futures.Future, token: Optional[CancellationToken]) -> Any:
        if token is None:
            return future.result()
        while True:
            token.raise_if_cancelled("waiting")
            try:
                return future.result(timeout=self.poll_interval)
            except futures.TimeoutError:
                continue

    def _store(self, key: Hashable, value: Any) -> None:
        if key in self._cache:
            del self._cache[key]

        # Evict oldest if at capacity
        while len(self._cache) >= self.max_size:
            oldest_key, _ = self._cache.popitem(last=False)
            self._evictions += 1
            logger.debug("Evicted: %s", oldest_key)

        self._cache[key] = value
