"""Memo of the last detection result per detector.

Each detector owns one ``ResultCache`` instance and hands it to its
``DetectionEngine``. Entries are keyed by request shape (detector identity,
explicit search paths, ``multiple``), so a cached answer is only ever
returned for an identical request.

Write ordering:
    A detection reserves a ticket from ``reserve()`` when it starts and
    passes it to ``put()`` when it completes. ``put()`` refuses a write if
    the key was invalidated after the ticket was issued, or if a detection
    that started later has already written. The cache therefore keeps the
    result of the most recently *started* detection, and an in-flight
    detection cannot resurrect data cleared by ``invalidate()``.

Size:
    Every distinct request shape gets its own entry. At most
    ``max_entries`` are kept; storing a new key beyond that evicts the
    least recently written one.

Access is guarded by a lock because results may be written from different
event loops or from watch sessions running in other threads.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Hashable
from dataclasses import dataclass

from androidlib.discovery.models import DetectionResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 64


@dataclass(frozen=True)
class CacheEntry:
    """A stored detection outcome.

    Attributes:
        value: The descriptor, list of descriptors, or None ("no match").
        generation: The key's invalidation generation when written.
        ticket: Start-order ticket of the detection that wrote it.
    """

    value: DetectionResult
    generation: int
    ticket: int


class ResultCache:
    """Thread-safe store of detection results with explicit invalidation."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._tickets = itertools.count(1)
        self._entries: dict[Hashable, CacheEntry] = {}
        self._floors: dict[Hashable, int] = {}
        self._generations: dict[Hashable, int] = {}
        self._global_floor = 0
        self._global_generation = 0

    def reserve(self) -> int:
        """Issue a start-order ticket for a detection about to run."""
        with self._lock:
            return next(self._tickets)

    def get(self, key: Hashable) -> CacheEntry | None:
        """Return the entry for ``key``, or None on a miss."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: Hashable, value: DetectionResult, ticket: int) -> bool:
        """Store ``value`` unless a newer write or an invalidation supersedes it.

        Args:
            key: Cache key for the request.
            value: Detection outcome, including None.
            ticket: Ticket from ``reserve()`` taken when detection started.

        Returns:
            True if the value was stored.
        """
        with self._lock:
            floor = max(self._floors.get(key, 0), self._global_floor)
            if ticket <= floor:
                logger.debug("Discarding stale result for %s (ticket %d)", key, ticket)
                return False
            current = self._entries.get(key)
            if current is not None and current.ticket > ticket:
                logger.debug("Keeping newer result for %s (ticket %d)", key, current.ticket)
                return False
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Evicting cached result for %s", oldest)
            self._entries[key] = CacheEntry(value, self._generation(key), ticket)
            return True

    def invalidate(self, key: Hashable | None = None) -> None:
        """Drop one entry, or every entry when ``key`` is None.

        Safe to call at any time; detections already in flight will not
        write their results back.
        """
        with self._lock:
            mark = next(self._tickets)
            if key is None:
                self._entries.clear()
                self._floors.clear()
                self._global_floor = mark
                self._global_generation += 1
            else:
                self._entries.pop(key, None)
                self._floors[key] = mark
                self._generations[key] = self._generations.get(key, 0) + 1

    def generation(self, key: Hashable) -> int:
        """Return how many times ``key`` has been invalidated."""
        with self._lock:
            return self._generation(key)

    def _generation(self, key: Hashable) -> int:
        return self._global_generation + self._generations.get(key, 0)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
