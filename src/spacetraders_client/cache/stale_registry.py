# src/spacetraders_client/cache/stale_registry.py

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from ..core.ports import QueryKey

logger = logging.getLogger(__name__)

StaleListener = Callable[[tuple], None]


@dataclass(slots=True)
class StaleEntry:
    query_key: tuple
    invalidated_at: float
    count: int


class StaleRegistry:
    """
    In-memory CacheInvalidator.

    Records which cached views were marked stale (and when). Views subscribe to
    be told about invalidations so they can refetch; mark_fresh() is called
    once a refetch lands.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[tuple, StaleEntry] = {}
        self._listeners: list[StaleListener] = []

    def invalidate(self, query_key: QueryKey) -> None:
        key = tuple(query_key)
        now_ts = time.time()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._entries[key] = StaleEntry(query_key=key, invalidated_at=now_ts, count=1)
            else:
                entry.invalidated_at = now_ts
                entry.count += 1
            listeners = list(self._listeners)

        logger.info("Invalidated %s", key)

        for listener in listeners:
            try:
                listener(key)
            except Exception:
                logger.exception("Stale listener failed key=%s", key)

    def subscribe(self, listener: StaleListener) -> Callable[[], None]:
        """Register listener; returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def is_stale(self, query_key: QueryKey) -> bool:
        with self._lock:
            return tuple(query_key) in self._entries

    def mark_fresh(self, query_key: QueryKey) -> bool:
        with self._lock:
            return self._entries.pop(tuple(query_key), None) is not None

    def stale_keys(self) -> list[StaleEntry]:
        """Stale entries, most recently invalidated first."""
        with self._lock:
            entries = [replace(e) for e in self._entries.values()]
        entries.sort(key=lambda e: e.invalidated_at, reverse=True)
        return entries
