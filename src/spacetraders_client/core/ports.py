# src/spacetraders_client/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduler and its producers.

The scheduler depends on Protocols instead of concrete implementations.
This keeps the cache layer swappable and makes testing easier.
"""

from typing import Hashable, Protocol, Sequence

QueryKey = Sequence[Hashable]
# Cache key of a fetched view, e.g. ("get-my-ships",) or ("get-ship-nav", "SHIP-1").


class DeferredAction(Protocol):
    """Zero-argument side effect run by the task queue once its task is due."""
    def run(self) -> None: ...


class CacheInvalidator(Protocol):
    """
    Cache-side port: mark a previously fetched view as stale.

    The next read of that view is expected to refetch it.
    """

    def invalidate(self, query_key: QueryKey) -> None: ...
