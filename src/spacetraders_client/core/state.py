# src/spacetraders_client/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..cache.stale_registry import StaleRegistry
from ..tasks.task_queue import TaskQueue

if TYPE_CHECKING:
    from ..tasks.poll_driver import PollDriverRunner


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    queue: TaskQueue
    cache: StaleRegistry

    # Set by main once the background driver is up.
    driver_runner: PollDriverRunner | None = None
