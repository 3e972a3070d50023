# src/spacetraders_client/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the task queue and cache sink into AppState.
"""

from __future__ import annotations

import logging

from ..cache.stale_registry import StaleRegistry
from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_queue import TaskQueue

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = AppState(
        settings=settings,
        queue=TaskQueue(),
        cache=StaleRegistry(),
    )
    logger.debug("AppState created (data_dir=%s)", settings.data_dir)
    return state
