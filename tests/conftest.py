# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from spacetraders_client.cache.stale_registry import StaleRegistry
from spacetraders_client.core.state import AppState
from spacetraders_client.tasks.task_queue import TaskQueue

from .fakes import FakeClock, FakeInvalidator


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="spacetraders-test",
        log_level="DEBUG",
        console_enabled=False,
        poll_interval_seconds=0.01,
        data_dir=tmp_path / "data",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def queue(clock: FakeClock) -> TaskQueue:
    return TaskQueue(clock=clock)


@pytest.fixture()
def invalidator() -> FakeInvalidator:
    return FakeInvalidator()


@pytest.fixture()
def state(settings: SimpleNamespace, queue: TaskQueue) -> AppState:
    """AppState wired with a fake-clock queue and a real StaleRegistry."""
    return AppState(settings=settings, queue=queue, cache=StaleRegistry())
