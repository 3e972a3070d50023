# src/spacetraders_client/tasks/poll_driver.py

from __future__ import annotations

"""
Poll driver.

A fixed-cadence loop that asks the TaskQueue to drain due tasks. The cadence is
static (not derived from the soonest due time), so the worst-case delay between
a task becoming due and its action firing is one interval.

Unlike a fire-and-forget timer, the driver keeps a handle to its loop task and
can be stopped explicitly or by leaving an `async with` block.
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass
from enum import StrEnum

from .task_queue import TaskQueue

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 0.5
MIN_INTERVAL_SECONDS = 0.01


class DriverState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class PollDriver:
    def __init__(self, queue: TaskQueue, *, interval_seconds: float = DEFAULT_INTERVAL_SECONDS) -> None:
        self.queue = queue
        self.interval_seconds = max(MIN_INTERVAL_SECONDS, float(interval_seconds))
        self.state = DriverState.IDLE
        self._task: asyncio.Task[None] | None = None

    async def run(self) -> None:
        """
        Drain forever, sleeping interval_seconds between passes.

        Runs inside the calling task; stop() (from another task) or cancelling
        that task ends it. A driver runs at most once.
        """
        if self.state != DriverState.IDLE:
            raise RuntimeError(f"Poll driver cannot run from state {self.state.value}")
        self._task = asyncio.current_task()
        await self._loop()

    async def _loop(self) -> None:
        self.state = DriverState.RUNNING
        logger.info("Poll driver started (interval=%.3fs)", self.interval_seconds)
        try:
            while True:
                try:
                    self.queue.drain(self.queue.now())
                except Exception:
                    logger.exception("drain failed")

                await asyncio.sleep(self.interval_seconds)
        finally:
            self.state = DriverState.STOPPED
            logger.info("Poll driver stopped.")

    def start(self) -> asyncio.Task[None]:
        """Run the loop as a task on the current event loop and return its handle."""
        if self.state != DriverState.IDLE:
            raise RuntimeError(f"Poll driver cannot start from state {self.state.value}")
        self._task = asyncio.get_running_loop().create_task(self._loop(), name="poll-driver")
        self.state = DriverState.RUNNING
        return self._task

    async def stop(self) -> None:
        task = self._task
        if task is None:
            self.state = DriverState.STOPPED
            return
        task.cancel()
        if task is asyncio.current_task():
            # Called from inside the loop task itself; the cancel lands at its next await.
            return

        with contextlib.suppress(asyncio.CancelledError):
            await task
        self._task = None
        # Cancelled before its first step, _loop() never reached its finally block.
        self.state = DriverState.STOPPED

    async def __aenter__(self) -> PollDriver:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


@dataclass
class PollDriverRunner:
    """Handle for a PollDriver running on its own event loop in a background thread."""

    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event
    driver: PollDriver

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            # Loop already closed: the driver thread has exited.
            logger.debug("Poll driver loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_poll_driver_in_background(
    queue: TaskQueue,
    *,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
) -> PollDriverRunner:
    """
    Start a PollDriver in a daemon thread (so a blocking console REPL can run beside it).

    The returned runner must be stopped and joined on shutdown.
    """
    driver = PollDriver(queue, interval_seconds=interval_seconds)
    ready = threading.Event()
    holder: dict[str, object] = {}

    async def _serve(stop_event: asyncio.Event) -> None:
        async with driver:
            await stop_event.wait()

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_serve(stop_event))
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="poll-driver", daemon=True)
    t.start()

    if not ready.wait(timeout=5.0):
        raise RuntimeError("Poll driver thread did not initialize in time")

    loop = holder["loop"]
    stop_event = holder["stop_event"]
    assert isinstance(loop, asyncio.AbstractEventLoop)
    assert isinstance(stop_event, asyncio.Event)

    logger.info("Poll driver background thread started.")
    return PollDriverRunner(thread=t, loop=loop, stop_event=stop_event, driver=driver)
