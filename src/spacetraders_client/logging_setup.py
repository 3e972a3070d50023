# src/spacetraders_client/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Fires twice a second from the "poll-driver" thread; console shows it only on trouble.
_QUIET_ON_CONSOLE = ("spacetraders_client.tasks.poll_driver", "spacetraders_client.tasks.task_queue")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console prompt readable while refreshes fire in the background.

    Queue and driver records reach the console at WARNING+ only (a failed
    deferred action still shows up); the file handler keeps everything.
    Anything outside the package needs ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith(_QUIET_ON_CONSOLE):
            return record.levelno >= logging.WARNING
        if name.startswith("spacetraders_client."):
            return True

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/spacetraders",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send logs to stderr (filtered) and to <log_dir>/spacetraders.log (full).

    The record format carries the thread name so lines from the console
    (MainThread) and the poll driver thread can be told apart. Replaces any
    handlers already on the root logger. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "spacetraders.log"

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)-7s [%(threadName)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    logfile = logging.FileHandler(str(log_file), encoding="utf-8")
    logfile.setLevel(file_level)
    logfile.setFormatter(fmt)
    root.addHandler(logfile)

    # warnings.warn(...) ends up in the log file as 'py.warnings'.
    logging.captureWarnings(True)

    return log_file
