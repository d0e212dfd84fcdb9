from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from typing import TextIO

# Statement trace of counter jobs; see services/executor.py
TRACE_LOGGER = "countercache.services.executor"


def _rotating_file(log_dir: str, name: str, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_dir, name),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def configure_trace_logging(*, log_dir: str, stream: TextIO | None = None) -> None:
    """Send the statement trace to the operator as plain lines.

    The trace reads like migration output (``-- title`` / ``   -> detail``),
    so it skips the timestamped root format on the console.
    """

    trace = logging.getLogger(TRACE_LOGGER)
    if trace.handlers:
        return

    console = logging.StreamHandler(stream or sys.stdout)
    console.setFormatter(logging.Formatter("%(message)s"))
    trace.addHandler(console)
    trace.addHandler(
        _rotating_file(log_dir, "counters.log", logging.Formatter("%(asctime)s | %(message)s", "%Y-%m-%d %H:%M:%S"))
    )
    trace.propagate = False


def configure_logging(*, log_dir: str, level: str = "INFO") -> None:
    os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    configure_trace_logging(log_dir=log_dir)

    if root.handlers:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setFormatter(formatter)

    root.addHandler(console)
    root.addHandler(_rotating_file(log_dir, "countercache.log", formatter))
