"""Per-run instruction trace files.

The builders write their trace to whatever logger is passed as
``debug_logger``.  This module owns the file side: a dedicated handler type
so trace handlers can be told apart from anything else attached to the same
logger, and a context manager that :func:`moondec.decompile` uses when it is
given a ``trace_path``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

__all__ = [
    "TRACE_LOGGER_NAME",
    "TRACE_FORMAT",
    "TraceFileHandler",
    "open_trace_logger",
    "detach_trace_handlers",
    "trace_to_file",
]

TRACE_LOGGER_NAME = "moondec.trace"
TRACE_FORMAT = "%(message)s"

PathLike = Union[str, Path]


class TraceFileHandler(logging.FileHandler):
    """File handler that truncates on open so each run gets a fresh trace."""

    def __init__(self, path: PathLike) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(target, mode="w", encoding="utf-8")
        self.setFormatter(logging.Formatter(TRACE_FORMAT))


def detach_trace_handlers(logger: logging.Logger) -> int:
    """Remove and close every :class:`TraceFileHandler` on *logger*."""

    removed = 0
    for handler in list(logger.handlers):
        if isinstance(handler, TraceFileHandler):
            logger.removeHandler(handler)
            handler.close()
            removed += 1
    return removed


def open_trace_logger(
    path: PathLike,
    name: str = TRACE_LOGGER_NAME,
    *,
    level: int = logging.DEBUG,
) -> logging.Logger:
    """Return the trace logger *name* writing only to *path*.

    Trace handlers from an earlier run on the same logger are detached first.
    The logger does not propagate, so traces never reach the root handlers.
    """

    logger = logging.getLogger(name)
    detach_trace_handlers(logger)
    logger.setLevel(level)
    logger.propagate = False
    logger.addHandler(TraceFileHandler(path))
    return logger


@contextmanager
def trace_to_file(
    path: PathLike,
    name: str = TRACE_LOGGER_NAME,
    *,
    level: Optional[int] = None,
) -> Iterator[logging.Logger]:
    """Yield a trace logger for *path* and detach its handler afterwards."""

    logger = open_trace_logger(path, name, level=logging.DEBUG if level is None else level)
    try:
        yield logger
    finally:
        detach_trace_handlers(logger)
