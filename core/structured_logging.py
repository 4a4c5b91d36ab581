"""Structured logging helpers with run correlation context.

Compiler plugins own stdout for the response stream, so every handler
installed here writes to stderr.
"""

from __future__ import annotations

import contextvars
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from typing import Iterator, TextIO

logger = logging.getLogger(__name__)

_RUN_ID_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "run_id", default="-"
)
_PHASE_VAR: contextvars.ContextVar[str] = contextvars.ContextVar(
    "phase", default="-"
)

LOG_FORMAT = "%(levelname)s | run_id=%(run_id)s | phase=%(phase)s | %(name)s | %(message)s"


class _RunContextFilter(logging.Filter):
    """Attach run and phase correlation fields to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _RUN_ID_VAR.get("-")
        record.phase = _PHASE_VAR.get("-")
        return True


def configure_structured_logging(
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install a single stderr handler on the root logger.

    Calling this twice replaces the handler installed by the first call
    instead of stacking a second one.

    Args:
        level: Root logger level.
        stream: Target stream, defaults to ``sys.stderr``.

    Returns:
        The installed handler.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_protomodel_handler", False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_RunContextFilter())
    handler._protomodel_handler = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return handler


def set_run_id(run_id: str | None = None) -> str:
    """Set or generate run correlation ID."""
    value = run_id or uuid.uuid4().hex[:12]
    _RUN_ID_VAR.set(value)
    return value


def get_run_id() -> str:
    """Get current run correlation ID."""
    return _RUN_ID_VAR.get("-")


def get_phase() -> str:
    """Get the phase attached to records emitted right now."""
    return _PHASE_VAR.get("-")


@contextmanager
def phase_scope(phase: str) -> Iterator[None]:
    """Tag records with ``phase`` and log the phase duration on exit."""
    token = _PHASE_VAR.set(phase)
    started = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("Phase %s finished in %.3fs", phase, time.perf_counter() - started)
        _PHASE_VAR.reset(token)
