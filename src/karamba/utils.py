from __future__ import annotations

import logging
import os
import sys
import threading
from contextlib import contextmanager
from typing import Iterator

DEBUG_PY_TRACE_ENV = "KARAMBA_DEBUG_PY_TRACE"
LOG_LEVEL_ENV = "KARAMBA_LOG_LEVEL"

def debug_py_trace_enabled() -> bool:
    """Check whether absorbed runtime errors should show their Python traceback."""
    return bool(os.environ.get(DEBUG_PY_TRACE_ENV))

def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        os.environ.pop(DEBUG_PY_TRACE_ENV, None)

def resolve_log_level(explicit: str | None = None) -> int:
    """Level from the CLI flag, else KARAMBA_LOG_LEVEL, else WARNING."""
    raw = explicit or os.environ.get(LOG_LEVEL_ENV) or "WARNING"
    level = logging.getLevelName(raw.strip().upper())

    if isinstance(level, int):
        return level

    return logging.WARNING

def configure_logging(explicit: str | None = None) -> None:
    logging.basicConfig(
        level=resolve_log_level(explicit),
        format="%(levelname)s %(name)s: %(message)s",
    )

# Each Karamba call costs about a dozen Python frames.
RECURSION_LIMIT = 20_000
THREAD_STACK_SIZE = 256 * 1024 * 1024

@contextmanager
def deep_recursion(limit: int = RECURSION_LIMIT) -> Iterator[None]:
    """Raise the interpreter recursion limit for the duration of a walk."""
    previous = sys.getrecursionlimit()
    if previous < limit:
        sys.setrecursionlimit(limit)

    try:
        yield
    finally:
        sys.setrecursionlimit(previous)

@contextmanager
def large_thread_stack(size: int = THREAD_STACK_SIZE) -> Iterator[None]:
    """Threads started inside the block get `size` bytes of stack."""
    try:
        previous = threading.stack_size(size)
    except (ValueError, RuntimeError):  # platform refuses custom stack sizes
        yield
        return

    try:
        yield
    finally:
        threading.stack_size(previous)
