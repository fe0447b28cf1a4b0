#!/usr/bin/env python3
# CUI // SP-CTI
"""cloudhouse Resilience — Correlation IDs for concurrent batches.

Every fan-out batch carries one correlation ID. Worker threads do not
inherit thread-local state, so the ID is re-bound inside each unit of
work before it runs.

Usage:
    from cloudhouse.resilience.correlation import CorrelationLogFilter

    handler = logging.StreamHandler()
    handler.addFilter(CorrelationLogFilter())
"""

import functools
import logging
import threading
import uuid
from typing import Callable, Optional

_thread_local = threading.local()


def generate_correlation_id() -> str:
    """Generate a 12-character correlation ID (UUID prefix)."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the correlation ID bound to the current thread, or None."""
    return getattr(_thread_local, "correlation_id", None)


def set_correlation_id(correlation_id: Optional[str]):
    """Bind a correlation ID to the current thread."""
    _thread_local.correlation_id = correlation_id


def clear_correlation_id():
    """Clear the thread-local correlation ID."""
    _thread_local.correlation_id = None


def bind_correlation(func: Callable, correlation_id: Optional[str]) -> Callable:
    """Wrap ``func`` so it runs with ``correlation_id`` bound in its thread.

    The previous binding of the executing thread is restored afterwards,
    so pooled threads never leak one batch's ID into the next.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        previous = get_correlation_id()
        set_correlation_id(correlation_id)
        try:
            return func(*args, **kwargs)
        finally:
            set_correlation_id(previous)

    return wrapper


class CorrelationLogFilter(logging.Filter):
    """Logging filter that injects correlation_id into log records.

    Usage:
        handler = logging.StreamHandler()
        handler.addFilter(CorrelationLogFilter())
        formatter = logging.Formatter(
            "%(asctime)s [%(correlation_id)s] %(name)s: %(message)s"
        )
        handler.setFormatter(formatter)
    """

    def filter(self, record):
        record.correlation_id = get_correlation_id() or "-"
        return True
