#!/usr/bin/env python3
# CUI // SP-CTI
"""cloudhouse Resilience — Gather-all concurrent fan-out.

Runs one unit of work per item on a bounded ThreadPoolExecutor, waits for
every unit, and returns one FanOutResult per item in input order. A failing
unit never cancels its siblings; errors are collected, not raised.

Usage:
    from cloudhouse.resilience.fanout import fan_out, aggregate_errors

    results = fan_out(node_ids, client.delete, max_workers=8)
    err = aggregate_errors(results)   # None when every item succeeded
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from cloudhouse.resilience.correlation import (
    bind_correlation,
    generate_correlation_id,
    get_correlation_id,
)
from cloudhouse.resilience.errors import AggregateError, OperationCancelledError

logger = logging.getLogger("cloudhouse.resilience.fanout")

DEFAULT_MAX_WORKERS = 16


@dataclass
class FanOutResult:
    """Outcome of one item: exactly one of ``value`` / ``error`` is meaningful."""
    item: Any
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fan_out(
    items: Iterable[Any],
    op: Callable[[Any], Any],
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS,
    cancel_event: Optional[threading.Event] = None,
    description: str = "",
) -> List[FanOutResult]:
    """Apply ``op`` to every item concurrently and gather all outcomes.

    Args:
        items: Items to process; each gets its own unit of work.
        op: Callable applied to one item. Its return value becomes
            ``FanOutResult.value``; any exception becomes ``FanOutResult.error``.
        max_workers: Upper bound on concurrent units. None means one thread
            per item.
        cancel_event: Optional threading.Event. Units that have not started
            when it is set report OperationCancelledError instead of running.
        description: Label for log lines.

    Returns:
        List of FanOutResult where slot ``i`` belongs to input item ``i``.
    """
    items = list(items)
    if not items:
        return []

    results: List[Optional[FanOutResult]] = [None] * len(items)
    label = description or getattr(op, "__name__", "operation")
    correlation_id = get_correlation_id() or generate_correlation_id()

    def _unit(item):
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelledError(f"{label} cancelled before start")
        return op(item)

    runner = bind_correlation(_unit, correlation_id)
    workers = len(items) if not max_workers else min(max_workers, len(items))

    logger.debug("Fan-out %s over %d item(s) with %d worker(s)", label, len(items), workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cloudhouse-fanout") as executor:
        futures = {}
        for index, item in enumerate(items):
            if cancel_event is not None and cancel_event.is_set():
                results[index] = FanOutResult(
                    item=item,
                    error=OperationCancelledError(f"{label} cancelled before start"),
                )
                continue
            futures[executor.submit(runner, item)] = index

        for future in as_completed(futures):
            index = futures[future]
            item = items[index]
            try:
                results[index] = FanOutResult(item=item, value=future.result())
            except Exception as exc:
                logger.error("%s failed for %s: %s", label, item, exc)
                results[index] = FanOutResult(item=item, error=exc)

    return results


def aggregate_errors(results: Iterable[FanOutResult]) -> Optional[AggregateError]:
    """Collect every per-item error into one AggregateError, or None."""
    return AggregateError.from_errors(r.error for r in results if r.error is not None)
