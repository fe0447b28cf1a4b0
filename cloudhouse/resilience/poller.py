#!/usr/bin/env python3
# CUI // SP-CTI
"""cloudhouse Resilience — Bounded status polling.

Blocks the calling thread until a predicate reports completion, raises,
or the attempt budget runs out. The delay between attempts is fixed;
there is no backoff.

State machine: RUNNING -> SUCCEEDED | FAILED | EXHAUSTED | CANCELLED.

Usage:
    from cloudhouse.resilience.poller import wait_for

    def lb_active():
        return client.get(lb_id) == "ACTIVE"

    wait_for(lb_active, max_attempts=60, interval=1.0, description="load balancer")

The predicate decides what "done" means. A delete-completion predicate
catches the collaborator's not-found error and returns True; the poller
itself never inspects errors. Any exception raised by the predicate
aborts polling immediately and propagates unchanged.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from cloudhouse.resilience.errors import OperationCancelledError, PollTimeoutError

logger = logging.getLogger("cloudhouse.resilience.poller")

DEFAULT_MAX_ATTEMPTS = 50
DEFAULT_INTERVAL = 5.0


class PollState(Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"         # predicate raised
    EXHAUSTED = "exhausted"   # attempt budget used up
    CANCELLED = "cancelled"   # cancel_event set by the caller


class StatusPoller:
    """One polling run over ``predicate``.

    Args:
        predicate: Zero-argument callable returning True when done.
        max_attempts: Maximum number of predicate evaluations.
        interval: Seconds to wait between evaluations.
        description: Human-readable subject, used in logs and the timeout error.
        cancel_event: Optional threading.Event; when set, polling stops
            before the next attempt with OperationCancelledError.
    """

    def __init__(
        self,
        predicate: Callable[[], bool],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL,
        description: str = "",
        cancel_event: Optional[threading.Event] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._predicate = predicate
        self.max_attempts = max_attempts
        self.interval = interval
        self.description = description
        self._cancel_event = cancel_event
        self.state = PollState.RUNNING
        self.attempts = 0

    def _cancelled(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    def _pause(self):
        if self._cancel_event is not None:
            self._cancel_event.wait(self.interval)
        else:
            time.sleep(self.interval)

    def run(self) -> int:
        """Poll until a terminal state. Returns the number of evaluations."""
        if self.state is not PollState.RUNNING:
            raise RuntimeError(f"poller already finished ({self.state.value})")

        while self.attempts < self.max_attempts:
            if self._cancelled():
                self.state = PollState.CANCELLED
                raise OperationCancelledError(
                    f"polling cancelled after {self.attempts} attempts"
                    + (f" waiting for {self.description}" if self.description else "")
                )
            self.attempts += 1
            try:
                done = self._predicate()
            except Exception:
                self.state = PollState.FAILED
                raise
            if done:
                self.state = PollState.SUCCEEDED
                logger.debug("%s reached after %d attempt(s)",
                             self.description or "condition", self.attempts)
                return self.attempts
            logger.debug("Attempt %d/%d: %s not reached yet",
                         self.attempts, self.max_attempts,
                         self.description or "condition")
            if self.attempts < self.max_attempts:
                self._pause()

        self.state = PollState.EXHAUSTED
        raise PollTimeoutError(self.max_attempts, self.description)


def wait_for(
    predicate: Callable[[], bool],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_INTERVAL,
    description: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> int:
    """Run a StatusPoller to completion. Returns the number of evaluations."""
    poller = StatusPoller(
        predicate,
        max_attempts=max_attempts,
        interval=interval,
        description=description,
        cancel_event=cancel_event,
    )
    return poller.run()
