# CUI // SP-CTI
"""Tests for cloudhouse.resilience.poller."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import threading
from unittest.mock import patch

import pytest

from cloudhouse.resilience.errors import OperationCancelledError, PollTimeoutError
from cloudhouse.resilience.poller import (
    DEFAULT_INTERVAL,
    DEFAULT_MAX_ATTEMPTS,
    PollState,
    StatusPoller,
    wait_for,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _done_on(k):
    """Predicate returning True on its k-th evaluation; counts calls."""
    calls = {"n": 0}

    def predicate():
        calls["n"] += 1
        return calls["n"] >= k

    return predicate, calls


# ---------------------------------------------------------------------------
# Success / exhaustion
# ---------------------------------------------------------------------------
class TestStatusPollerOutcomes:
    """Terminal state transitions of a polling run."""

    def test_defaults(self):
        poller = StatusPoller(lambda: True)
        assert poller.max_attempts == DEFAULT_MAX_ATTEMPTS == 50
        assert poller.interval == DEFAULT_INTERVAL == 5.0
        assert poller.state == PollState.RUNNING

    @pytest.mark.parametrize("k", [1, 2, 5, 10])
    @patch("cloudhouse.resilience.poller.time.sleep")
    def test_success_on_kth_attempt(self, mock_sleep, k):
        predicate, calls = _done_on(k)
        poller = StatusPoller(predicate, max_attempts=10, interval=2.0)
        assert poller.run() == k
        assert calls["n"] == k
        assert poller.state == PollState.SUCCEEDED
        assert mock_sleep.call_count == k - 1
        for call in mock_sleep.call_args_list:
            assert call.args == (2.0,)

    @patch("cloudhouse.resilience.poller.time.sleep")
    def test_exhaustion_raises_timeout(self, mock_sleep):
        calls = {"n": 0}

        def never():
            calls["n"] += 1
            return False

        poller = StatusPoller(never, max_attempts=4, interval=1.0, description="volume v1")
        with pytest.raises(PollTimeoutError) as exc_info:
            poller.run()
        assert exc_info.value.attempts == 4
        assert "Maximum number of retries (4) exceeded" in str(exc_info.value)
        assert "volume v1" in str(exc_info.value)
        assert calls["n"] == 4
        assert poller.state == PollState.EXHAUSTED
        # No pause after the final attempt
        assert mock_sleep.call_count == 3

    @patch("cloudhouse.resilience.poller.time.sleep")
    def test_predicate_error_aborts_immediately(self, mock_sleep):
        calls = {"n": 0}

        def broken():
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("api down")
            return False

        poller = StatusPoller(broken, max_attempts=10, interval=1.0)
        with pytest.raises(RuntimeError, match="api down"):
            poller.run()
        assert calls["n"] == 2
        assert poller.state == PollState.FAILED
        assert mock_sleep.call_count == 1

    @patch("cloudhouse.resilience.poller.time.sleep")
    def test_error_on_first_attempt_no_sleep(self, mock_sleep):
        def broken():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            wait_for(broken, max_attempts=5, interval=1.0)
        mock_sleep.assert_not_called()

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            StatusPoller(lambda: True, max_attempts=0)

    def test_run_twice_rejected(self):
        poller = StatusPoller(lambda: True, max_attempts=1)
        poller.run()
        with pytest.raises(RuntimeError):
            poller.run()


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------
class TestStatusPollerCancellation:
    """A set cancel_event stops polling before the next attempt."""

    def test_cancelled_before_first_attempt(self):
        event = threading.Event()
        event.set()
        calls = {"n": 0}

        def predicate():
            calls["n"] += 1
            return True

        poller = StatusPoller(predicate, max_attempts=5, interval=0, cancel_event=event)
        with pytest.raises(OperationCancelledError):
            poller.run()
        assert calls["n"] == 0
        assert poller.state == PollState.CANCELLED

    def test_cancelled_between_attempts(self):
        event = threading.Event()
        calls = {"n": 0}

        def predicate():
            calls["n"] += 1
            if calls["n"] == 2:
                event.set()
            return False

        poller = StatusPoller(predicate, max_attempts=10, interval=30.0, cancel_event=event)
        with pytest.raises(OperationCancelledError, match="after 2 attempts"):
            poller.run()
        assert calls["n"] == 2
        assert poller.attempts == 2
        assert poller.state == PollState.CANCELLED

    @patch("cloudhouse.resilience.poller.time.sleep")
    def test_cancel_event_replaces_sleep(self, mock_sleep):
        event = threading.Event()
        predicate, calls = _done_on(3)
        assert wait_for(predicate, max_attempts=5, interval=0.01, cancel_event=event) == 3
        mock_sleep.assert_not_called()
