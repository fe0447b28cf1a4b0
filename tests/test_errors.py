# CUI // SP-CTI
"""Tests for cloudhouse.resilience.errors."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from cloudhouse.resilience.errors import (
    AggregateError,
    CloudHouseError,
    CloudHousePermanentError,
    CloudHouseTransientError,
    ConfigurationError,
    MergeFailure,
    MissingRequiredFieldError,
    MultipleFoundError,
    NotFoundError,
    OperationCancelledError,
    PollTimeoutError,
    ResourceStatusError,
    SourceNotFoundError,
)


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------
class TestHierarchy:
    """Every error descends from CloudHouseError with the right retry flag."""

    @pytest.mark.parametrize("exc", [
        NotFoundError("x"),
        SourceNotFoundError("clouds.yaml"),
        MultipleFoundError("net"),
        ConfigurationError("bad"),
        MergeFailure("bad merge"),
        MissingRequiredFieldError("auth_url"),
        ResourceStatusError("id-1", "ERROR"),
    ])
    def test_permanent_errors(self, exc):
        assert isinstance(exc, CloudHousePermanentError)
        assert isinstance(exc, CloudHouseError)
        assert exc.retryable is False

    @pytest.mark.parametrize("exc", [
        PollTimeoutError(5),
        OperationCancelledError(),
    ])
    def test_transient_errors(self, exc):
        assert isinstance(exc, CloudHouseTransientError)
        assert exc.retryable is True

    def test_source_not_found_is_not_found(self):
        exc = SourceNotFoundError("clouds.yaml")
        assert isinstance(exc, NotFoundError)
        assert exc.filename == "clouds.yaml"
        assert str(exc) == "no clouds.yaml file found"

    def test_merge_failure_is_configuration_error(self):
        assert isinstance(MergeFailure("x"), ConfigurationError)


# ---------------------------------------------------------------------------
# Messages and attributes
# ---------------------------------------------------------------------------
class TestMessages:
    """Error messages name what went wrong."""

    def test_missing_required_field(self):
        exc = MissingRequiredFieldError("auth_url")
        assert str(exc) == "Missing input for argument [auth_url]"
        assert exc.argument == "auth_url"
        assert exc.config_key == "auth_url"

    def test_poll_timeout_names_attempts(self):
        exc = PollTimeoutError(50)
        assert str(exc) == "Maximum number of retries (50) exceeded"
        assert exc.attempts == 50

    def test_poll_timeout_with_description(self):
        exc = PollTimeoutError(3, "server abc to become ACTIVE")
        assert "waiting for server abc to become ACTIVE" in str(exc)

    def test_multiple_found_carries_count(self):
        exc = MultipleFoundError("web", resource_type="network", count=2)
        assert exc.name == "web"
        assert exc.count == 2
        assert "web" in str(exc)

    def test_resource_status_error(self):
        exc = ResourceStatusError("lb-1", "ERROR", resource_type="load_balancer")
        assert exc.resource_id == "lb-1"
        assert exc.status == "ERROR"
        assert str(exc) == "load_balancer lb-1 entered status ERROR"


# ---------------------------------------------------------------------------
# AggregateError
# ---------------------------------------------------------------------------
class TestAggregateError:
    """AggregateError enumerates every member and is never empty."""

    def test_from_errors_empty_is_none(self):
        assert AggregateError.from_errors([]) is None
        assert AggregateError.from_errors([None, None]) is None

    def test_single_error_message(self):
        agg = AggregateError.from_errors([ValueError("boom")])
        assert str(agg) == "1 error occurred:\n\t* boom\n"
        assert len(agg) == 1

    def test_multiple_error_message(self):
        agg = AggregateError.from_errors([ValueError("a"), KeyError("b")])
        assert str(agg).startswith("2 errors occurred:\n")
        assert "\t* a" in str(agg)
        assert len(agg) == 2

    def test_nested_aggregates_flatten(self):
        inner = AggregateError([ValueError("a"), ValueError("b")])
        agg = AggregateError.from_errors([inner, ValueError("c")])
        assert [str(e) for e in agg] == ["a", "b", "c"]

    def test_iteration_preserves_order(self):
        errors = [ValueError(str(i)) for i in range(4)]
        agg = AggregateError(errors)
        assert list(agg) == errors
