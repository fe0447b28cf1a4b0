#!/usr/bin/env python3
# CUI // SP-CTI
"""cloudhouse Resilience Package — Errors, Polling, Fan-out, Correlation.

Blocking primitives used by the lifecycle orchestrator: a bounded
fixed-interval poller and a gather-all thread-pool fan-out.
"""

from cloudhouse.resilience.correlation import (  # noqa: F401
    CorrelationLogFilter,
    bind_correlation,
    get_correlation_id,
    set_correlation_id,
)
from cloudhouse.resilience.errors import (  # noqa: F401
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
from cloudhouse.resilience.fanout import FanOutResult, aggregate_errors, fan_out  # noqa: F401
from cloudhouse.resilience.poller import PollState, StatusPoller, wait_for  # noqa: F401
