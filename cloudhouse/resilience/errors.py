#!/usr/bin/env python3
# CUI // SP-CTI
"""cloudhouse Resilience — Structured Exception Hierarchy.

Configuration resolution and credential assembly raise these errors
fail-fast. Fan-out and lifecycle orchestration collect per-item failures
into an AggregateError returned alongside partial results.

Usage:
    from cloudhouse.resilience.errors import NotFoundError, AggregateError

    raise NotFoundError("could not find cloud test", name="test", resource_type="cloud")
"""

from typing import Iterable, Iterator, List


class CloudHouseError(Exception):
    """Base exception for all cloudhouse errors.

    Attributes:
        service: Name of the service or subsystem that caused the error.
        retryable: Whether the caller should retry the operation.
    """

    def __init__(self, message: str, service: str = "", retryable: bool = False):
        super().__init__(message)
        self.service = service
        self.retryable = retryable


class CloudHouseTransientError(CloudHouseError):
    """Transient error: the operation may succeed on retry.

    Examples: polling budget exhausted, batch cancelled.
    """

    def __init__(self, message: str, service: str = "", retryable: bool = True):
        super().__init__(message, service=service, retryable=retryable)


class CloudHousePermanentError(CloudHouseError):
    """Permanent error: retrying will not help.

    Examples: missing cloud entry, ambiguous name, missing auth_url.
    """

    def __init__(self, message: str, service: str = "", retryable: bool = False):
        super().__init__(message, service=service, retryable=retryable)


class NotFoundError(CloudHousePermanentError):
    """A named resource or configuration entry does not exist.

    Delete-completion predicates treat this as success.
    """

    def __init__(self, message: str = "", name: str = "", resource_type: str = ""):
        super().__init__(
            message or f"{resource_type or 'resource'} {name} not found",
            service=resource_type,
        )
        self.name = name
        self.resource_type = resource_type


class SourceNotFoundError(NotFoundError):
    """A configuration file could not be located on the search path."""

    def __init__(self, filename: str):
        super().__init__(f"no {filename} file found", name=filename, resource_type="config")
        self.filename = filename


class MultipleFoundError(CloudHousePermanentError):
    """A name matched more than one resource; never auto-resolved."""

    def __init__(self, name: str, resource_type: str = "", count: int = 0):
        super().__init__(
            f"multiple {resource_type or 'resource'}s ({count}) found by name {name}. "
            f"Please provide an ID instead",
            service=resource_type,
        )
        self.name = name
        self.resource_type = resource_type
        self.count = count


class ConfigurationError(CloudHousePermanentError):
    """Missing, unreadable or invalid configuration."""

    def __init__(self, message: str, config_key: str = ""):
        super().__init__(message, service="config", retryable=False)
        self.config_key = config_key


class MergeFailure(ConfigurationError):
    """A merged configuration tree could not be decoded back into a descriptor."""


class MissingRequiredFieldError(ConfigurationError):
    """A required credential field is still empty after every overlay."""

    def __init__(self, argument: str):
        super().__init__(f"Missing input for argument [{argument}]", config_key=argument)
        self.argument = argument


class ResourceStatusError(CloudHousePermanentError):
    """A polled resource entered a failure status."""

    def __init__(self, resource_id: str, status: str, resource_type: str = ""):
        subject = f"{resource_type} {resource_id}" if resource_type else resource_id
        super().__init__(f"{subject} entered status {status}", service=resource_type)
        self.resource_id = resource_id
        self.status = status


class PollTimeoutError(CloudHouseTransientError):
    """StatusPoller exhausted its attempt budget."""

    def __init__(self, attempts: int, description: str = ""):
        message = f"Maximum number of retries ({attempts}) exceeded"
        if description:
            message = f"{message} waiting for {description}"
        super().__init__(message, service="poller")
        self.attempts = attempts


class OperationCancelledError(CloudHouseTransientError):
    """The caller signalled cancellation before the operation finished."""

    def __init__(self, message: str = "operation cancelled"):
        super().__init__(message, service="lifecycle")


class AggregateError(CloudHouseError):
    """Union of per-item failures from one fan-out batch.

    Never empty: use ``aggregate_errors`` / ``AggregateError.from_errors``,
    which return None when nothing failed.
    """

    def __init__(self, errors: Iterable[BaseException]):
        self.errors: List[BaseException] = list(errors)
        super().__init__(self._format(self.errors), service="fanout")

    @classmethod
    def from_errors(cls, errors: Iterable[BaseException]):
        """Build an AggregateError, flattening nested aggregates. None if empty."""
        flat: List[BaseException] = []
        for err in errors:
            if err is None:
                continue
            if isinstance(err, AggregateError):
                flat.extend(err.errors)
            else:
                flat.append(err)
        if not flat:
            return None
        return cls(flat)

    @staticmethod
    def _format(errors: List[BaseException]) -> str:
        if len(errors) == 1:
            return f"1 error occurred:\n\t* {errors[0]}\n"
        points = "\n".join(f"\t* {err}" for err in errors)
        return f"{len(errors)} errors occurred:\n{points}\n"

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)
