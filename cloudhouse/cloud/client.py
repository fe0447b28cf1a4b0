#!/usr/bin/env python3
# CUI // SP-CTI
"""Resource client boundary: the four operations the lifecycle layer needs.

ABC + implementations. One client instance addresses one resource type
(servers, networks, cluster nodes, ...) and is shared by all concurrent
units of a batch, so implementations must tolerate concurrent calls.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from cloudhouse.resilience.errors import MultipleFoundError, NotFoundError


class ResourceClient(ABC):
    """Abstract base class for one resource type of a cloud service."""

    @property
    @abstractmethod
    def resource_type(self) -> str:
        """Return resource type identifier, e.g. ``server``."""

    @abstractmethod
    def create(self, spec: Dict[str, Any]) -> str:
        """Create a resource from ``spec`` and return its ID."""

    @abstractmethod
    def get(self, resource_id: str) -> str:
        """Return the current status string of a resource.

        Must raise an error recognised by ``is_not_found`` when the
        resource does not exist.
        """

    @abstractmethod
    def delete(self, resource_id: str) -> None:
        """Request deletion of a resource."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """List resources as dicts with at least ``id`` and ``name`` keys."""

    @property
    def active_status(self) -> str:
        """Status a created resource settles in."""
        return "ACTIVE"

    @property
    def error_statuses(self) -> Tuple[str, ...]:
        """Statuses that end a wait immediately."""
        return ("ERROR",)

    def is_not_found(self, exc: BaseException) -> bool:
        """Whether ``exc`` means the resource does not exist."""
        return isinstance(exc, NotFoundError)


def find_id_by_name(client: ResourceClient, name: str, **filters) -> str:
    """Resolve a resource name to its ID.

    Raises:
        NotFoundError: nothing matches.
        MultipleFoundError: more than one resource carries the name.
    """
    query = dict(filters)
    query["name"] = name
    matches = [item for item in client.list(query) if item.get("name") == name]
    if not matches:
        raise NotFoundError(name=name, resource_type=client.resource_type)
    if len(matches) > 1:
        raise MultipleFoundError(name, resource_type=client.resource_type, count=len(matches))
    return matches[0]["id"]
