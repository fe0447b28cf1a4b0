#!/usr/bin/env python3
# CUI // SP-CTI
"""openstacksdk-backed ResourceClient implementations.

Each supported resource type maps to an openstacksdk proxy and its
create / get / delete / list methods. The connection object is shared
between threads of a batch.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import openstack
from openstack import exceptions as os_exceptions

from cloudhouse import __version__
from cloudhouse.cloud.client import ResourceClient
from cloudhouse.config.endpoints import EndpointOptions
from cloudhouse.config.models import AkSkAuthOptions
from cloudhouse.resilience.errors import ConfigurationError, NotFoundError

logger = logging.getLogger("cloudhouse.cloud.openstack_backend")


@dataclass(frozen=True)
class ResourceBinding:
    """How one resource type is reached through openstacksdk."""
    proxy: str
    create: str
    get: str
    delete: str
    list: str
    status_attr: Optional[str] = "status"
    active_status: str = "ACTIVE"
    error_statuses: Tuple[str, ...] = ("ERROR",)


VOLUME_ERROR_STATUSES = ("ERROR", "ERROR_DELETING", "ERROR_BACKING-UP",
                         "ERROR_RESTORING", "ERROR_EXTENDING", "ERROR_MANAGING")

RESOURCE_BINDINGS: Dict[str, ResourceBinding] = {
    "server": ResourceBinding("compute", "create_server", "get_server",
                              "delete_server", "servers"),
    "network": ResourceBinding("network", "create_network", "get_network",
                               "delete_network", "networks"),
    "subnet": ResourceBinding("network", "create_subnet", "get_subnet",
                              "delete_subnet", "subnets", status_attr=None),
    "security_group": ResourceBinding("network", "create_security_group",
                                      "get_security_group", "delete_security_group",
                                      "security_groups", status_attr=None),
    "load_balancer": ResourceBinding("load_balancer", "create_load_balancer",
                                     "get_load_balancer", "delete_load_balancer",
                                     "load_balancers", status_attr="provisioning_status"),
    "volume": ResourceBinding("block_storage", "create_volume", "get_volume",
                              "delete_volume", "volumes", active_status="AVAILABLE",
                              error_statuses=VOLUME_ERROR_STATUSES),
}

# Reported for resource types without a status field once they can be fetched.
STATUS_PRESENT = "ACTIVE"


class OpenStackResourceClient(ResourceClient):
    """ResourceClient over an ``openstack.connection.Connection``."""

    def __init__(self, conn, resource_type: str):
        if resource_type not in RESOURCE_BINDINGS:
            raise ConfigurationError(
                f"unsupported resource type {resource_type!r}; "
                f"expected one of {', '.join(sorted(RESOURCE_BINDINGS))}",
                config_key="resource_type",
            )
        self._conn = conn
        self._type = resource_type
        self._binding = RESOURCE_BINDINGS[resource_type]

    @property
    def resource_type(self) -> str:
        return self._type

    @property
    def active_status(self) -> str:
        return self._binding.active_status

    @property
    def error_statuses(self) -> Tuple[str, ...]:
        return self._binding.error_statuses

    def _call(self, method: str, *args, **kwargs):
        proxy = getattr(self._conn, self._binding.proxy)
        return getattr(proxy, method)(*args, **kwargs)

    def _status(self, resource) -> str:
        """Status upper-cased; block storage reports lowercase values."""
        if self._binding.status_attr is None:
            return STATUS_PRESENT
        return (getattr(resource, self._binding.status_attr, "") or "").upper()

    def create(self, spec: Dict[str, Any]) -> str:
        resource = self._call(self._binding.create, **spec)
        logger.debug("Created %s %s", self._type, resource.id)
        return resource.id

    def get(self, resource_id: str) -> str:
        return self._status(self._call(self._binding.get, resource_id))

    def delete(self, resource_id: str) -> None:
        self._call(self._binding.delete, resource_id, ignore_missing=False)

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return [
            {"id": r.id, "name": r.name, "status": self._status(r)}
            for r in self._call(self._binding.list, **(filters or {}))
        ]

    def is_not_found(self, exc: BaseException) -> bool:
        return isinstance(exc, (os_exceptions.ResourceNotFound, NotFoundError))


def connection_kwargs(auth, endpoint: Optional[EndpointOptions] = None,
                      verify: bool = True) -> Dict[str, Any]:
    """Translate assembled auth parameters into openstack.connect() keywords.

    Raises:
        ConfigurationError: AK/SK parameters, which openstacksdk cannot use.
    """
    if isinstance(auth, AkSkAuthOptions):
        raise ConfigurationError(
            "AK/SK authentication is not supported by the openstacksdk backend",
            config_key="access_key",
        )
    kwargs: Dict[str, Any] = {"auth_url": auth.identity_endpoint, "verify": verify}
    if auth.token_id:
        kwargs["auth_type"] = "v3token"
        kwargs["token"] = auth.token_id
    else:
        kwargs["auth_type"] = "password"
        for key, value in (("username", auth.username), ("user_id", auth.user_id),
                           ("password", auth.password)):
            if value:
                kwargs[key] = value
    project_domain_id = auth.project_domain_id
    project_domain_name = auth.project_domain_name
    # A project addressed by name needs a domain; the user's domain stands in.
    if auth.tenant_name and not (project_domain_id or project_domain_name):
        project_domain_id, project_domain_name = auth.domain_id, auth.domain_name
    for key, value in (("project_id", auth.tenant_id), ("project_name", auth.tenant_name),
                       ("user_domain_id", auth.domain_id),
                       ("user_domain_name", auth.domain_name),
                       ("project_domain_id", project_domain_id),
                       ("project_domain_name", project_domain_name)):
        if value:
            kwargs[key] = value

    region = (endpoint.region if endpoint else "") or auth.region
    if region:
        kwargs["region_name"] = region
    if endpoint is not None:
        kwargs["interface"] = endpoint.interface
        if endpoint.api_version:
            kwargs["block_storage_api_version"] = endpoint.api_version
    return kwargs


def connect(auth, endpoint: Optional[EndpointOptions] = None, verify: bool = True):
    """Open an authenticated openstacksdk connection."""
    kwargs = connection_kwargs(auth, endpoint, verify=verify)
    logger.info("Connecting to %s (region=%s)", kwargs["auth_url"],
                kwargs.get("region_name", "-"))
    return openstack.connect(
        app_name="cloudhouse",
        app_version=__version__,
        load_yaml_config=False,
        load_envvars=False,
        **kwargs,
    )
