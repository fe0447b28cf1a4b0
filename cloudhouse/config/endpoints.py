# CUI // SP-CTI
"""Service endpoint selection: region, endpoint type, volume API version."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from cloudhouse.config.models import ClientOpts, CloudDescriptor
from cloudhouse.resilience.errors import ConfigurationError

VALID_ENDPOINT_TYPES = ("public", "internal", "admin")
DEFAULT_ENDPOINT_TYPE = "public"
DEFAULT_VOLUME_API_VERSION = "2"

VOLUME_API_VERSIONS = {"1": "1", "v1": "1", "2": "2", "v2": "2", "3": "3", "v3": "3"}

SERVICES = (
    "ecs", "compute", "database", "dns", "identity", "image", "load-balancer",
    "vpc", "network", "object-store", "cce", "orchestration", "sharev2", "volume",
)


@dataclass(frozen=True)
class EndpointOptions:
    """Where to reach one service of an authenticated cloud."""
    service: str
    region: str = ""
    interface: str = DEFAULT_ENDPOINT_TYPE
    api_version: str = ""


def get_endpoint_type(endpoint_type: str) -> str:
    """Map e.g. ``internalURL`` to ``internal``; unknown values mean ``public``."""
    for candidate in VALID_ENDPOINT_TYPES:
        if endpoint_type.startswith(candidate):
            return candidate
    return DEFAULT_ENDPOINT_TYPE


def endpoint_options(
    service: str,
    descriptor: Optional[CloudDescriptor] = None,
    opts: Optional[ClientOpts] = None,
    env: Optional[Mapping[str, str]] = None,
) -> EndpointOptions:
    """Pick region and interface for ``service``.

    Precedence for both, lowest to highest: ``<PREFIX>REGION_NAME`` /
    ``<PREFIX>INTERFACE``, the cloud descriptor, the client options.

    Raises:
        ConfigurationError: unknown service, or invalid volume API version.
    """
    if service not in SERVICES:
        raise ConfigurationError(f"unable to create a service client for {service}",
                                 config_key="service")
    descriptor = descriptor or CloudDescriptor()
    opts = opts or ClientOpts()
    env = os.environ if env is None else env

    region = opts.region_name or descriptor.region_name or env.get(opts.prefix + "REGION_NAME", "")
    endpoint_type = (opts.endpoint_type or descriptor.endpoint_type
                     or env.get(opts.prefix + "INTERFACE", ""))

    api_version = ""
    if service == "volume":
        requested = descriptor.volume_api_version or DEFAULT_VOLUME_API_VERSION
        if requested not in VOLUME_API_VERSIONS:
            raise ConfigurationError("invalid volume API version",
                                     config_key="volume_api_version")
        api_version = VOLUME_API_VERSIONS[requested]

    return EndpointOptions(
        service=service,
        region=region,
        interface=get_endpoint_type(endpoint_type),
        api_version=api_version,
    )
