# CUI // SP-CTI
"""Tests for cloudhouse.config.endpoints."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from cloudhouse.config.endpoints import (
    DEFAULT_ENDPOINT_TYPE,
    EndpointOptions,
    endpoint_options,
    get_endpoint_type,
)
from cloudhouse.config.models import ClientOpts, CloudDescriptor
from cloudhouse.resilience.errors import ConfigurationError


class TestGetEndpointType:
    """Prefix matching onto public / internal / admin."""

    @pytest.mark.parametrize("raw,expected", [
        ("internal", "internal"),
        ("internalURL", "internal"),
        ("admin", "admin"),
        ("adminURL", "admin"),
        ("public", "public"),
        ("publicURL", "public"),
        ("", "public"),
        ("bogus", "public"),
    ])
    def test_mapping(self, raw, expected):
        assert get_endpoint_type(raw) == expected

    def test_default(self):
        assert DEFAULT_ENDPOINT_TYPE == "public"


class TestEndpointOptions:
    """Region / interface precedence and volume API versions."""

    def test_defaults(self):
        opts = endpoint_options("compute", env={})
        assert opts == EndpointOptions(service="compute", region="", interface="public")

    def test_env_is_lowest(self):
        env = {"OS_REGION_NAME": "env-region", "OS_INTERFACE": "admin"}
        assert endpoint_options("network", env=env).region == "env-region"
        assert endpoint_options("network", env=env).interface == "admin"

        descriptor = CloudDescriptor(region_name="cloud-region", endpoint_type="internal")
        opts = endpoint_options("network", descriptor=descriptor, env=env)
        assert opts.region == "cloud-region"
        assert opts.interface == "internal"

    def test_client_opts_win(self):
        descriptor = CloudDescriptor(region_name="cloud-region", endpoint_type="internal")
        client_opts = ClientOpts(region_name="opts-region", endpoint_type="adminURL")
        opts = endpoint_options("network", descriptor=descriptor, opts=client_opts, env={})
        assert opts.region == "opts-region"
        assert opts.interface == "admin"

    def test_env_prefix_from_client_opts(self):
        env = {"OTC_REGION_NAME": "otc-region", "OS_REGION_NAME": "os-region"}
        opts = endpoint_options("dns", opts=ClientOpts(env_prefix="OTC_"), env=env)
        assert opts.region == "otc-region"

    def test_unknown_service(self):
        with pytest.raises(ConfigurationError, match="unable to create a service client for warp"):
            endpoint_options("warp", env={})

    def test_volume_default_version(self):
        assert endpoint_options("volume", env={}).api_version == "2"

    @pytest.mark.parametrize("raw,expected", [("1", "1"), ("v2", "2"), ("3", "3"), ("v3", "3")])
    def test_volume_versions(self, raw, expected):
        descriptor = CloudDescriptor(volume_api_version=raw)
        assert endpoint_options("volume", descriptor=descriptor, env={}).api_version == expected

    def test_invalid_volume_version(self):
        with pytest.raises(ConfigurationError, match="invalid volume API version"):
            endpoint_options("volume", descriptor=CloudDescriptor(volume_api_version="4"), env={})

    def test_version_only_for_volume(self):
        descriptor = CloudDescriptor(volume_api_version="3")
        assert endpoint_options("compute", descriptor=descriptor, env={}).api_version == ""
