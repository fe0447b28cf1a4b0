# CUI // SP-CTI
"""Cloud configuration data models — descriptors, auth info, auth parameters.

Dataclasses mirror the clouds.yaml schema. ``to_dict``/``from_dict`` convert
by field enumeration so descriptors can be merged as plain trees.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cloudhouse.resilience.errors import ConfigurationError

DEFAULT_ENV_PREFIX = "OS_"


@dataclass
class AuthInfo:
    """Flat credential fields of a clouds.yaml ``auth`` section.

    Empty string means unset: it is filled from a lower-precedence source
    and never treated as a literal value.
    """
    auth_url: str = ""
    token: str = ""
    username: str = ""
    user_id: str = ""
    password: str = ""
    project_id: str = ""
    project_name: str = ""
    domain_id: str = ""
    domain_name: str = ""
    user_domain_id: str = ""
    user_domain_name: str = ""
    project_domain_id: str = ""
    project_domain_name: str = ""
    default_domain: str = ""
    application_credential_id: str = ""
    application_credential_name: str = ""
    application_credential_secret: str = ""
    access_key: str = ""
    secret_key: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AuthInfo":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"auth must be a mapping, got {type(data).__name__}", config_key="auth")
        values = {}
        for f in dataclasses.fields(cls):
            if f.name in data:
                values[f.name] = _as_str(data[f.name], f"auth.{f.name}")
        return cls(**values)


@dataclass
class CloudDescriptor:
    """One named cloud entry after resolution.

    ``interface`` is only a loading-time alias of ``endpoint_type``; the
    resolver copies it across and clears it.
    """
    cloud: str = ""
    profile: str = ""
    auth: Optional[AuthInfo] = None
    region_name: str = ""
    regions: List[str] = field(default_factory=list)
    endpoint_type: str = ""
    interface: str = ""
    identity_api_version: str = ""
    volume_api_version: str = ""
    verify: Optional[bool] = None
    cacert: str = ""
    cert: str = ""
    key: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        if self.auth is None:
            data["auth"] = None
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CloudDescriptor":
        """Decode a clouds.yaml entry. Unknown keys are ignored."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"cloud entry must be a mapping, got {type(data).__name__}")
        values: Dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            if f.name == "auth":
                values["auth"] = None if raw is None else AuthInfo.from_dict(raw)
            elif f.name == "regions":
                values["regions"] = _as_str_list(raw, "regions")
            elif f.name == "verify":
                values["verify"] = _as_bool(raw, "verify")
            else:
                values[f.name] = _as_str(raw, f.name)
        return cls(**values)


@dataclass(frozen=True)
class PasswordAuthOptions:
    """Token / password style authentication parameters."""
    identity_endpoint: str
    token_id: str = ""
    username: str = ""
    user_id: str = ""
    password: str = ""
    tenant_id: str = ""
    tenant_name: str = ""
    domain_id: str = ""
    domain_name: str = ""
    project_domain_id: str = ""
    project_domain_name: str = ""
    region: str = ""

    auth_style = "password"


@dataclass(frozen=True)
class AkSkAuthOptions:
    """Access-key / secret-key style authentication parameters."""
    identity_endpoint: str
    access_key: str
    secret_key: str = ""
    project_id: str = ""
    project_name: str = ""
    domain_id: str = ""
    region: str = ""

    auth_style = "aksk"


@dataclass
class ClientOpts:
    """Caller-side options for building authentication parameters.

    Attributes:
        cloud: Cloud entry name; ``<PREFIX>CLOUD`` is used when empty.
        env_prefix: Environment variable prefix (default ``OS_``).
        auth_info: Auth settings used when no cloud entry supplies any.
        region_name: Region; fills in an empty descriptor region and wins
            in endpoint selection.
        endpoint_type: public / internal / admin; same precedence as region_name.
        source: CloudsSource to read configuration from (YAML files by default).
    """
    cloud: str = ""
    env_prefix: str = ""
    auth_info: Optional[AuthInfo] = None
    region_name: str = ""
    endpoint_type: str = ""
    source: Any = None

    @property
    def prefix(self) -> str:
        return self.env_prefix or DEFAULT_ENV_PREFIX


def _as_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigurationError(
        f"{key} must be a scalar, got {type(value).__name__}", config_key=key)


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError(
            f"{key} must be a list, got {type(value).__name__}", config_key=key)
    # clouds.yaml allows region entries of the form {name: ..., values: {...}}
    return [_as_str(v.get("name") if isinstance(v, dict) else v, key) for v in value]


def _as_bool(value: Any, key: str) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "yes", "1", "false", "no", "0"):
        return value.lower() in ("true", "yes", "1")
    raise ConfigurationError(f"{key} must be a boolean, got {value!r}", config_key=key)
