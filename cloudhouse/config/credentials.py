# CUI // SP-CTI
"""Credential assembly — environment overlay and auth-style selection.

Fields already set by the resolved cloud entry are kept; empty fields are
filled from ``<PREFIX><SUFFIX>`` environment variables. Access keys come
from the unprefixed S3_ACCESS_KEY_ID / S3_SECRET_ACCESS_KEY pair.

auth_url is the only hard requirement. An access key selects AK/SK
parameters, anything else produces token/password parameters.
"""

import copy
import dataclasses
import logging
import os
from typing import Mapping, Optional, Tuple, Union

from cloudhouse.config.models import (
    DEFAULT_ENV_PREFIX,
    AkSkAuthOptions,
    AuthInfo,
    ClientOpts,
    CloudDescriptor,
    PasswordAuthOptions,
)
from cloudhouse.config.resolver import CloudConfigResolver
from cloudhouse.resilience.errors import MissingRequiredFieldError

logger = logging.getLogger("cloudhouse.config.credentials")

AuthOptions = Union[PasswordAuthOptions, AkSkAuthOptions]

# AuthInfo field -> prefixed variable suffixes; when several are set the last wins.
PREFIXED_ENV_VARS = (
    ("auth_url", ("AUTH_URL",)),
    ("token", ("TOKEN", "AUTH_TOKEN")),
    ("username", ("USERNAME",)),
    ("user_id", ("USER_ID",)),
    ("password", ("PASSWORD",)),
    ("project_id", ("TENANT_ID", "PROJECT_ID")),
    ("project_name", ("TENANT_NAME", "PROJECT_NAME")),
    ("domain_id", ("DOMAIN_ID",)),
    ("domain_name", ("DOMAIN_NAME",)),
    ("default_domain", ("DEFAULT_DOMAIN",)),
    ("project_domain_id", ("PROJECT_DOMAIN_ID",)),
    ("project_domain_name", ("PROJECT_DOMAIN_NAME",)),
    ("user_domain_id", ("USER_DOMAIN_ID",)),
    ("user_domain_name", ("USER_DOMAIN_NAME",)),
    ("application_credential_id", ("APPLICATION_CREDENTIAL_ID",)),
    ("application_credential_name", ("APPLICATION_CREDENTIAL_NAME",)),
    ("application_credential_secret", ("APPLICATION_CREDENTIAL_SECRET",)),
)

UNPREFIXED_ENV_VARS = (
    ("access_key", ("S3_ACCESS_KEY_ID",)),
    ("secret_key", ("S3_SECRET_ACCESS_KEY",)),
)


def normalize_domains(auth: AuthInfo) -> AuthInfo:
    """Copy generic domain settings into user/project domain fields.

    domain_id / domain_name fill the matching user_* and project_* fields
    when those are empty. default_domain is the last resort for the user
    and project domain IDs, each considered independently.
    """
    auth = dataclasses.replace(auth)
    if auth.domain_id:
        auth.user_domain_id = auth.user_domain_id or auth.domain_id
        auth.project_domain_id = auth.project_domain_id or auth.domain_id
    if auth.domain_name:
        auth.user_domain_name = auth.user_domain_name or auth.domain_name
        auth.project_domain_name = auth.project_domain_name or auth.domain_name
    if auth.default_domain:
        if not auth.user_domain_name and not auth.user_domain_id:
            auth.user_domain_id = auth.default_domain
        if not auth.project_domain_name and not auth.project_domain_id:
            auth.project_domain_id = auth.default_domain
    return auth


class CredentialAssembler:
    """Turn a resolved CloudDescriptor into authentication parameters.

    Args:
        env: Environment view (default os.environ). Tests pass a dict.
        env_prefix: Prefix for credential variables (default ``OS_``).
    """

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
    ):
        self._env = os.environ if env is None else env
        self._prefix = env_prefix or DEFAULT_ENV_PREFIX

    def overlay_environment(self, auth: AuthInfo) -> AuthInfo:
        """Return a copy of ``auth`` with empty fields filled from the environment."""
        auth = dataclasses.replace(auth)
        tables = (
            (self._prefix, PREFIXED_ENV_VARS),
            ("", UNPREFIXED_ENV_VARS),
        )
        for prefix, table in tables:
            for field_name, suffixes in table:
                if getattr(auth, field_name):
                    continue
                for suffix in suffixes:
                    value = self._env.get(prefix + suffix, "")
                    if value:
                        setattr(auth, field_name, value)
        return auth

    def assemble(self, descriptor: CloudDescriptor) -> AuthOptions:
        """Build immutable auth parameters from ``descriptor`` plus environment.

        The descriptor is not modified.

        Raises:
            MissingRequiredFieldError: auth_url is empty after every overlay.
        """
        auth = normalize_domains(descriptor.auth or AuthInfo())
        auth = self.overlay_environment(auth)

        if not auth.auth_url:
            raise MissingRequiredFieldError("auth_url")

        if auth.access_key:
            logger.debug("Using AK/SK authentication against %s", auth.auth_url)
            return AkSkAuthOptions(
                identity_endpoint=auth.auth_url,
                access_key=auth.access_key,
                secret_key=auth.secret_key,
                project_id=auth.project_id,
                project_name=auth.project_name,
                domain_id=auth.user_domain_id,
                region=descriptor.region_name,
            )

        logger.debug("Using token/password authentication against %s", auth.auth_url)
        return PasswordAuthOptions(
            identity_endpoint=auth.auth_url,
            token_id=auth.token,
            username=auth.username,
            user_id=auth.user_id,
            password=auth.password,
            tenant_id=auth.project_id,
            tenant_name=auth.project_name,
            domain_id=auth.user_domain_id,
            domain_name=auth.user_domain_name,
            project_domain_id=auth.project_domain_id,
            project_domain_name=auth.project_domain_name,
            region=descriptor.region_name,
        )


def resolve_client_config(
    opts: Optional[ClientOpts] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[CloudDescriptor, AuthOptions]:
    """Resolve the cloud named by ``opts`` (if any) and assemble its credentials.

    Without a cloud name, authentication relies on ``opts.auth_info`` and
    environment variables alone.
    """
    opts = opts or ClientOpts()
    env = os.environ if env is None else env

    resolver = CloudConfigResolver(source=opts.source, env=env, env_prefix=opts.prefix)
    name = resolver.cloud_name(opts.cloud)
    descriptor = resolver.resolve(name) if name else CloudDescriptor()

    if descriptor.auth is None:
        descriptor.auth = copy.deepcopy(opts.auth_info) if opts.auth_info else AuthInfo()
    if not descriptor.region_name:
        descriptor.region_name = opts.region_name
    if not descriptor.endpoint_type:
        descriptor.endpoint_type = opts.endpoint_type

    auth = CredentialAssembler(env=env, env_prefix=opts.prefix).assemble(descriptor)
    return descriptor, auth


def build_auth_options(
    opts: Optional[ClientOpts] = None,
    env: Optional[Mapping[str, str]] = None,
) -> AuthOptions:
    """Single entry point for authentication parameters."""
    return resolve_client_config(opts, env)[1]
