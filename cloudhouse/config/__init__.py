# CUI // SP-CTI
"""Layered cloud configuration.

  - clouds.yaml / clouds-public.yaml / secure.yaml resolution (resolver.py)
  - environment overlay and auth parameter selection (credentials.py)
  - service endpoint selection (endpoints.py)
"""

from cloudhouse.config.credentials import (  # noqa: F401
    CredentialAssembler,
    build_auth_options,
    resolve_client_config,
)
from cloudhouse.config.endpoints import EndpointOptions, endpoint_options  # noqa: F401
from cloudhouse.config.loader import CloudsSource, DictCloudsSource, YAMLCloudsSource  # noqa: F401
from cloudhouse.config.merge import merge, merge_clouds  # noqa: F401
from cloudhouse.config.models import (  # noqa: F401
    AkSkAuthOptions,
    AuthInfo,
    ClientOpts,
    CloudDescriptor,
    PasswordAuthOptions,
)
from cloudhouse.config.resolver import CloudConfigResolver, get_cloud  # noqa: F401
