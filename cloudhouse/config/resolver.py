# CUI // SP-CTI
"""Cloud configuration resolver — clouds.yaml + clouds-public.yaml + secure.yaml.

Precedence per field, highest first:
    secure.yaml  >  clouds.yaml  >  clouds-public.yaml (profile)

Cloud name precedence: explicit argument > <PREFIX>CLOUD > the only entry
of clouds.yaml > the only entry of secure.yaml.
"""

import copy
import logging
import os
from typing import Dict, Mapping, Optional, Tuple

from cloudhouse.config.loader import CloudsSource, YAMLCloudsSource
from cloudhouse.config.merge import merge_clouds
from cloudhouse.config.models import DEFAULT_ENV_PREFIX, CloudDescriptor
from cloudhouse.resilience.errors import NotFoundError, SourceNotFoundError

logger = logging.getLogger("cloudhouse.config.resolver")


class CloudConfigResolver:
    """Resolve one named cloud entry from layered configuration sources.

    Args:
        source: CloudsSource to read the three layers from. Defaults to
            YAML files on the standard search path.
        env: Environment view used for ``<PREFIX>CLOUD`` (default os.environ).
        env_prefix: Environment variable prefix (default ``OS_``).
    """

    def __init__(
        self,
        source: Optional[CloudsSource] = None,
        env: Optional[Mapping[str, str]] = None,
        env_prefix: str = DEFAULT_ENV_PREFIX,
    ):
        self._env = os.environ if env is None else env
        self._source = source or YAMLCloudsSource(env=self._env)
        self._prefix = env_prefix or DEFAULT_ENV_PREFIX

    def cloud_name(self, explicit: str = "") -> str:
        """Explicit name wins over ``<PREFIX>CLOUD``; empty if neither is set."""
        return explicit or self._env.get(self._prefix + "CLOUD", "")

    def resolve(self, cloud: str = "", missing_ok: bool = False) -> Optional[CloudDescriptor]:
        """Resolve a cloud entry into a fresh CloudDescriptor.

        Args:
            cloud: Explicit cloud name.
            missing_ok: Return None instead of raising when neither
                clouds.yaml nor secure.yaml exists / holds anything.

        Raises:
            SourceNotFoundError: clouds.yaml is absent (unless missing_ok).
            NotFoundError: the cloud could not be determined.
            ConfigurationError: a source exists but cannot be read or parsed.
            MergeFailure: layers could not be merged into a descriptor.
        """
        name = self.cloud_name(cloud)

        primary_found = True
        try:
            clouds = self._source.load_clouds()
        except SourceNotFoundError:
            if not missing_ok:
                raise
            logger.warning("No clouds.yaml found")
            clouds, primary_found = {}, False

        entry_name, descriptor = self._select(name, clouds)
        if descriptor is not None:
            descriptor = self._apply_profile(entry_name, descriptor)

        secure = self._source.load_secure_clouds()
        if descriptor is None and not name and len(secure) == 1:
            entry_name, only = next(iter(secure.items()))
            logger.info("Using the only secure.yaml entry: %s", entry_name)
            descriptor = copy.deepcopy(only)
        elif entry_name in secure:
            descriptor = merge_clouds(secure[entry_name], descriptor)

        if descriptor is None:
            if missing_ok and not primary_found and not secure:
                return None
            raise NotFoundError(f"could not find cloud {name}", name=name, resource_type="cloud")

        return self._apply_defaults(descriptor)

    def _select(
        self, name: str, clouds: Dict[str, CloudDescriptor]
    ) -> Tuple[str, Optional[CloudDescriptor]]:
        if name:
            if name in clouds:
                return name, copy.deepcopy(clouds[name])
            if clouds:
                raise NotFoundError(f"cloud {name} does not exist in clouds.yaml",
                                    name=name, resource_type="cloud")
            return name, None
        if len(clouds) == 1:
            only_name, only = next(iter(clouds.items()))
            logger.debug("No cloud name given, using the only entry: %s", only_name)
            return only_name, copy.deepcopy(only)
        return "", None

    def _apply_profile(self, entry_name: str, descriptor: CloudDescriptor) -> CloudDescriptor:
        """Fill gaps from the referenced public profile; the entry itself wins."""
        explicit = descriptor.profile or descriptor.cloud
        profile = explicit or entry_name
        if not profile:
            return descriptor
        public = self._source.load_public_clouds()
        if profile not in public:
            if explicit:
                logger.warning("cloud %s does not exist in clouds-public.yaml", profile)
            return descriptor
        logger.debug("Merging public profile %s into cloud %s", profile, entry_name)
        return merge_clouds(descriptor, public[profile])

    @staticmethod
    def _apply_defaults(descriptor: CloudDescriptor) -> CloudDescriptor:
        if descriptor.verify is None:
            descriptor.verify = True
        if descriptor.interface and not descriptor.endpoint_type:
            descriptor.endpoint_type = descriptor.interface
        descriptor.interface = ""
        return descriptor


def get_cloud(
    cloud: str = "",
    source: Optional[CloudsSource] = None,
    env: Optional[Mapping[str, str]] = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
) -> CloudDescriptor:
    """Convenience wrapper: resolve ``cloud`` with a one-off resolver."""
    return CloudConfigResolver(source=source, env=env, env_prefix=env_prefix).resolve(cloud)
