# CUI // SP-CTI
"""Locate and load clouds.yaml, clouds-public.yaml and secure.yaml.

Search order for each file (first match wins):
  1. path named by its override variable (OS_CLIENT_CONFIG_FILE,
     OS_CLIENT_VENDOR_FILE, OS_CLIENT_SECURE_FILE), if that file exists
  2. current working directory
  3. ~/.config/openstack
  4. /etc/openstack

clouds.yaml is required; the public and secure files are optional and
load as empty when absent.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from cloudhouse.config.models import CloudDescriptor
from cloudhouse.resilience.errors import ConfigurationError, SourceNotFoundError

logger = logging.getLogger("cloudhouse.config.loader")

CLOUDS_FILE = "clouds.yaml"
PUBLIC_CLOUDS_FILE = "clouds-public.yaml"
SECURE_CLOUDS_FILE = "secure.yaml"

CLOUDS_FILE_ENV = "OS_CLIENT_CONFIG_FILE"
PUBLIC_CLOUDS_FILE_ENV = "OS_CLIENT_VENDOR_FILE"
SECURE_CLOUDS_FILE_ENV = "OS_CLIENT_SECURE_FILE"

SITE_CONFIG_DIR = Path("/etc/openstack")


def default_search_dirs() -> List[Path]:
    """cwd, unix user config dir, unix site config dir."""
    dirs = [Path.cwd()]
    try:
        dirs.append(Path.home() / ".config" / "openstack")
    except RuntimeError:
        logger.debug("Home directory unavailable, skipping user config dir")
    dirs.append(SITE_CONFIG_DIR)
    return dirs


def find_yaml(
    filename: str,
    override_var: str = "",
    env: Optional[Mapping[str, str]] = None,
    search_dirs: Optional[List[Path]] = None,
) -> Path:
    """Return the first existing location of ``filename``.

    Raises:
        SourceNotFoundError: no candidate exists.
    """
    env = os.environ if env is None else env
    if override_var:
        override = env.get(override_var, "")
        if override and Path(override).is_file():
            return Path(override)

    for directory in (default_search_dirs() if search_dirs is None else search_dirs):
        candidate = Path(directory) / filename
        if candidate.is_file():
            return candidate
    raise SourceNotFoundError(filename)


def read_yaml(path: Path) -> Dict:
    """Parse a YAML file whose top level must be a mapping (empty file -> {})."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"failed to unmarshal yaml {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"failed to read {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping")
    return data


def decode_clouds(data: Dict, section: str, origin: str = "") -> Dict[str, CloudDescriptor]:
    """Decode ``data[section]`` into a name -> CloudDescriptor mapping."""
    entries = data.get(section) or {}
    if not isinstance(entries, dict):
        raise ConfigurationError(f"{origin or section}: '{section}' must be a mapping",
                                 config_key=section)
    return {str(name): CloudDescriptor.from_dict(entry) for name, entry in entries.items()}


class CloudsSource(ABC):
    """Where the three cloud configuration layers come from."""

    @abstractmethod
    def load_clouds(self) -> Dict[str, CloudDescriptor]:
        """Primary entries. Raises SourceNotFoundError if the source is absent."""

    @abstractmethod
    def load_public_clouds(self) -> Dict[str, CloudDescriptor]:
        """Public profiles; empty when absent."""

    @abstractmethod
    def load_secure_clouds(self) -> Dict[str, CloudDescriptor]:
        """Secure overrides; empty when absent."""


class YAMLCloudsSource(CloudsSource):
    """Default source: YAML files found on the search path."""

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        search_dirs: Optional[List[Path]] = None,
    ):
        self._env = os.environ if env is None else env
        self._search_dirs = search_dirs

    def _find(self, filename: str, override_var: str) -> Path:
        return find_yaml(filename, override_var, env=self._env, search_dirs=self._search_dirs)

    def load_clouds(self) -> Dict[str, CloudDescriptor]:
        path = self._find(CLOUDS_FILE, CLOUDS_FILE_ENV)
        logger.debug("Loading clouds from %s", path)
        return decode_clouds(read_yaml(path), "clouds", str(path))

    def load_public_clouds(self) -> Dict[str, CloudDescriptor]:
        try:
            path = self._find(PUBLIC_CLOUDS_FILE, PUBLIC_CLOUDS_FILE_ENV)
        except SourceNotFoundError:
            logger.debug("No %s found, skipping public profiles", PUBLIC_CLOUDS_FILE)
            return {}
        return decode_clouds(read_yaml(path), "public-clouds", str(path))

    def load_secure_clouds(self) -> Dict[str, CloudDescriptor]:
        try:
            path = self._find(SECURE_CLOUDS_FILE, SECURE_CLOUDS_FILE_ENV)
        except SourceNotFoundError:
            logger.debug("No %s found, skipping secure overrides", SECURE_CLOUDS_FILE)
            return {}
        return decode_clouds(read_yaml(path), "clouds", str(path))


class DictCloudsSource(CloudsSource):
    """In-memory source built from already-parsed trees.

    ``clouds=None`` behaves like a missing clouds.yaml.
    """

    def __init__(
        self,
        clouds: Optional[Dict] = None,
        public_clouds: Optional[Dict] = None,
        secure_clouds: Optional[Dict] = None,
    ):
        self._clouds = clouds
        self._public = public_clouds or {}
        self._secure = secure_clouds or {}

    def load_clouds(self) -> Dict[str, CloudDescriptor]:
        if self._clouds is None:
            raise SourceNotFoundError(CLOUDS_FILE)
        return decode_clouds({"clouds": self._clouds}, "clouds")

    def load_public_clouds(self) -> Dict[str, CloudDescriptor]:
        return decode_clouds({"public-clouds": self._public}, "public-clouds")

    def load_secure_clouds(self) -> Dict[str, CloudDescriptor]:
        return decode_clouds({"clouds": self._secure}, "clouds")
