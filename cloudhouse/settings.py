#!/usr/bin/env python3
# CUI // SP-CTI
"""Runtime settings: poll limits, fan-out width, environment prefix.

Reads args/cloudhouse_config.yaml (or the file named by CLOUDHOUSE_CONFIG).
String values may use ${VAR:-default} expansion. Missing or unreadable
files fall back to built-in defaults.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from cloudhouse.config.merge import merge

logger = logging.getLogger("cloudhouse.settings")

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR / "args" / "cloudhouse_config.yaml"
CONFIG_PATH_ENV = "CLOUDHOUSE_CONFIG"

DEFAULTS: Dict[str, Any] = {
    "env_prefix": "OS_",
    "poll": {"max_attempts": 50, "interval_seconds": 5.0},
    "cluster": {"max_attempts": 600, "interval_seconds": 1.0},
    "fanout": {"max_workers": 16},
}


def _expand_env(value, env: Mapping[str, str]):
    """Expand ${VAR:-default} patterns in string values."""
    if not isinstance(value, str):
        return value
    pattern = r'\$\{([^}]+)\}'

    def replacer(match):
        expr = match.group(1)
        if ":-" in expr:
            var, default = expr.split(":-", 1)
            return env.get(var, default)
        return env.get(expr, match.group(0))
    return re.sub(pattern, replacer, value)


def _expand_tree(tree, env: Mapping[str, str]):
    if isinstance(tree, dict):
        return {k: _expand_tree(v, env) for k, v in tree.items()}
    if isinstance(tree, list):
        return [_expand_tree(v, env) for v in tree]
    return _expand_env(tree, env)


class Settings:
    """Typed view over the merged settings tree."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = merge(data or {}, copy.deepcopy(DEFAULTS))

    def _number(self, section: str, key: str, cast):
        values = self._data.get(section)
        if not isinstance(values, dict):
            logger.warning("Invalid %s section %r, using defaults", section, values)
            values = DEFAULTS[section]
        raw = values.get(key, DEFAULTS[section][key])
        try:
            return cast(raw)
        except (TypeError, ValueError):
            logger.warning("Invalid %s.%s=%r, using default %s",
                           section, key, raw, DEFAULTS[section][key])
            return DEFAULTS[section][key]

    @property
    def env_prefix(self) -> str:
        return str(self._data.get("env_prefix") or DEFAULTS["env_prefix"])

    @property
    def poll_max_attempts(self) -> int:
        return self._number("poll", "max_attempts", int)

    @property
    def poll_interval(self) -> float:
        return self._number("poll", "interval_seconds", float)

    @property
    def cluster_max_attempts(self) -> int:
        return self._number("cluster", "max_attempts", int)

    @property
    def cluster_interval(self) -> float:
        return self._number("cluster", "interval_seconds", float)

    @property
    def fanout_max_workers(self) -> int:
        return self._number("fanout", "max_workers", int)

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)


def load_settings(
    config_path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from YAML, falling back to defaults."""
    env = os.environ if env is None else env
    path = Path(config_path or env.get(CONFIG_PATH_ENV, "") or DEFAULT_CONFIG_PATH)
    if not path.exists():
        logger.warning("Settings file not found at %s, using defaults", path)
        return Settings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Failed to load settings from %s: %s", path, exc)
        return Settings()
    if not isinstance(data, dict):
        logger.error("Settings file %s is not a mapping, using defaults", path)
        return Settings()
    return Settings(_expand_tree(data, env))
