# CUI // SP-CTI
"""Recursive structural merge of configuration trees.

Trees are what yaml.safe_load produces: dicts with string keys, lists,
and scalars. ``merge(override, inferior)`` rules, applied recursively:

  - dict + dict: merged key by key; keys only in ``inferior`` carry through
  - list + list: ``override + inferior`` (lists are appended, not replaced)
  - empty override (None, "", 0) loses to ``inferior``
  - anything else: ``override`` wins, including mismatched shapes

Booleans are real values: ``False`` in the override layer wins.
"""

from typing import Any, Union

from cloudhouse.config.models import CloudDescriptor
from cloudhouse.resilience.errors import ConfigurationError, MergeFailure


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0
    return False


def merge(override: Any, inferior: Any) -> Any:
    """Merge two trees; ``override`` takes precedence where both define a value.

    Inputs are never mutated.
    """
    if isinstance(override, dict):
        if not isinstance(inferior, dict):
            return override
        merged = dict(override)
        for key, value in inferior.items():
            if key in override:
                merged[key] = merge(override[key], value)
            else:
                merged[key] = value
        return merged

    if isinstance(override, list):
        if not isinstance(inferior, list):
            return override
        return list(override) + list(inferior)

    if _is_empty(override):
        return inferior
    return override


def _as_tree(value: Union[CloudDescriptor, dict, None]) -> Any:
    if isinstance(value, CloudDescriptor):
        return value.to_dict()
    return value


def merge_clouds(
    override: Union[CloudDescriptor, dict, None],
    inferior: Union[CloudDescriptor, dict, None],
) -> CloudDescriptor:
    """Merge two cloud entries (auth sections included) into a new descriptor.

    Raises:
        MergeFailure: the merged tree does not decode into a CloudDescriptor.
    """
    merged = merge(_as_tree(override), _as_tree(inferior))
    if merged is not None and not isinstance(merged, dict):
        raise MergeFailure(
            f"merged cloud entry is a {type(merged).__name__}, expected a mapping")
    try:
        return CloudDescriptor.from_dict(merged)
    except ConfigurationError as exc:
        raise MergeFailure(f"could not decode merged cloud entry: {exc}",
                           config_key=exc.config_key) from exc
