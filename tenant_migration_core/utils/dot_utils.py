"""
Helpers for addressing nested mappings with dotted keys.

``flatten({"entity": {"address": {"city": "Oslo"}}})`` gives
``{"entity.address.city": "Oslo"}``; the getters and setters walk the
same paths through nested dicts.
"""

from typing import Any, Dict, Mapping, MutableMapping

_MISSING = object()


def flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Flatten nested mappings into a single level dict with dotted keys.

    Lists and other non-mapping values are kept as leaves. Empty mappings
    are kept as leaves so their key still exists.

    Args:
        data: Mapping to flatten
        prefix: Optional key prefix applied to every flattened key

    Returns:
        Flat dictionary of dotted keys to values
    """
    results: Dict[str, Any] = {}

    for key, value in data.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            results.update(flatten(value, dotted))
        else:
            results[dotted] = value

    return results


def get_dotted(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Get a value from nested mappings using a dotted key."""
    if key in data:
        return data[key]

    current: Any = data
    for segment in key.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return default
        current = current[segment]
    return current


def has_dotted(data: Mapping[str, Any], key: str) -> bool:
    """Check whether a dotted key resolves to a value (``None`` counts as absent)."""
    return get_dotted(data, key, _MISSING) not in (_MISSING, None)


def set_dotted(data: MutableMapping[str, Any], key: str, value: Any) -> None:
    """
    Set a value in nested mappings using a dotted key.

    Intermediate dictionaries are created as needed; a non-mapping value in
    the way is replaced.
    """
    segments = key.split(".")
    current = data
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, MutableMapping):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value
