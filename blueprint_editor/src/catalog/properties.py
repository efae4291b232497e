"""Per-family property schemas for entity configuration.

Entity property bags are keyed by the wire-format field names. Each prototype
family (the game's prototype ``type``) accepts a fixed set of keys with fixed
JSON value types, on top of the keys every entity may carry.
"""

from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

JSONTypes = Tuple[type, ...]

_DICT = (dict,)
_LIST = (list,)
_STR = (str,)
_INT = (int,)
_BOOL = (bool,)
_NUMBER = (int, float)

COMMON_PROPERTIES: Mapping[str, JSONTypes] = {
    "control_behavior": _DICT,
    "tags": _DICT,
    "items": (dict, list),
}

FAMILY_PROPERTIES: Mapping[str, Mapping[str, JSONTypes]] = {
    "assembling-machine": {"recipe": _STR},
    "rocket-silo": {"recipe": _STR, "auto_launch": _BOOL},
    "inserter": {
        "filters": _LIST,
        "filter_mode": _STR,
        "override_stack_size": _INT,
        "drop_position": _DICT,
        "pickup_position": _DICT,
    },
    "container": {"bar": _INT},
    "logistic-container": {
        "bar": _INT,
        "request_filters": (list, dict),
        "request_from_buffers": _BOOL,
    },
    "infinity-container": {"bar": _INT, "infinity_settings": _DICT},
    "cargo-wagon": {"bar": _INT, "inventory": _DICT},
    "splitter": {"input_priority": _STR, "output_priority": _STR, "filter": (str, dict)},
    "loader": {"filters": _LIST},
    "loader-1x1": {"filters": _LIST},
    "lamp": {"color": _DICT, "always_on": _BOOL},
    "power-switch": {"switch_state": _BOOL},
    "programmable-speaker": {"parameters": _DICT, "alert_parameters": _DICT},
    "electric-energy-interface": {
        "buffer_size": _NUMBER,
        "power_production": _NUMBER,
        "power_usage": _NUMBER,
    },
    "heat-interface": {"temperature": _NUMBER, "mode": _STR},
    "infinity-pipe": {"infinity_settings": _DICT},
    "constant-combinator": {},
    "arithmetic-combinator": {},
    "decider-combinator": {},
    "selector-combinator": {},
    "display-panel": {"text": _STR, "icon": _DICT, "always_show": _BOOL},
    "mining-drill": {},
    "furnace": {},
    "beacon": {},
    "lab": {},
    "pump": {},
    "offshore-pump": {},
    "roboport": {},
    "electric-pole": {},
    "transport-belt": {},
    "underground-belt": {},
    "pipe": {},
    "pipe-to-ground": {},
    "storage-tank": {},
    "wall": {},
    "gate": {},
}

# Keys never transferred by paste-settings
_NOT_PASTED = frozenset({"tags", "drop_position", "pickup_position", "control_behavior"})


def property_schema(prototype_type: str) -> Dict[str, JSONTypes]:
    schema = dict(COMMON_PROPERTIES)
    schema.update(FAMILY_PROPERTIES.get(prototype_type, {}))
    return schema


def settings_keys(prototype_type: str) -> FrozenSet[str]:
    """Keys copied when pasting settings between entities of one family."""
    return frozenset(property_schema(prototype_type)) - _NOT_PASTED


def check_value(prototype_type: str, key: str, value: Any) -> Optional[str]:
    """Return a reason string if ``key=value`` is not valid for the family."""
    schema = property_schema(prototype_type)
    if key not in schema:
        return f"'{key}' is not a property of {prototype_type} entities"
    if value is None:
        return None
    expected = schema[key]
    # bool is an int subclass; keep the two apart
    if isinstance(value, bool) and bool not in expected:
        return f"'{key}' expects {_describe(expected)}, got bool"
    if not isinstance(value, expected):
        return f"'{key}' expects {_describe(expected)}, got {type(value).__name__}"
    return None


def _describe(types: JSONTypes) -> str:
    return " or ".join(t.__name__ for t in types)
