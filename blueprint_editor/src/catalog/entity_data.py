"""Prototype fields read from draftsman's raw entity data."""

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple
import math

from blueprint_editor.src.common.constants import (
    CARDINAL_DIRECTIONS,
    NON_ROTATABLE_PROTOTYPE_TYPES,
)
from blueprint_editor.src.common.geometry import (
    DIRECTION_VECTORS,
    quarter_turns,
    rotate_offset,
)

Offset = Tuple[float, float]


def _as_offset(raw: Any) -> Optional[Offset]:
    if isinstance(raw, Mapping):
        if "x" in raw and "y" in raw:
            return (float(raw["x"]), float(raw["y"]))
        return None
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return (float(raw[0]), float(raw[1]))
    return None


def _iter_dicts(container: Any) -> Iterator[Mapping[str, Any]]:
    """Yield dict members of a Lua-converted list (which may arrive as a dict)."""
    if isinstance(container, Mapping):
        if "pipe_connections" in container or "position" in container:
            yield container
            return
        container = list(container.values())
    if isinstance(container, (list, tuple)):
        for item in container:
            if isinstance(item, Mapping):
                yield item


def _iter_fluid_boxes(prototype: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    for key in ("fluid_box", "input_fluid_box", "output_fluid_box"):
        box = prototype.get(key)
        if isinstance(box, Mapping):
            yield box
    yield from _iter_dicts(prototype.get("fluid_boxes"))


def footprint_from_data(entity_info: Mapping[str, Any]) -> Tuple[int, int]:
    """Footprint from explicit tile size, falling back to the collision box."""
    width = entity_info.get("tile_width")
    height = entity_info.get("tile_height")

    if width is not None and height is not None:
        return (max(1, int(width)), max(1, int(height)))

    collision_box = entity_info.get("collision_box")
    if collision_box:
        (left, top), (right, bottom) = (
            _as_offset(collision_box[0]),
            _as_offset(collision_box[1]),
        )
        width = max(1, math.ceil(right - left))
        height = max(1, math.ceil(bottom - top))
        return (width, height)

    return (1, 1)


def fluid_connections_from_data(
    prototype: Mapping[str, Any],
) -> Dict[int, Tuple[Offset, ...]]:
    """Per-direction offsets of the cells reached by surface pipe connections.

    Two data layouts are understood: 1.x connections store the outside cell in
    ``position``/``positions``; 2.x connections store an inside cell plus the
    ``direction`` (16-way) the connection faces.
    """
    result: Dict[int, list] = {direction: [] for direction in CARDINAL_DIRECTIONS}

    for box in _iter_fluid_boxes(prototype):
        for conn in _iter_dicts(box.get("pipe_connections")):
            if conn.get("connection_type", "normal") != "normal":
                continue
            if "max_underground_distance" in conn:
                continue

            positions = conn.get("positions")
            for direction in CARDINAL_DIRECTIONS:
                if isinstance(positions, (list, tuple)) and len(positions) == 4:
                    offset = _as_offset(positions[quarter_turns(direction)])
                else:
                    base = _as_offset(conn.get("position"))
                    offset = rotate_offset(base, direction) if base else None
                if offset is None:
                    continue

                if "direction" in conn:
                    facing = (int(conn["direction"]) // 2 + direction) % 8
                    step = DIRECTION_VECTORS[facing]
                    offset = (offset[0] + step[0], offset[1] + step[1])

                if offset not in result[direction]:
                    result[direction].append(offset)

    return {direction: tuple(offsets) for direction, offsets in result.items()}


def wire_distance_from_data(prototype: Mapping[str, Any]) -> Optional[float]:
    for key in ("maximum_wire_distance", "circuit_wire_max_distance"):
        value = prototype.get(key)
        if isinstance(value, (int, float)) and value > 0:
            return float(value)
    return None


def rotatable_from_data(prototype: Mapping[str, Any]) -> bool:
    flags = prototype.get("flags") or ()
    if "not-rotatable" in flags:
        return False
    return prototype.get("type") not in NON_ROTATABLE_PROTOTYPE_TYPES
