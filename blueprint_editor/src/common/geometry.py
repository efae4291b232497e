"""Grid geometry helpers: directions, footprints and version numbers."""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Iterator, List, Sequence, Tuple

from draftsman.utils import decode_version, encode_version

Cell = Tuple[int, int]
Position = Tuple[float, float]
Size = Tuple[int, int]


class Direction(IntEnum):
    """Cardinal directions in the 8-way numbering used on the wire."""

    NORTH = 0
    EAST = 2
    SOUTH = 4
    WEST = 6


DIRECTION_VECTORS = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}


# Neighbour expansion order used by grid searches
NEIGHBOUR_OFFSETS: Sequence[Cell] = ((0, -1), (1, 0), (0, 1), (-1, 0))


def rotate_direction(direction: int, counter_clockwise: bool = False) -> int:
    step = -2 if counter_clockwise else 2
    return (direction + step) % 8


def opposite_direction(direction: int) -> int:
    return (direction + 4) % 8


def quarter_turns(direction: int) -> int:
    """Number of clockwise quarter turns from north."""
    return (direction // 2) % 4


def rotate_offset(offset: Tuple[float, float], direction: int) -> Tuple[float, float]:
    """Rotate an offset defined for north into ``direction`` (clockwise)."""
    x, y = offset
    for _ in range(quarter_turns(direction)):
        x, y = -y, x
    # Normalise -0.0 so offsets compare and hash cleanly
    return (x + 0.0, y + 0.0)


def rotated_size(size: Size, direction: int) -> Size:
    width, height = size
    if quarter_turns(direction) % 2 == 1:
        return (height, width)
    return (width, height)


def footprint_origin(position: Position, size: Size) -> Cell:
    """Top-left tile covered by an entity centred at ``position``."""
    x, y = position
    width, height = size
    return (math.floor(x - width / 2.0 + 0.5), math.floor(y - height / 2.0 + 0.5))


def iter_cells(origin: Cell, size: Size) -> Iterator[Cell]:
    width, height = size
    for dx in range(width):
        for dy in range(height):
            yield (origin[0] + dx, origin[1] + dy)


def footprint_cells(position: Position, size: Size) -> List[Cell]:
    """All tiles covered by an entity centred at ``position``."""
    return list(iter_cells(footprint_origin(position, size), size))


def cell_of(point: Position) -> Cell:
    return (math.floor(point[0]), math.floor(point[1]))


def cell_center(cell: Cell) -> Position:
    return (cell[0] + 0.5, cell[1] + 0.5)


def distance(a: Position, b: Position) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def version_tuple(version_number: int) -> Tuple[int, int, int, int]:
    """Unpack a 64-bit game version number into (major, minor, patch, dev)."""
    return tuple(decode_version(version_number))


def version_number(version: Sequence[int]) -> int:
    """Pack a (major, minor[, patch[, dev]]) tuple into a game version number."""
    parts = list(version) + [0] * (4 - len(version))
    return encode_version(*parts[:4])
