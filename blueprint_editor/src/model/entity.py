from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from blueprint_editor.src.catalog.catalog import CatalogEntry
from blueprint_editor.src.common.constants import COPPER, WIRE_COLORS
from blueprint_editor.src.common.geometry import (
    Cell,
    Position,
    Size,
    footprint_cells,
    footprint_origin,
    opposite_direction,
)

"""Entities, tiles and typed connection edges."""


class ConnectionType(Enum):
    TRANSPORT = "transport"
    FLUID = "fluid"
    WIRE = "wire"


@dataclass(frozen=True)
class Connection:
    """A symmetric edge between two entities.

    Wire endpoints are normalised so that the same wire built from either side
    compares equal. ``source_circuit``/``target_circuit`` select the connector
    on entities with two sides (combinator input=1, output=2).
    """

    source_id: int
    target_id: int
    color: str = "red"
    source_circuit: int = 1
    target_circuit: int = 1
    type: ConnectionType = ConnectionType.WIRE

    def __post_init__(self) -> None:
        if (self.target_id, self.target_circuit) < (self.source_id, self.source_circuit):
            source = (self.source_id, self.source_circuit)
            object.__setattr__(self, "source_id", self.target_id)
            object.__setattr__(self, "source_circuit", self.target_circuit)
            object.__setattr__(self, "target_id", source[0])
            object.__setattr__(self, "target_circuit", source[1])

    @property
    def is_copper(self) -> bool:
        return self.color == COPPER

    def endpoints(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        return ((self.source_id, self.source_circuit), (self.target_id, self.target_circuit))

    def other(self, entity_id: int) -> int:
        return self.target_id if entity_id == self.source_id else self.source_id


VALID_WIRE_COLORS = WIRE_COLORS + (COPPER,)


@dataclass(frozen=True)
class EntitySnapshot:
    """Everything needed to recreate an entity exactly."""

    entity_id: int
    name: str
    position: Position
    direction: int = 0
    direction_type: Optional[str] = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    connections: Tuple[Connection, ...] = ()


@dataclass(eq=False)
class Entity:
    """A placed entity; identity is its ``entity_id``."""

    entity_id: int
    entry: CatalogEntry
    position: Position
    direction: int = 0
    direction_type: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)
    connections: Set[Connection] = field(default_factory=set)

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def footprint(self) -> Size:
        return self.entry.footprint(self.direction)

    @property
    def origin(self) -> Cell:
        return footprint_origin(self.position, self.footprint)

    def cells(self) -> List[Cell]:
        return footprint_cells(self.position, self.footprint)

    @property
    def flow_direction(self) -> int:
        """Direction items or fluid leave the entity.

        Flow-typed kinds stored as ``output`` face the opposite way.
        """
        if self.entry.flow_typed and self.direction_type == "output":
            return opposite_direction(self.direction)
        return self.direction

    def snapshot(self) -> EntitySnapshot:
        return EntitySnapshot(
            entity_id=self.entity_id,
            name=self.name,
            position=self.position,
            direction=self.direction,
            direction_type=self.direction_type,
            properties=copy.deepcopy(self.properties),
            connections=tuple(sorted(self.connections, key=_connection_key)),
        )

    def __repr__(self) -> str:
        return (
            f"Entity(#{self.entity_id} {self.name} at {self.position} "
            f"dir={self.direction})"
        )


def _connection_key(connection: Connection):
    return (connection.endpoints(), connection.color)


@dataclass(frozen=True)
class Tile:
    """A ground tile covering exactly one cell."""

    name: str
    position: Cell
