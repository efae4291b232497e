"""Identity-stable entity graph with spatial lookup and typed links."""

from __future__ import annotations

import copy
from typing import Collection, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from blueprint_editor.src.catalog.catalog import Catalog, CatalogEntry
from blueprint_editor.src.common.constants import DEFAULT_CONFIG, EditorConfig
from blueprint_editor.src.common.geometry import (
    DIRECTION_VECTORS,
    NEIGHBOUR_OFFSETS,
    Cell,
    Position,
    Size,
    cell_of,
    distance,
    footprint_origin,
    iter_cells,
    opposite_direction,
)
from blueprint_editor.src.common.tile_grid import TileGrid
from .entity import Connection, ConnectionType, Entity, EntitySnapshot, VALID_WIRE_COLORS
from .exceptions import (
    InvalidConnectionError,
    InvalidDirectionError,
    PlacementConflictError,
    UnknownEntityIdError,
)


class EntityGraph:
    """Owns the entities of one blueprint.

    Identifiers come from a monotonic counter and are never handed out twice,
    so history entries can keep referring to an id after the entity has been
    removed and restored. Iteration follows insertion order.

    Only wire edges are stored. Transport and fluid edges follow from
    placement and are answered by the query methods.
    """

    def __init__(self, catalog: Catalog, config: EditorConfig = DEFAULT_CONFIG) -> None:
        self.catalog = catalog
        self.config = config
        self._entities: Dict[int, Entity] = {}
        self._grid = TileGrid()
        self._next_id = 1

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def allocate_id(self) -> int:
        entity_id = self._next_id
        self._next_id += 1
        return entity_id

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def ids(self) -> List[int]:
        return list(self._entities)

    def get(self, entity_id: int) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def require(self, entity_id: int) -> Entity:
        entity = self._entities.get(entity_id)
        if entity is None:
            raise UnknownEntityIdError(entity_id)
        return entity

    # ------------------------------------------------------------------
    # Spatial queries
    # ------------------------------------------------------------------

    def entity_at(self, cell: Cell) -> Optional[Entity]:
        owner = self._grid.owner_at(cell)
        return self._entities.get(owner) if owner is not None else None

    def entities_in(self, cells: Iterable[Cell]) -> List[Entity]:
        seen: Dict[int, Entity] = {}
        for cell in cells:
            entity = self.entity_at(cell)
            if entity is not None:
                seen.setdefault(entity.entity_id, entity)
        return list(seen.values())

    def occupied_cells(self, exclude: Collection[int] = ()) -> Set[Cell]:
        return self._grid.occupied_cells(exclude)

    def in_bounds(self, origin: Cell, footprint: Size) -> bool:
        extent = self.config.blueprint_extent
        return (
            -extent <= origin[0]
            and -extent <= origin[1]
            and origin[0] + footprint[0] <= extent
            and origin[1] + footprint[1] <= extent
        )

    def bounds(self) -> Optional[Tuple[int, int, int, int]]:
        """Occupied rectangle as (min_x, min_y, max_x, max_y), inclusive cells."""
        cells = self._grid.occupied_cells()
        if not cells:
            return None
        xs = [cell[0] for cell in cells]
        ys = [cell[1] for cell in cells]
        return (min(xs), min(ys), max(xs), max(ys))

    def check_placement(
        self,
        entry: CatalogEntry,
        position: Position,
        direction: int,
        ignore: Collection[int] = (),
        entity_id: Optional[int] = None,
    ) -> None:
        """Raise :class:`PlacementConflictError` if the footprint is not free."""
        footprint = entry.footprint(direction)
        origin = footprint_origin(position, footprint)
        if not self.in_bounds(origin, footprint):
            raise PlacementConflictError(
                f"{entry.name} at {position} leaves the blueprint bounds",
                entity_id=entity_id,
                out_of_bounds=True,
            )
        blockers = self._grid.blockers(origin, footprint, ignore)
        if blockers:
            listed = ", ".join(f"#{b}" for b in sorted(blockers))
            raise PlacementConflictError(
                f"{entry.name} at {position} overlaps {listed}",
                entity_id=entity_id,
                blockers=blockers,
            )

    def can_place(
        self,
        entry: CatalogEntry,
        position: Position,
        direction: int = 0,
        ignore: Collection[int] = (),
    ) -> bool:
        try:
            self.check_placement(entry, position, direction, ignore)
        except PlacementConflictError:
            return False
        return True

    def check_direction(self, entry: CatalogEntry, direction: int) -> None:
        if direction not in entry.valid_directions():
            raise InvalidDirectionError(
                f"Direction {direction} is not valid for {entry.name} "
                f"(valid: {', '.join(map(str, entry.valid_directions()))})"
            )

    # ------------------------------------------------------------------
    # Mutation primitives (used by history entries and the codec)
    # ------------------------------------------------------------------

    def insert(self, entity: Entity) -> Entity:
        """Add ``entity`` under its own id; its stored wires are re-attached."""
        if entity.entity_id in self._entities:
            raise PlacementConflictError(
                f"Entity id {entity.entity_id} is already in use",
                entity_id=entity.entity_id,
            )
        self.check_direction(entity.entry, entity.direction)
        self.check_placement(
            entity.entry, entity.position, entity.direction, entity_id=entity.entity_id
        )

        wires = list(entity.connections)
        entity.connections = set()
        self._entities[entity.entity_id] = entity
        self._grid.mark_occupied(entity.origin, entity.footprint, entity.entity_id)
        self._next_id = max(self._next_id, entity.entity_id + 1)

        for connection in wires:
            if connection.other(entity.entity_id) in self._entities:
                self.add_connection(connection)
        return entity

    def restore(self, snapshot: EntitySnapshot) -> Entity:
        """Re-create an entity from a snapshot, keeping its id and wires."""
        entity = Entity(
            entity_id=snapshot.entity_id,
            entry=self.catalog.lookup(snapshot.name),
            position=snapshot.position,
            direction=snapshot.direction,
            direction_type=snapshot.direction_type,
            properties=copy.deepcopy(dict(snapshot.properties)),
            connections=set(snapshot.connections),
        )
        return self.insert(entity)

    def discard(self, entity_id: int) -> Entity:
        """Remove an entity and sever its wires on both ends.

        The returned entity still lists the severed wires so callers can
        snapshot it.
        """
        entity = self.require(entity_id)
        wires = set(entity.connections)
        for connection in wires:
            peer = self._entities.get(connection.other(entity_id))
            if peer is not None:
                peer.connections.discard(connection)
        self._grid.release(entity.origin, entity.footprint, entity_id)
        del self._entities[entity_id]
        entity.connections = wires
        return entity

    def relocate(self, entity_id: int, position: Position) -> None:
        entity = self.require(entity_id)
        self.check_placement(
            entity.entry, position, entity.direction, ignore=(entity_id,), entity_id=entity_id
        )
        self._grid.release(entity.origin, entity.footprint, entity_id)
        entity.position = position
        self._grid.mark_occupied(entity.origin, entity.footprint, entity_id)

    def reorient(self, entity_id: int, direction: int) -> None:
        entity = self.require(entity_id)
        self.check_direction(entity.entry, direction)
        self.check_placement(
            entity.entry, entity.position, direction, ignore=(entity_id,), entity_id=entity_id
        )
        self._grid.release(entity.origin, entity.footprint, entity_id)
        entity.direction = direction
        self._grid.mark_occupied(entity.origin, entity.footprint, entity_id)

    def add_connection(self, connection: Connection) -> None:
        source = self.require(connection.source_id)
        target = self.require(connection.target_id)
        source.connections.add(connection)
        target.connections.add(connection)

    def remove_connection(self, connection: Connection) -> bool:
        removed = False
        for entity_id in (connection.source_id, connection.target_id):
            entity = self._entities.get(entity_id)
            if entity is not None and connection in entity.connections:
                entity.connections.discard(connection)
                removed = True
        return removed

    def has_connection(self, connection: Connection) -> bool:
        source = self._entities.get(connection.source_id)
        return source is not None and connection in source.connections

    # ------------------------------------------------------------------
    # Link rules
    # ------------------------------------------------------------------

    def link_problem(
        self,
        source_id: int,
        target_id: int,
        link_type: ConnectionType,
        color: Optional[str] = None,
    ) -> Optional[str]:
        """Why the two entities cannot be linked, or None if they can."""
        source = self.require(source_id)
        target = self.require(target_id)
        if source_id == target_id:
            return "an entity cannot be linked to itself"

        if link_type is ConnectionType.TRANSPORT:
            if self._emits_into(source, target) or self._emits_into(target, source):
                return None
            return f"{source.name} and {target.name} are not belt-adjacent"

        if link_type is ConnectionType.FLUID:
            if self._fluid_aligned(source, target):
                return None
            return f"{source.name} and {target.name} have no aligned pipe connections"

        color = color or "red"
        if color not in VALID_WIRE_COLORS:
            return f"unknown wire color '{color}'"
        if color == "copper":
            if not (source.entry.accepts_copper and target.entry.accepts_copper):
                return "copper wires only join electric poles and power switches"
            reach = min(self._wire_reach(source), self._wire_reach(target))
        else:
            reach = max(self._wire_reach(source), self._wire_reach(target))
        span = distance(source.position, target.position)
        if span > reach:
            return f"wire span {span:.1f} exceeds reach {reach:.1f}"
        return None

    def can_link(
        self,
        source_id: int,
        target_id: int,
        link_type: ConnectionType,
        color: Optional[str] = None,
    ) -> bool:
        return self.link_problem(source_id, target_id, link_type, color) is None

    def validate_wire(self, connection: Connection) -> None:
        problem = self.link_problem(
            connection.source_id, connection.target_id, ConnectionType.WIRE, connection.color
        )
        if problem is not None:
            raise InvalidConnectionError(problem)

    def can_link_settings(self, source_id: int, target_id: int) -> bool:
        """Settings can only be pasted between distinct entities of one family."""
        source = self.require(source_id)
        target = self.require(target_id)
        return source_id != target_id and source.entry.family == target.entry.family

    def connections(self, entity_id: int) -> Tuple[Connection, ...]:
        return tuple(self.require(entity_id).connections)

    def neighbors(
        self, entity_id: int, link_type: Optional[ConnectionType] = None
    ) -> List[int]:
        """Ids linked to ``entity_id`` (all link types when none is given)."""
        entity = self.require(entity_id)
        found: List[int] = []

        if link_type in (None, ConnectionType.WIRE):
            for connection in entity.connections:
                other = connection.other(entity_id)
                if other not in found:
                    found.append(other)

        if link_type in (None, ConnectionType.TRANSPORT, ConnectionType.FLUID):
            types = (
                (ConnectionType.TRANSPORT, ConnectionType.FLUID)
                if link_type is None
                else (link_type,)
            )
            for candidate in self._adjacent_entities(entity):
                if candidate.entity_id in found:
                    continue
                if any(
                    self.link_problem(entity_id, candidate.entity_id, t) is None
                    for t in types
                ):
                    found.append(candidate.entity_id)
        return found

    def _adjacent_entities(self, entity: Entity) -> List[Entity]:
        own = set(entity.cells())
        ring = set()
        for x, y in own:
            for dx, dy in NEIGHBOUR_OFFSETS:
                cell = (x + dx, y + dy)
                if cell not in own:
                    ring.add(cell)
        return sorted(
            (e for e in self.entities_in(ring) if e.entity_id != entity.entity_id),
            key=lambda e: e.entity_id,
        )

    def _emits_into(self, source: Entity, target: Entity) -> bool:
        if not (source.entry.is_transport and target.entry.is_transport):
            return False
        if source.entry.prototype_type == "underground-belt" and source.direction_type == "input":
            return False
        if target.entry.prototype_type == "underground-belt" and target.direction_type == "output":
            return False

        flow = source.flow_direction
        if target.flow_direction == opposite_direction(flow):
            return False
        dx, dy = DIRECTION_VECTORS[flow]
        own = set(source.cells())
        front = {(x + dx, y + dy) for x, y in own} - own
        return bool(front & set(target.cells()))

    def _fluid_reach(self, entity: Entity) -> Set[Cell]:
        x, y = entity.position
        return {
            cell_of((x + ox, y + oy)) for ox, oy in entity.entry.fluid_offsets(entity.direction)
        }

    def _fluid_aligned(self, a: Entity, b: Entity) -> bool:
        return bool(self._fluid_reach(a) & set(b.cells())) and bool(
            self._fluid_reach(b) & set(a.cells())
        )

    def _wire_reach(self, entity: Entity) -> float:
        return entity.entry.max_wire_distance or self.config.default_wire_distance


def cells_for(entry: CatalogEntry, position: Position, direction: int) -> List[Cell]:
    footprint = entry.footprint(direction)
    return list(iter_cells(footprint_origin(position, footprint), footprint))
