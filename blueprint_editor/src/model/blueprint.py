"""
Blueprint document: entity graph, tiles, metadata and undo history.

Every edit operation validates completely before it builds a history entry,
so a rejected edit leaves the document untouched. Accepted edits go through
:class:`History` and can be undone.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from blueprint_editor.src.catalog.catalog import Catalog, CatalogEntry
from blueprint_editor.src.common.constants import DEFAULT_CONFIG, EditorConfig
from blueprint_editor.src.common.geometry import (
    Cell,
    Position,
    cell_of,
    rotate_direction,
)
from blueprint_editor.src.history.actions import (
    AddConnection,
    AddEntity,
    ChangeDirectionType,
    ChangeMetadata,
    ChangeProperty,
    MoveEntity,
    PlaceTile,
    RemoveConnection,
    RemoveEntity,
    RemoveTile,
    RotateEntity,
)
from blueprint_editor.src.history.history import History
from blueprint_editor.src.layout.conduit_planner import (
    ConduitLayout,
    ExtractorSpec,
    generate_conduits,
)
from .entity import Connection, Entity, EntitySnapshot, Tile
from .entity_graph import EntityGraph
from .exceptions import IncompatibleSettingsError, InvalidConnectionError, PropertyError

logger = logging.getLogger(__name__)

DIRECTION_TYPES = ("input", "output")


@dataclass(frozen=True)
class Icon:
    """One of up to four signals shown on the blueprint item."""

    index: int
    signal_type: str
    name: str


class Blueprint:
    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        config: EditorConfig = DEFAULT_CONFIG,
        name: Optional[str] = None,
        description: str = "",
        icons: Iterable[Icon] = (),
        version: Optional[Tuple[int, int, int, int]] = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.catalog = catalog if catalog is not None else Catalog.default()
        self.config = config
        self.name = name if name is not None else config.default_blueprint_name
        self.description = description
        self.icons: List[Icon] = list(icons)
        self.version = tuple(version) if version is not None else config.default_version
        self.extra: Dict[str, Any] = dict(extra or {})

        self.graph = EntityGraph(self.catalog, config)
        self._tiles: Dict[Cell, Tile] = {}
        self.history = History(self, config)
        self.last_layout: Optional[ConduitLayout] = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def entities(self) -> List[Entity]:
        return list(self.graph)

    @property
    def tiles(self) -> List[Tile]:
        return list(self._tiles.values())

    def get_entity(self, entity_id: int) -> Optional[Entity]:
        return self.graph.get(entity_id)

    def tile_at(self, cell: Cell) -> Optional[Tile]:
        return self._tiles.get(cell)

    def is_empty(self) -> bool:
        return len(self.graph) == 0 and not self._tiles

    def bounds(self) -> Optional[Tuple[int, int, int, int]]:
        """Smallest rectangle of cells holding every entity and tile."""
        corners = []
        entity_bounds = self.graph.bounds()
        if entity_bounds is not None:
            corners.append(entity_bounds)
        for cell in self._tiles:
            corners.append((cell[0], cell[1], cell[0], cell[1]))
        if not corners:
            return None
        return (
            min(c[0] for c in corners),
            min(c[1] for c in corners),
            max(c[2] for c in corners),
            max(c[3] for c in corners),
        )

    def __repr__(self) -> str:
        return (
            f"Blueprint({self.name!r}, entities={len(self.graph)}, "
            f"tiles={len(self._tiles)})"
        )

    # ------------------------------------------------------------------
    # Primitives used by history entries
    # ------------------------------------------------------------------

    def write_tile(self, cell: Cell, name: Optional[str]) -> None:
        if name is None:
            self._tiles.pop(cell, None)
        else:
            self._tiles[cell] = Tile(name, cell)

    def write_metadata(self, field_name: str, value: Optional[str]) -> None:
        if field_name not in ("name", "description"):
            raise AttributeError(field_name)
        setattr(self, field_name, value)

    # ------------------------------------------------------------------
    # Entity edits
    # ------------------------------------------------------------------

    def add_entity(
        self,
        name: str,
        position: Position,
        direction: int = 0,
        direction_type: Optional[str] = None,
        properties: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """Place a new entity centred at ``position`` and return its id."""
        entry = self.catalog.lookup(name)
        self.graph.check_direction(entry, direction)
        direction_type = self._check_direction_type(None, entry, direction_type)
        merged = self._check_properties(None, entry, properties)
        position = (float(position[0]), float(position[1]))
        self.graph.check_placement(entry, position, direction)

        snapshot = EntitySnapshot(
            entity_id=self.graph.allocate_id(),
            name=name,
            position=position,
            direction=direction,
            direction_type=direction_type,
            properties=merged,
        )
        self.history.apply(AddEntity(snapshot))
        return snapshot.entity_id

    def remove_entity(self, entity_id: int) -> bool:
        entity = self.graph.get(entity_id)
        if entity is None:
            logger.debug("remove_entity: no entity #%s", entity_id)
            return False
        self.history.apply(RemoveEntity(entity.snapshot()))
        return True

    def move_entity(self, entity_id: int, delta: Position) -> bool:
        """Translate an entity; returns False for a zero delta.

        Raises PlacementConflictError, without moving anything, when the new
        footprint overlaps another entity or leaves the document bounds.
        """
        entity = self.graph.require(entity_id)
        if delta[0] == 0 and delta[1] == 0:
            return False
        target = (entity.position[0] + delta[0], entity.position[1] + delta[1])
        self.graph.check_placement(
            entity.entry, target, entity.direction, ignore=(entity_id,), entity_id=entity_id
        )
        self.history.apply(MoveEntity(entity_id, (delta[0], delta[1])))
        return True

    def rotate_entity(self, entity_id: int, counter_clockwise: bool = False) -> bool:
        entity = self.graph.require(entity_id)
        if not entity.entry.rotatable:
            return False
        new_direction = rotate_direction(entity.direction, counter_clockwise)
        self.graph.check_placement(
            entity.entry,
            entity.position,
            new_direction,
            ignore=(entity_id,),
            entity_id=entity_id,
        )
        self.history.apply(RotateEntity(entity_id, entity.direction, new_direction))
        return True

    def set_direction_type(self, entity_id: int, direction_type: str) -> bool:
        entity = self.graph.require(entity_id)
        direction_type = self._check_direction_type(entity_id, entity.entry, direction_type)
        if direction_type == entity.direction_type:
            return False
        self.history.apply(
            ChangeDirectionType(entity_id, entity.direction_type, direction_type)
        )
        return True

    def set_property(self, entity_id: int, key: str, value: Any) -> bool:
        """Set one property; ``None`` removes the key."""
        entity = self.graph.require(entity_id)
        reason = self.catalog.check_property(entity.name, key, value)
        if reason is not None:
            raise PropertyError(entity_id, key, reason)
        old = entity.properties.get(key)
        if old == value:
            return False
        self.history.apply(
            ChangeProperty(entity_id, key, copy.deepcopy(old), copy.deepcopy(value))
        )
        return True

    # ------------------------------------------------------------------
    # Wires
    # ------------------------------------------------------------------

    def connect(
        self,
        source_id: int,
        target_id: int,
        color: str = "red",
        source_circuit: int = 1,
        target_circuit: int = 1,
    ) -> Connection:
        for circuit in (source_circuit, target_circuit):
            if circuit not in (1, 2):
                raise InvalidConnectionError(f"Circuit id must be 1 or 2, got {circuit}")
        connection = Connection(source_id, target_id, color, source_circuit, target_circuit)
        self.graph.validate_wire(connection)
        if not self.graph.has_connection(connection):
            self.history.apply(AddConnection(connection))
        return connection

    def disconnect(self, connection: Connection) -> bool:
        if not self.graph.has_connection(connection):
            return False
        self.history.apply(RemoveConnection(connection))
        return True

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def can_paste_settings(self, source_id: int, target_id: int) -> bool:
        return self.graph.can_link_settings(source_id, target_id)

    def paste_settings(self, source_id: int, target_id: int) -> bool:
        """Copy the source's configuration onto the target as one undo step."""
        if not self.graph.can_link_settings(source_id, target_id):
            source = self.graph.require(source_id)
            target = self.graph.require(target_id)
            raise IncompatibleSettingsError(
                source_id,
                target_id,
                f"Cannot paste settings of {source.name} onto {target.name}",
            )
        source = self.graph.require(source_id)
        target = self.graph.require(target_id)
        keys = self.catalog.settings_keys(target.name)

        changes = []
        for key in sorted(keys):
            new = source.properties.get(key)
            old = target.properties.get(key)
            if new != old:
                changes.append(
                    ChangeProperty(target_id, key, copy.deepcopy(old), copy.deepcopy(new))
                )
        if not changes:
            return False
        with self.history.transaction(f"Paste settings onto #{target_id}"):
            for change in changes:
                self.history.apply(change)
        return True

    # ------------------------------------------------------------------
    # Tiles and metadata
    # ------------------------------------------------------------------

    def place_tile(self, name: str, cell: Cell) -> bool:
        self.catalog.require_tile(name)
        cell = (int(cell[0]), int(cell[1]))
        previous = self._tiles.get(cell)
        if previous is not None and previous.name == name:
            return False
        self.history.apply(
            PlaceTile(cell, name, previous.name if previous is not None else None)
        )
        return True

    def remove_tile(self, cell: Cell) -> bool:
        previous = self._tiles.get(cell)
        if previous is None:
            return False
        self.history.apply(RemoveTile(cell, previous.name))
        return True

    def rename(self, name: str) -> None:
        if name != self.name:
            self.history.apply(ChangeMetadata("name", self.name, name))

    def describe(self, description: str) -> None:
        if description != self.description:
            self.history.apply(ChangeMetadata("description", self.description, description))

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def extractor_specs(self) -> List[ExtractorSpec]:
        specs = []
        for entity in self.graph:
            if entity.name not in self.config.extractor_kinds:
                continue
            x, y = entity.position
            outputs = {}
            for direction in entity.entry.valid_directions():
                offsets = entity.entry.fluid_offsets(direction)
                if offsets:
                    ox, oy = offsets[0]
                    outputs[direction] = cell_of((x + ox, y + oy))
            specs.append(
                ExtractorSpec(
                    entity_id=entity.entity_id,
                    cells=frozenset(entity.cells()),
                    outputs=outputs,
                    direction=entity.direction,
                )
            )
        return specs

    def generate_pipes(
        self,
        collection_point: Optional[Cell] = None,
        allow_rotation: bool = False,
    ) -> Optional[str]:
        """Connect every extractor with conduits as one undoable step.

        Returns the planner's diagnostic when some extractors stay
        unconnected, else None.
        """
        specs = self.extractor_specs()
        if not specs:
            logger.info("No %s found", ", ".join(self.config.extractor_kinds))
            self.last_layout = ConduitLayout()
            return None

        extractor_ids = {spec.entity_id for spec in specs}
        layout = generate_conduits(
            specs,
            self.graph.occupied_cells(exclude=extractor_ids),
            collection_point=collection_point,
            allow_rotation=allow_rotation,
            conduit_kind=self.config.conduit_kind,
            config=self.config,
        )
        self.last_layout = layout

        with self.history.transaction("Generate pipes"):
            for spec in specs:
                chosen = layout.directions.get(spec.entity_id, spec.direction)
                if chosen != spec.direction:
                    self.history.apply(RotateEntity(spec.entity_id, spec.direction, chosen))
            for placement in layout.placed:
                self.add_entity(placement.kind, placement.position)
        logger.info(
            "Placed %d %s entities for %d extractors",
            len(layout.placed),
            self.config.conduit_kind,
            len(specs),
        )
        return layout.diagnostic

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _check_direction_type(
        self,
        entity_id: Optional[int],
        entry: CatalogEntry,
        direction_type: Optional[str],
    ) -> Optional[str]:
        if not entry.flow_typed:
            if direction_type is not None:
                raise PropertyError(
                    entity_id, "direction_type", f"{entry.name} has no direction type"
                )
            return None
        if direction_type is None:
            return "input"
        if direction_type not in DIRECTION_TYPES:
            raise PropertyError(
                entity_id,
                "direction_type",
                f"direction type must be 'input' or 'output', got {direction_type!r}",
            )
        return direction_type

    def _check_properties(
        self,
        entity_id: Optional[int],
        entry: CatalogEntry,
        properties: Optional[Mapping[str, Any]],
    ) -> Dict[str, Any]:
        merged = copy.deepcopy(dict(entry.default_properties))
        merged.update(copy.deepcopy(dict(properties or {})))
        for key, value in list(merged.items()):
            reason = self.catalog.check_property(entry.name, key, value)
            if reason is not None:
                raise PropertyError(entity_id, key, reason)
            if value is None:
                del merged[key]
        return merged
