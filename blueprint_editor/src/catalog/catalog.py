"""Static reference data for every known entity, tile, item and recipe kind."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from blueprint_editor.src.common.constants import (
    CARDINAL_DIRECTIONS,
    COPPER_WIRE_PROTOTYPE_TYPES,
    FLOW_TYPED_PROTOTYPE_TYPES,
    TRAIN_KINDS,
    TRAIN_PROTOTYPE_TYPES,
    TRANSPORT_PROTOTYPE_TYPES,
)
from blueprint_editor.src.common.geometry import Size, rotated_size
from . import properties
from .entity_data import (
    Offset,
    fluid_connections_from_data,
    footprint_from_data,
    rotatable_from_data,
    wire_distance_from_data,
)

logger = logging.getLogger(__name__)


class CatalogCategory(Enum):
    ENTITY = "entity"
    TILE = "tile"
    ITEM = "item"
    RECIPE = "recipe"


class UnknownKindError(KeyError):
    """Raised when a kind name is absent from the catalog."""

    def __init__(self, kind: str, category: CatalogCategory = CatalogCategory.ENTITY):
        self.kind = kind
        self.category = category
        super().__init__(f"Unknown {category.value} kind '{kind}'")

    def __str__(self) -> str:
        return self.args[0]


@dataclass(frozen=True, eq=False)
class CatalogEntry:
    """Immutable description of one kind."""

    name: str
    category: CatalogCategory = CatalogCategory.ENTITY
    prototype_type: str = ""
    size: Size = (1, 1)
    rotatable: bool = True
    flow_typed: bool = False
    fluid_connections: Mapping[int, Tuple[Offset, ...]] = field(default_factory=dict)
    max_wire_distance: Optional[float] = None
    default_properties: Mapping[str, Any] = field(default_factory=dict)

    @property
    def family(self) -> str:
        return self.prototype_type or self.name

    @property
    def is_transport(self) -> bool:
        return self.prototype_type in TRANSPORT_PROTOTYPE_TYPES

    @property
    def accepts_copper(self) -> bool:
        return self.prototype_type in COPPER_WIRE_PROTOTYPE_TYPES

    @property
    def has_fluid_connections(self) -> bool:
        return any(self.fluid_connections.values())

    def footprint(self, direction: int = 0) -> Size:
        return rotated_size(self.size, direction)

    def valid_directions(self) -> Tuple[int, ...]:
        return CARDINAL_DIRECTIONS if self.rotatable else (0,)

    def fluid_offsets(self, direction: int = 0) -> Tuple[Offset, ...]:
        return tuple(self.fluid_connections.get(direction, ()))


class Catalog:
    """Read-only lookup of catalog entries.

    Entity kinds of the train family are deliberately absent: they need track
    topology the editor core does not model. They are still recognised through
    :meth:`is_train_kind` so callers can tell them apart from modded kinds.
    """

    def __init__(
        self,
        entities: Iterable[CatalogEntry] = (),
        tiles: Iterable[str] = (),
        items: Iterable[str] = (),
        recipes: Iterable[str] = (),
        train_kinds: Iterable[str] = (),
    ) -> None:
        self._entities: Dict[str, CatalogEntry] = {entry.name: entry for entry in entities}
        self._tiles: FrozenSet[str] = frozenset(tiles)
        self._items: FrozenSet[str] = frozenset(items)
        self._recipes: FrozenSet[str] = frozenset(recipes)
        self._train_kinds: FrozenSet[str] = frozenset(TRAIN_KINDS) | frozenset(train_kinds)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> "Catalog":
        """The catalog built from the bundled game data (loaded once)."""
        return _default_catalog()

    @classmethod
    def from_draftsman(cls) -> "Catalog":
        from draftsman.data import entities, items, recipes, tiles

        entries = []
        train_kinds = []
        for name, prototype in entities.raw.items():
            prototype_type = prototype.get("type", "")
            if prototype_type in TRAIN_PROTOTYPE_TYPES:
                train_kinds.append(name)
                continue
            entries.append(entry_from_prototype(name, prototype))

        catalog = cls(
            entities=entries,
            tiles=tiles.raw.keys(),
            items=items.raw.keys(),
            recipes=recipes.raw.keys(),
            train_kinds=train_kinds,
        )
        logger.debug(
            "Loaded catalog: %d entities, %d tiles, %d items",
            len(catalog._entities),
            len(catalog._tiles),
            len(catalog._items),
        )
        return catalog

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, kind: str) -> CatalogEntry:
        try:
            return self._entities[kind]
        except KeyError:
            raise UnknownKindError(kind) from None

    def get(self, kind: str) -> Optional[CatalogEntry]:
        return self._entities.get(kind)

    def __contains__(self, kind: object) -> bool:
        return kind in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def has_tile(self, kind: str) -> bool:
        return kind in self._tiles

    def require_tile(self, kind: str) -> str:
        if kind not in self._tiles:
            raise UnknownKindError(kind, CatalogCategory.TILE)
        return kind

    def has_item(self, kind: str) -> bool:
        return kind in self._items

    def has_recipe(self, kind: str) -> bool:
        return kind in self._recipes

    def is_train_kind(self, kind: str) -> bool:
        return kind in self._train_kinds

    # ------------------------------------------------------------------
    # Derived data
    # ------------------------------------------------------------------

    def footprint(self, kind: str, direction: int = 0) -> Size:
        return self.lookup(kind).footprint(direction)

    def valid_directions(self, kind: str) -> Tuple[int, ...]:
        return self.lookup(kind).valid_directions()

    def fluid_connection_offsets(self, kind: str, direction: int = 0) -> Tuple[Offset, ...]:
        return self.lookup(kind).fluid_offsets(direction)

    def property_schema(self, kind: str) -> Dict[str, Tuple[type, ...]]:
        return properties.property_schema(self.lookup(kind).family)

    def settings_keys(self, kind: str) -> FrozenSet[str]:
        return properties.settings_keys(self.lookup(kind).family)

    def check_property(self, kind: str, key: str, value: Any) -> Optional[str]:
        """Return why ``key=value`` is invalid for ``kind``, or None if it is fine."""
        entry = self.lookup(kind)
        reason = properties.check_value(entry.family, key, value)
        if reason is None and key == "recipe" and value is not None and self._recipes:
            if not self.has_recipe(value):
                reason = f"unknown recipe '{value}'"
        return reason


def entry_from_prototype(name: str, prototype: Mapping[str, Any]) -> CatalogEntry:
    """Build a catalog entry from a raw game-data prototype."""
    prototype_type = prototype.get("type", "")
    return CatalogEntry(
        name=name,
        category=CatalogCategory.ENTITY,
        prototype_type=prototype_type,
        size=footprint_from_data(prototype),
        rotatable=rotatable_from_data(prototype),
        flow_typed=prototype_type in FLOW_TYPED_PROTOTYPE_TYPES,
        fluid_connections=fluid_connections_from_data(prototype),
        max_wire_distance=wire_distance_from_data(prototype),
    )


@functools.lru_cache(maxsize=None)
def _default_catalog() -> Catalog:
    return Catalog.from_draftsman()
