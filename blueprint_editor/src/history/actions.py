"""Reversible history entries.

Each entry knows how to apply itself to a document and builds its own
inverse from the values captured at construction, so undo never has to
re-derive state from the document. Entries refer to entities by id only.

The document passed to :meth:`HistoryEntry.apply` must expose:

* ``graph`` - the :class:`EntityGraph` of the page
* ``write_tile(cell, name)`` - place ``name`` at ``cell`` (``None`` removes)
* ``write_metadata(field, value)`` - set ``name`` or ``description``
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Tuple

from blueprint_editor.src.common.geometry import Cell, Position

if TYPE_CHECKING:
    from blueprint_editor.src.model.entity import Connection, EntitySnapshot


class HistoryEntry:
    """Base class for reversible mutations."""

    description: str = ""

    def apply(self, document) -> None:
        raise NotImplementedError

    def inverse(self) -> "HistoryEntry":
        raise NotImplementedError

    def revert(self, document) -> None:
        self.inverse().apply(document)

    def touched_ids(self) -> Tuple[int, ...]:
        return ()


@dataclass(frozen=True)
class AddEntity(HistoryEntry):
    snapshot: EntitySnapshot

    @property
    def description(self) -> str:
        return f"Add {self.snapshot.name} #{self.snapshot.entity_id}"

    def apply(self, document) -> None:
        document.graph.restore(self.snapshot)

    def inverse(self) -> "RemoveEntity":
        return RemoveEntity(self.snapshot)

    def touched_ids(self) -> Tuple[int, ...]:
        return (self.snapshot.entity_id,)


@dataclass(frozen=True)
class RemoveEntity(HistoryEntry):
    """Removal; the snapshot keeps the severed wires for undo."""

    snapshot: EntitySnapshot

    @property
    def description(self) -> str:
        return f"Remove {self.snapshot.name} #{self.snapshot.entity_id}"

    def apply(self, document) -> None:
        document.graph.discard(self.snapshot.entity_id)

    def inverse(self) -> AddEntity:
        return AddEntity(self.snapshot)

    def touched_ids(self) -> Tuple[int, ...]:
        return (self.snapshot.entity_id,)


@dataclass(frozen=True)
class MoveEntity(HistoryEntry):
    entity_id: int
    delta: Position

    @property
    def description(self) -> str:
        return f"Move #{self.entity_id} by {self.delta}"

    def apply(self, document) -> None:
        entity = document.graph.require(self.entity_id)
        x, y = entity.position
        document.graph.relocate(self.entity_id, (x + self.delta[0], y + self.delta[1]))

    def inverse(self) -> "MoveEntity":
        return MoveEntity(self.entity_id, (-self.delta[0], -self.delta[1]))

    def touched_ids(self) -> Tuple[int, ...]:
        return (self.entity_id,)


@dataclass(frozen=True)
class RotateEntity(HistoryEntry):
    entity_id: int
    old_direction: int
    new_direction: int

    @property
    def description(self) -> str:
        return f"Rotate #{self.entity_id} {self.old_direction}->{self.new_direction}"

    def apply(self, document) -> None:
        document.graph.reorient(self.entity_id, self.new_direction)

    def inverse(self) -> "RotateEntity":
        return RotateEntity(self.entity_id, self.new_direction, self.old_direction)

    def touched_ids(self) -> Tuple[int, ...]:
        return (self.entity_id,)


@dataclass(frozen=True)
class ChangeDirectionType(HistoryEntry):
    entity_id: int
    old_type: Optional[str]
    new_type: Optional[str]

    @property
    def description(self) -> str:
        return f"Set #{self.entity_id} to {self.new_type}"

    def apply(self, document) -> None:
        document.graph.require(self.entity_id).direction_type = self.new_type

    def inverse(self) -> "ChangeDirectionType":
        return ChangeDirectionType(self.entity_id, self.new_type, self.old_type)

    def touched_ids(self) -> Tuple[int, ...]:
        return (self.entity_id,)


@dataclass(frozen=True)
class ChangeProperty(HistoryEntry):
    """Property change; a value of ``None`` means the key is absent."""

    entity_id: int
    key: str
    old_value: Any
    new_value: Any

    @property
    def description(self) -> str:
        return f"Change {self.key} of #{self.entity_id}"

    def apply(self, document) -> None:
        properties = document.graph.require(self.entity_id).properties
        if self.new_value is None:
            properties.pop(self.key, None)
        else:
            properties[self.key] = copy.deepcopy(self.new_value)

    def inverse(self) -> "ChangeProperty":
        return ChangeProperty(self.entity_id, self.key, self.new_value, self.old_value)

    def touched_ids(self) -> Tuple[int, ...]:
        return (self.entity_id,)


@dataclass(frozen=True)
class AddConnection(HistoryEntry):
    connection: Connection

    @property
    def description(self) -> str:
        c = self.connection
        return f"Connect #{c.source_id} and #{c.target_id} ({c.color})"

    def apply(self, document) -> None:
        document.graph.add_connection(self.connection)

    def inverse(self) -> "RemoveConnection":
        return RemoveConnection(self.connection)

    def touched_ids(self) -> Tuple[int, ...]:
        return (self.connection.source_id, self.connection.target_id)


@dataclass(frozen=True)
class RemoveConnection(HistoryEntry):
    connection: Connection

    @property
    def description(self) -> str:
        c = self.connection
        return f"Disconnect #{c.source_id} and #{c.target_id} ({c.color})"

    def apply(self, document) -> None:
        document.graph.remove_connection(self.connection)

    def inverse(self) -> AddConnection:
        return AddConnection(self.connection)

    def touched_ids(self) -> Tuple[int, ...]:
        return (self.connection.source_id, self.connection.target_id)


@dataclass(frozen=True)
class PlaceTile(HistoryEntry):
    """Place ``name`` at ``cell``, replacing ``previous`` if there was one."""

    cell: Cell
    name: str
    previous: Optional[str] = None

    @property
    def description(self) -> str:
        return f"Place {self.name} at {self.cell}"

    def apply(self, document) -> None:
        document.write_tile(self.cell, self.name)

    def inverse(self) -> HistoryEntry:
        if self.previous is None:
            return RemoveTile(self.cell, self.name)
        return PlaceTile(self.cell, self.previous, self.name)


@dataclass(frozen=True)
class RemoveTile(HistoryEntry):
    cell: Cell
    previous: str

    @property
    def description(self) -> str:
        return f"Remove {self.previous} at {self.cell}"

    def apply(self, document) -> None:
        document.write_tile(self.cell, None)

    def inverse(self) -> PlaceTile:
        return PlaceTile(self.cell, self.previous)


@dataclass(frozen=True)
class ChangeMetadata(HistoryEntry):
    """Rename or re-describe the document."""

    field_name: str
    old_value: Optional[str]
    new_value: Optional[str]

    @property
    def description(self) -> str:
        return f"Set {self.field_name}"

    def apply(self, document) -> None:
        document.write_metadata(self.field_name, self.new_value)

    def inverse(self) -> "ChangeMetadata":
        return ChangeMetadata(self.field_name, self.new_value, self.old_value)


@dataclass(frozen=True)
class Transaction(HistoryEntry):
    """Several entries undone and redone as one step."""

    label: str
    entries: Tuple[HistoryEntry, ...] = field(default_factory=tuple)

    @property
    def description(self) -> str:
        return self.label

    def apply(self, document) -> None:
        for entry in self.entries:
            entry.apply(document)

    def inverse(self) -> "Transaction":
        return Transaction(
            self.label, tuple(entry.inverse() for entry in reversed(self.entries))
        )

    def touched_ids(self) -> Tuple[int, ...]:
        seen = []
        for entry in self.entries:
            for entity_id in entry.touched_ids():
                if entity_id not in seen:
                    seen.append(entity_id)
        return tuple(seen)

    def __len__(self) -> int:
        return len(self.entries)
