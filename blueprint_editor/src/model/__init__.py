"""Document model: entities, entity graph, blueprints and books."""

from .blueprint import Blueprint, Icon
from .book import Book
from .entity import Connection, ConnectionType, Entity, EntitySnapshot, Tile
from .entity_graph import EntityGraph
from .exceptions import (
    IncompatibleSettingsError,
    InvalidConnectionError,
    InvalidDirectionError,
    PlacementConflictError,
    PropertyError,
    UnknownEntityIdError,
)

__all__ = [
    "Blueprint",
    "Icon",
    "Book",
    "Connection",
    "ConnectionType",
    "Entity",
    "EntitySnapshot",
    "Tile",
    "EntityGraph",
    "PlacementConflictError",
    "UnknownEntityIdError",
    "InvalidDirectionError",
    "InvalidConnectionError",
    "IncompatibleSettingsError",
    "PropertyError",
]
