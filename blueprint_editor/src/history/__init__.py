"""Undo/redo history package."""

from .actions import (
    AddConnection,
    AddEntity,
    ChangeDirectionType,
    ChangeMetadata,
    ChangeProperty,
    HistoryEntry,
    MoveEntity,
    PlaceTile,
    RemoveConnection,
    RemoveEntity,
    RemoveTile,
    RotateEntity,
    Transaction,
)
from .history import History

__all__ = [
    "History",
    "HistoryEntry",
    "AddEntity",
    "RemoveEntity",
    "MoveEntity",
    "RotateEntity",
    "ChangeDirectionType",
    "ChangeProperty",
    "AddConnection",
    "RemoveConnection",
    "PlaceTile",
    "RemoveTile",
    "ChangeMetadata",
    "Transaction",
]
