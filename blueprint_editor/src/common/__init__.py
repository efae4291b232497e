"""Common utilities shared across the editor core."""

from .diagnostics import EditorDiagnostics, DiagnosticSeverity, Diagnostic
from .tile_grid import TileGrid
from .geometry import (
    Direction,
    footprint_cells,
    footprint_origin,
    rotate_direction,
    rotate_offset,
    rotated_size,
)
from .constants import DEFAULT_CONFIG, EditorConfig

__all__ = [
    "EditorDiagnostics",
    "DiagnosticSeverity",
    "Diagnostic",
    "TileGrid",
    "Direction",
    "footprint_cells",
    "footprint_origin",
    "rotate_direction",
    "rotate_offset",
    "rotated_size",
    # Config
    "DEFAULT_CONFIG",
    "EditorConfig",
]
