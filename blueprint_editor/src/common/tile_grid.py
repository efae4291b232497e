"""Tile occupancy tracking for entity placement."""

from typing import Collection, Dict, Hashable, Optional, Set

from .geometry import Cell, Size, iter_cells


class TileGrid:
    """Tracks which tiles are occupied and by whom.

    Used by the entity graph to reject overlapping placements and by the
    conduit planner to know which cells are blocked.
    """

    def __init__(self) -> None:
        self._owners: Dict[Cell, Hashable] = {}

    def __contains__(self, tile_pos: Cell) -> bool:
        return tile_pos in self._owners

    def __len__(self) -> int:
        return len(self._owners)

    def owner_at(self, tile_pos: Cell) -> Optional[Hashable]:
        return self._owners.get(tile_pos)

    def is_available(
        self,
        tile_pos: Cell,
        footprint: Size,
        ignore: Collection[Hashable] = (),
    ) -> bool:
        """Check if a tile position is available for given footprint.

        Args:
            tile_pos: (tile_x, tile_y) top-left corner position
            footprint: (width, height) in tiles
            ignore: owners whose tiles count as free (e.g. the entity being moved)
        """
        for cell in iter_cells(tile_pos, footprint):
            owner = self._owners.get(cell)
            if owner is not None and owner not in ignore:
                return False
        return True

    def blockers(
        self,
        tile_pos: Cell,
        footprint: Size,
        ignore: Collection[Hashable] = (),
    ) -> Set[Hashable]:
        """Owners occupying any tile of the footprint."""
        found = set()
        for cell in iter_cells(tile_pos, footprint):
            owner = self._owners.get(cell)
            if owner is not None and owner not in ignore:
                found.add(owner)
        return found

    def mark_occupied(self, tile_pos: Cell, footprint: Size, owner: Hashable) -> None:
        """Mark tiles as occupied by ``owner``.

        Args:
            tile_pos: (tile_x, tile_y) top-left corner position
            footprint: (width, height) in tiles
            owner: identifier stored for every tile
        """
        for cell in iter_cells(tile_pos, footprint):
            self._owners[cell] = owner

    def release(self, tile_pos: Cell, footprint: Size, owner: Hashable) -> None:
        """Free the footprint tiles currently held by ``owner``."""
        for cell in iter_cells(tile_pos, footprint):
            if self._owners.get(cell) == owner:
                del self._owners[cell]

    def occupied_cells(self, exclude: Collection[Hashable] = ()) -> Set[Cell]:
        return {cell for cell, owner in self._owners.items() if owner not in exclude}
