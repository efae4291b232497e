from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from blueprint_editor.src.common.constants import DEFAULT_CONFIG, EditorConfig
from blueprint_editor.src.common.geometry import Cell, NEIGHBOUR_OFFSETS, Position, cell_center

"""Conduit network synthesis for fluid extractor outposts."""

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractorSpec:
    """One extractor as seen by the planner.

    ``outputs`` maps every direction the extractor may face to the cell its
    output connection reaches in that direction.
    """

    entity_id: int
    cells: FrozenSet[Cell]
    outputs: Mapping[int, Cell]
    direction: int = 0


@dataclass(frozen=True)
class ConduitPlacement:
    kind: str
    cell: Cell
    position: Position


@dataclass
class ConduitLayout:
    """Result of a planning run; partial results are normal."""

    placed: List[ConduitPlacement] = field(default_factory=list)
    unconnected: List[int] = field(default_factory=list)
    directions: Dict[int, int] = field(default_factory=dict)
    diagnostic: Optional[str] = None

    @property
    def complete(self) -> bool:
        return not self.unconnected

    def cells(self) -> List[Cell]:
        return [placement.cell for placement in self.placed]


class ConduitPlanner:
    """Grows one conduit network until every reachable extractor is joined.

    Each round runs a breadth-first search seeded with every cell already in
    the network and stops at the first free output cell of an extractor that
    is still unconnected. The path found is merged into the network and the
    search repeats. The searchable area is the bounding box of the extractors
    and their output cells, grown by ``config.conduit_search_margin``, so
    every round is bounded.
    """

    def __init__(
        self,
        extractors: Iterable[ExtractorSpec],
        blocked_cells: Iterable[Cell] = (),
        *,
        collection_point: Optional[Cell] = None,
        allow_rotation: bool = False,
        conduit_kind: Optional[str] = None,
        config: EditorConfig = DEFAULT_CONFIG,
    ) -> None:
        self.extractors = list(extractors)
        self.config = config
        self.conduit_kind = conduit_kind or config.conduit_kind
        self.allow_rotation = allow_rotation
        self.collection_point = collection_point

        self._extractor_cells: Set[Cell] = set()
        for spec in self.extractors:
            self._extractor_cells.update(spec.cells)
        self._blocked: Set[Cell] = set(blocked_cells) | self._extractor_cells
        self._box = self._search_box()

    def _search_box(self) -> Optional[Tuple[int, int, int, int]]:
        cells: List[Cell] = list(self._extractor_cells)
        for spec in self.extractors:
            cells.extend(spec.outputs.values())
        if self.collection_point is not None:
            cells.append(self.collection_point)
        if not cells:
            return None
        margin = self.config.conduit_search_margin
        xs = [cell[0] for cell in cells]
        ys = [cell[1] for cell in cells]
        return (min(xs) - margin, min(ys) - margin, max(xs) + margin, max(ys) + margin)

    def is_free(self, cell: Cell) -> bool:
        if self._box is None or cell in self._blocked:
            return False
        min_x, min_y, max_x, max_y = self._box
        return min_x <= cell[0] <= max_x and min_y <= cell[1] <= max_y

    def candidate_plugs(self, spec: ExtractorSpec) -> Dict[Cell, int]:
        """Free output cells of ``spec``, mapped to the direction that uses them."""
        if self.allow_rotation:
            options = [(spec.direction, spec.outputs.get(spec.direction))]
            options += [(d, c) for d, c in sorted(spec.outputs.items()) if d != spec.direction]
        else:
            options = [(spec.direction, spec.outputs.get(spec.direction))]

        plugs: Dict[Cell, int] = {}
        for direction, cell in options:
            if cell is not None and self.is_free(cell) and cell not in plugs:
                plugs[cell] = direction
        return plugs

    def plan(self) -> ConduitLayout:
        plugs = {spec.entity_id: self.candidate_plugs(spec) for spec in self.extractors}
        directions: Dict[int, int] = {}
        network: Dict[Cell, None] = {}

        seed = self._seed(plugs)
        if seed is not None:
            network[seed] = None

        pending = [spec.entity_id for spec in self.extractors]
        while True:
            pending = self._absorb(pending, plugs, network, directions)
            targets = {
                cell: entity_id
                for entity_id in pending
                for cell in plugs[entity_id]
            }
            if not targets or not network:
                break
            path = self._search(network, targets)
            if path is None:
                break
            for cell in path:
                network.setdefault(cell, None)

        layout = ConduitLayout(
            placed=[
                ConduitPlacement(self.conduit_kind, cell, cell_center(cell))
                for cell in network
            ],
            unconnected=pending,
            directions=directions,
        )
        if pending:
            layout.diagnostic = (
                f"{len(pending)} of {len(self.extractors)} extractors could not be connected"
            )
            logger.info("%s: %s", layout.diagnostic, ", ".join(f"#{i}" for i in pending))
        return layout

    def _seed(self, plugs: Mapping[int, Mapping[Cell, int]]) -> Optional[Cell]:
        """Where the network starts.

        Without a usable collection point this is the plug nearest the centroid
        of all plugs, restricted to the free region that reaches the most
        extractors.
        """
        if self.collection_point is not None and self.is_free(self.collection_point):
            return self.collection_point

        all_plugs = [cell for options in plugs.values() for cell in options]
        if not all_plugs:
            return None
        owners: Dict[Cell, Set[int]] = {}
        for entity_id, options in plugs.items():
            for cell in options:
                owners.setdefault(cell, set()).add(entity_id)
        cx = sum(cell[0] for cell in all_plugs) / len(all_plugs)
        cy = sum(cell[1] for cell in all_plugs) / len(all_plugs)
        ranked = sorted(owners, key=lambda c: ((c[0] - cx) ** 2 + (c[1] - cy) ** 2, c))

        best: Optional[Cell] = None
        best_reach = 0
        seen: Set[Cell] = set()
        for cell in ranked:
            if cell in seen:
                continue
            region = self._region(cell)
            seen |= region
            reach = set().union(*(owners[c] for c in region if c in owners))
            if len(reach) > best_reach:
                best, best_reach = cell, len(reach)
        return best

    def _region(self, start: Cell) -> Set[Cell]:
        """Free cells connected to ``start``."""
        region = {start}
        queue = deque([start])
        while queue:
            cell = queue.popleft()
            for dx, dy in NEIGHBOUR_OFFSETS:
                nxt = (cell[0] + dx, cell[1] + dy)
                if nxt not in region and self.is_free(nxt):
                    region.add(nxt)
                    queue.append(nxt)
        return region

    def _absorb(
        self,
        pending: List[int],
        plugs: Mapping[int, Mapping[Cell, int]],
        network: Mapping[Cell, None],
        directions: Dict[int, int],
    ) -> List[int]:
        """Mark extractors whose output cell is already part of the network."""
        still_pending = []
        for entity_id in pending:
            joined = [cell for cell in plugs[entity_id] if cell in network]
            if joined:
                directions[entity_id] = plugs[entity_id][joined[0]]
            else:
                still_pending.append(entity_id)
        return still_pending

    def _search(
        self, network: Mapping[Cell, None], targets: Mapping[Cell, int]
    ) -> Optional[List[Cell]]:
        parents: Dict[Cell, Optional[Cell]] = {cell: None for cell in network}
        queue = deque(network)
        while queue:
            cell = queue.popleft()
            if cell in targets:
                path = []
                step: Optional[Cell] = cell
                while step is not None and step not in network:
                    path.append(step)
                    step = parents[step]
                path.reverse()
                return path
            for dx, dy in NEIGHBOUR_OFFSETS:
                nxt = (cell[0] + dx, cell[1] + dy)
                if nxt not in parents and self.is_free(nxt):
                    parents[nxt] = cell
                    queue.append(nxt)
        return None


def generate_conduits(
    extractors: Iterable[ExtractorSpec],
    blocked_cells: Iterable[Cell] = (),
    *,
    collection_point: Optional[Cell] = None,
    allow_rotation: bool = False,
    conduit_kind: Optional[str] = None,
    config: EditorConfig = DEFAULT_CONFIG,
) -> ConduitLayout:
    """Connect every extractor's output to one conduit network."""
    planner = ConduitPlanner(
        extractors,
        blocked_cells,
        collection_point=collection_point,
        allow_rotation=allow_rotation,
        conduit_kind=conduit_kind,
        config=config,
    )
    return planner.plan()
