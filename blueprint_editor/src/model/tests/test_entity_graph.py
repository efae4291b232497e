"""
Tests for model/entity_graph.py - Identity, placement and link rules.
"""

import pytest

from blueprint_editor.src.model.entity import Connection, ConnectionType, Entity
from blueprint_editor.src.model.entity_graph import EntityGraph, cells_for
from blueprint_editor.src.model.exceptions import (
    InvalidConnectionError,
    InvalidDirectionError,
    PlacementConflictError,
    UnknownEntityIdError,
)


@pytest.fixture
def graph(catalog, config):
    return EntityGraph(catalog, config)


def place(graph, name, position, direction=0, direction_type=None):
    entity = Entity(
        entity_id=graph.allocate_id(),
        entry=graph.catalog.lookup(name),
        position=position,
        direction=direction,
        direction_type=direction_type,
    )
    return graph.insert(entity).entity_id


class TestIdentity:
    def test_ids_are_monotonic_and_never_reused(self, graph):
        first = place(graph, "pipe", (0.5, 0.5))
        graph.discard(first)
        second = place(graph, "pipe", (0.5, 0.5))
        assert second > first
        assert first not in graph

    def test_iteration_follows_insertion_order(self, graph):
        ids = [place(graph, "pipe", (x + 0.5, 0.5)) for x in (3, 1, 2)]
        assert [entity.entity_id for entity in graph] == ids

    def test_require_unknown_id(self, graph):
        with pytest.raises(UnknownEntityIdError) as exc_info:
            graph.require(42)
        assert exc_info.value.entity_id == 42

    def test_insert_with_taken_id_is_rejected(self, graph):
        entity_id = place(graph, "pipe", (0.5, 0.5))
        duplicate = Entity(entity_id, graph.catalog.lookup("pipe"), (5.5, 5.5))
        with pytest.raises(PlacementConflictError):
            graph.insert(duplicate)

    def test_insert_advances_counter_past_explicit_id(self, graph):
        graph.insert(Entity(10, graph.catalog.lookup("pipe"), (0.5, 0.5)))
        assert graph.next_id == 11


class TestPlacement:
    def test_overlap_reports_blockers(self, graph):
        pumpjack = place(graph, "pumpjack", (0.5, 0.5))
        entry = graph.catalog.lookup("pipe")
        with pytest.raises(PlacementConflictError) as exc_info:
            graph.check_placement(entry, (1.5, 1.5), 0)
        assert exc_info.value.blockers == (pumpjack,)
        assert not exc_info.value.out_of_bounds

    def test_adjacent_placement_is_allowed(self, graph):
        place(graph, "pumpjack", (0.5, 0.5))
        assert graph.can_place(graph.catalog.lookup("pipe"), (2.5, 0.5))

    def test_out_of_bounds(self, graph, config):
        entry = graph.catalog.lookup("pipe")
        with pytest.raises(PlacementConflictError) as exc_info:
            graph.check_placement(entry, (config.blueprint_extent + 0.5, 0.5), 0)
        assert exc_info.value.out_of_bounds

    def test_invalid_direction(self, graph):
        entry = graph.catalog.lookup("pipe")
        with pytest.raises(InvalidDirectionError):
            graph.check_direction(entry, 2)

    def test_entity_at_and_bounds(self, graph):
        pumpjack = place(graph, "pumpjack", (0.5, 0.5))
        assert graph.entity_at((1, 1)).entity_id == pumpjack
        assert graph.entity_at((2, 2)) is None
        assert graph.bounds() == (-1, -1, 1, 1)

    def test_relocate_releases_old_cells(self, graph):
        pipe = place(graph, "pipe", (0.5, 0.5))
        graph.relocate(pipe, (3.5, 0.5))
        assert graph.entity_at((0, 0)) is None
        assert graph.entity_at((3, 0)).entity_id == pipe

    def test_relocate_conflict_leaves_entity_in_place(self, graph):
        first = place(graph, "pipe", (0.5, 0.5))
        place(graph, "pipe", (1.5, 0.5))
        with pytest.raises(PlacementConflictError):
            graph.relocate(first, (1.5, 0.5))
        assert graph.get(first).position == (0.5, 0.5)
        assert graph.entity_at((0, 0)).entity_id == first

    def test_reorient_swaps_footprint(self, graph):
        combinator = place(graph, "arithmetic-combinator", (0.5, 1.0))
        graph.reorient(combinator, 2)
        assert sorted(graph.get(combinator).cells()) == sorted(
            cells_for(graph.catalog.lookup("arithmetic-combinator"), (0.5, 1.0), 2)
        )


class TestWires:
    def test_add_and_discard_severs_both_ends(self, graph):
        a = place(graph, "small-electric-pole", (0.5, 0.5))
        b = place(graph, "small-electric-pole", (5.5, 0.5))
        wire = Connection(a, b, "copper")
        graph.add_connection(wire)
        assert graph.has_connection(wire)
        assert graph.neighbors(b, ConnectionType.WIRE) == [a]

        removed = graph.discard(a)
        assert wire in removed.connections
        assert graph.connections(b) == ()

    def test_reinsert_reattaches_wires(self, graph):
        a = place(graph, "small-electric-pole", (0.5, 0.5))
        b = place(graph, "small-electric-pole", (5.5, 0.5))
        graph.add_connection(Connection(a, b, "red"))
        snapshot = graph.discard(a).snapshot()
        graph.restore(snapshot)
        assert graph.connections(b) == (Connection(a, b, "red"),)

    def test_connection_is_normalised(self):
        assert Connection(5, 2, "red", 2, 1) == Connection(2, 5, "red", 1, 2)

    def test_remove_connection(self, graph):
        a = place(graph, "constant-combinator", (0.5, 0.5))
        b = place(graph, "constant-combinator", (1.5, 0.5))
        wire = Connection(a, b, "green")
        graph.add_connection(wire)
        assert graph.remove_connection(wire)
        assert not graph.remove_connection(wire)


class TestLinkRules:
    def test_copper_within_reach(self, graph):
        a = place(graph, "small-electric-pole", (0.5, 0.5))
        b = place(graph, "small-electric-pole", (7.5, 0.5))
        assert graph.can_link(a, b, ConnectionType.WIRE, "copper")

    def test_copper_uses_smaller_reach(self, graph):
        small = place(graph, "small-electric-pole", (0.5, 0.5))
        medium = place(graph, "medium-electric-pole", (9.0, 0.5))
        assert not graph.can_link(small, medium, ConnectionType.WIRE, "copper")
        assert graph.can_link(small, medium, ConnectionType.WIRE, "red")

    def test_copper_only_between_poles_and_switches(self, graph):
        pole = place(graph, "small-electric-pole", (0.5, 0.5))
        chest = place(graph, "wooden-chest", (2.5, 0.5))
        switch = place(graph, "power-switch", (5.0, 1.0))
        assert "copper" in graph.link_problem(pole, chest, ConnectionType.WIRE, "copper")
        assert graph.can_link(pole, switch, ConnectionType.WIRE, "copper")

    def test_validate_wire_raises(self, graph):
        a = place(graph, "constant-combinator", (0.5, 0.5))
        b = place(graph, "constant-combinator", (20.5, 0.5))
        with pytest.raises(InvalidConnectionError, match="exceeds reach"):
            graph.validate_wire(Connection(a, b, "red"))

    def test_unknown_color_and_self_link(self, graph):
        a = place(graph, "constant-combinator", (0.5, 0.5))
        b = place(graph, "constant-combinator", (1.5, 0.5))
        assert "color" in graph.link_problem(a, b, ConnectionType.WIRE, "blue")
        assert "itself" in graph.link_problem(a, a, ConnectionType.WIRE, "red")

    def test_belt_feeds_belt_ahead(self, graph):
        first = place(graph, "transport-belt", (0.5, 0.5), direction=2)
        second = place(graph, "transport-belt", (1.5, 0.5), direction=2)
        assert graph.can_link(first, second, ConnectionType.TRANSPORT)
        assert graph.neighbors(first, ConnectionType.TRANSPORT) == [second]

    def test_head_on_belts_do_not_link(self, graph):
        first = place(graph, "transport-belt", (0.5, 0.5), direction=2)
        second = place(graph, "transport-belt", (1.5, 0.5), direction=6)
        assert not graph.can_link(first, second, ConnectionType.TRANSPORT)

    def test_side_by_side_belts_do_not_link(self, graph):
        first = place(graph, "transport-belt", (0.5, 0.5), direction=0)
        second = place(graph, "transport-belt", (1.5, 0.5), direction=0)
        assert not graph.can_link(first, second, ConnectionType.TRANSPORT)

    def test_underground_output_flows_opposite(self, graph):
        exit_ = place(graph, "underground-belt", (0.5, 0.5), direction=6, direction_type="output")
        belt = place(graph, "transport-belt", (1.5, 0.5), direction=2)
        assert graph.can_link(exit_, belt, ConnectionType.TRANSPORT)

    def test_adjacent_pipes_link(self, graph):
        a = place(graph, "pipe", (0.5, 0.5))
        b = place(graph, "pipe", (1.5, 0.5))
        c = place(graph, "pipe", (1.5, 2.5))
        assert graph.can_link(a, b, ConnectionType.FLUID)
        assert not graph.can_link(b, c, ConnectionType.FLUID)

    def test_pumpjack_output_links_to_pipe_on_plug(self, graph):
        pumpjack = place(graph, "pumpjack", (0.5, 0.5))
        on_plug = place(graph, "pipe", (1.5, -1.5))
        off_plug = place(graph, "pipe", (-0.5, -1.5))
        assert graph.neighbors(pumpjack, ConnectionType.FLUID) == [on_plug]
        assert off_plug not in graph.neighbors(pumpjack)

    def test_settings_link_needs_same_family(self, graph):
        a = place(graph, "assembling-machine-1", (0.5, 0.5))
        b = place(graph, "assembling-machine-2", (3.5, 0.5))
        chest = place(graph, "wooden-chest", (6.5, 0.5))
        assert graph.can_link_settings(a, b)
        assert not graph.can_link_settings(a, a)
        assert not graph.can_link_settings(a, chest)
