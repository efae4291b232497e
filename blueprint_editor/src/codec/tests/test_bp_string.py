"""
Tests for codec/bp_string.py - Interchange string decoding and encoding.
"""

import asyncio

import pytest
from draftsman.utils import JSON_to_string

from blueprint_editor.src.codec import bp_string
from blueprint_editor.src.codec.errors import (
    InvalidFormatError,
    UnsupportedModdedContentError,
    UnsupportedTrainBlueprintError,
)
from blueprint_editor.src.codec.serializer import document_to_dict
from blueprint_editor.src.common.geometry import version_number
from blueprint_editor.src.model.blueprint import Blueprint, Icon
from blueprint_editor.src.model.book import Book


def build_sample(catalog, version=(1, 1, 110, 0)):
    blueprint = Blueprint(
        catalog,
        name="Sample",
        description="all wire kinds",
        icons=[Icon(1, "item", "pipe")],
        version=version,
    )
    pole_a = blueprint.add_entity("small-electric-pole", (0.5, 0.5))
    pole_b = blueprint.add_entity("small-electric-pole", (5.5, 0.5))
    switch = blueprint.add_entity("power-switch", (3.0, 3.0))
    constant = blueprint.add_entity("constant-combinator", (0.5, 2.5))
    arithmetic = blueprint.add_entity("arithmetic-combinator", (6.5, 3.0))
    inserter = blueprint.add_entity("inserter", (8.5, 0.5), direction=2)
    blueprint.add_entity("underground-belt", (9.5, 0.5), direction=6, direction_type="output")
    blueprint.add_entity(
        "assembling-machine-1", (12.5, 1.5), properties={"recipe": "iron-gear-wheel"}
    )

    blueprint.connect(pole_a, pole_b, "copper")
    blueprint.connect(switch, pole_a, "copper", source_circuit=1)
    blueprint.connect(switch, pole_b, "copper", source_circuit=2)
    blueprint.connect(constant, arithmetic, "red", target_circuit=1)
    blueprint.connect(arithmetic, inserter, "green", source_circuit=2)
    blueprint.connect(constant, pole_a, "green")

    blueprint.place_tile("concrete", (0, 5))
    blueprint.place_tile("stone-path", (1, 5))
    return blueprint


def structure(blueprint):
    """Everything that must survive a round trip, keyed by export order."""
    order = {e.entity_id: i for i, e in enumerate(blueprint.entities)}
    return (
        blueprint.name,
        blueprint.description,
        blueprint.icons,
        blueprint.version,
        [
            (e.name, e.position, e.direction, e.direction_type, e.properties)
            for e in blueprint.entities
        ],
        sorted(
            (
                order[c.source_id],
                c.source_circuit,
                order[c.target_id],
                c.target_circuit,
                c.color,
            )
            for e in blueprint.entities
            for c in e.connections
        ),
        sorted((t.position, t.name) for t in blueprint.tiles),
    )


class TestRoundTrip:
    @pytest.mark.parametrize("version", [(1, 1, 110, 0), (2, 0, 10, 0)])
    def test_round_trip_preserves_structure(self, catalog, version):
        original = build_sample(catalog, version)
        decoded = bp_string.decode(bp_string.encode(original), catalog)
        assert structure(decoded) == structure(original)

    @pytest.mark.parametrize("version", [(1, 1, 110, 0), (2, 0, 10, 0)])
    def test_reencoding_is_stable(self, catalog, version):
        encoded = bp_string.encode(build_sample(catalog, version))
        again = bp_string.encode(bp_string.decode(encoded, catalog))
        assert again == encoded

    def test_legacy_format_lists_wires_on_entities(self, catalog):
        body = document_to_dict(build_sample(catalog))["blueprint"]
        assert "wires" not in body
        poles = [e for e in body["entities"] if e["name"] == "small-electric-pole"]
        assert poles[0]["neighbours"] == [poles[1]["entity_number"]]
        switch = next(e for e in body["entities"] if e["name"] == "power-switch")
        assert set(switch["connections"]) == {"Cu0", "Cu1"}

    def test_wire_list_format_doubles_directions(self, catalog):
        body = document_to_dict(build_sample(catalog, (2, 0, 10, 0)))["blueprint"]
        assert body["wires"]
        inserter = next(e for e in body["entities"] if e["name"] == "inserter")
        assert inserter["direction"] == 4
        assert all("connections" not in e for e in body["entities"])

    def test_book_round_trip(self, catalog):
        pages = [build_sample(catalog), Blueprint(catalog, name="Second")]
        pages[1].add_entity("pipe", (0.5, 0.5))
        book = Book(pages, active_index=1, name="Outposts")
        decoded = bp_string.decode(bp_string.encode(book), catalog)
        assert isinstance(decoded, Book)
        assert decoded.name == "Outposts"
        assert decoded.active_index == 1
        assert [page.name for page in decoded] == ["Sample", "Second"]
        assert structure(decoded[0]) == structure(pages[0])


class TestEmptyDocuments:
    def test_empty_blueprint_is_idempotent(self, catalog):
        encoded = bp_string.encode(Blueprint(catalog))
        decoded = bp_string.decode(encoded, catalog)
        assert bp_string.is_empty(decoded)
        assert bp_string.encode(decoded) == encoded

    def test_book_of_empty_pages_is_empty(self, catalog):
        assert bp_string.is_empty(Book([Blueprint(catalog), Blueprint(catalog)]))


class TestMalformedStrings:
    @pytest.mark.parametrize("raw", ["", "   ", "1eJyrVg==", "0!!!", "0bm90IHpsaWI="])
    def test_invalid_format(self, catalog, raw):
        with pytest.raises(InvalidFormatError):
            bp_string.decode(raw, catalog)

    def test_non_string_input(self, catalog):
        with pytest.raises(InvalidFormatError):
            bp_string.decode(None, catalog)

    def test_wrong_top_level_shape(self, catalog):
        with pytest.raises(InvalidFormatError):
            bp_string.decode(JSON_to_string([1, 2, 3]), catalog)
        with pytest.raises(InvalidFormatError):
            bp_string.decode(JSON_to_string({"blueprint": {}, "blueprint_book": {}}), catalog)

    @pytest.mark.parametrize("field", ["entities", "tiles"])
    @pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_positions(self, catalog, field, bad):
        item = {"position": {"x": bad, "y": 0.5}}
        if field == "entities":
            item.update(entity_number=1, name="pipe")
        else:
            item["name"] = "concrete"
        raw = JSON_to_string({"blueprint": {"item": "blueprint", field: [item]}})
        with pytest.raises(InvalidFormatError, match=r"position\.x"):
            bp_string.decode(raw, catalog)
        result = bp_string.try_decode(raw, catalog)
        assert isinstance(result.error, InvalidFormatError)

    def test_surrounding_whitespace_is_ignored(self, catalog):
        encoded = bp_string.encode(build_sample(catalog))
        assert len(bp_string.decode(f"  {encoded}\n", catalog).entities) == 8


class TestUnsupportedKinds:
    def _raw(self, *names):
        entities = [
            {"entity_number": i, "name": name, "position": {"x": i * 4 + 0.5, "y": 0.5}}
            for i, name in enumerate(names, start=1)
        ]
        body = {"item": "blueprint", "entities": entities, "version": version_number((1, 1))}
        return JSON_to_string({"blueprint": body})

    def test_train_kinds_are_listed(self, catalog):
        raw = self._raw("pipe", "locomotive", "straight-rail", "locomotive")
        with pytest.raises(UnsupportedTrainBlueprintError) as exc_info:
            bp_string.decode(raw, catalog)
        assert exc_info.value.kinds == ("locomotive", "straight-rail")
        assert "locomotive, straight-rail" in str(exc_info.value)

    def test_train_kinds_take_precedence_over_modded(self, catalog):
        with pytest.raises(UnsupportedTrainBlueprintError) as exc_info:
            bp_string.decode(self._raw("modded-thing", "cargo-wagon"), catalog)
        assert exc_info.value.kinds == ("cargo-wagon",)

    def test_modded_kinds_are_listed(self, catalog):
        with pytest.raises(UnsupportedModdedContentError) as exc_info:
            bp_string.decode(self._raw("modded-b", "pipe", "modded-a"), catalog)
        assert exc_info.value.kinds == ("modded-b", "modded-a")

    def test_unknown_kind_in_book_page(self, catalog):
        raw = JSON_to_string(
            {
                "blueprint_book": {
                    "item": "blueprint-book",
                    "blueprints": [
                        {"index": 0, "blueprint": {"item": "blueprint"}},
                        {
                            "index": 1,
                            "blueprint": {
                                "item": "blueprint",
                                "tiles": [{"name": "modded-tile", "position": {"x": 0, "y": 0}}],
                            },
                        },
                    ],
                }
            }
        )
        with pytest.raises(UnsupportedModdedContentError) as exc_info:
            bp_string.decode(raw, catalog)
        assert exc_info.value.kinds == ("modded-tile",)


class TestResultWrappers:
    def test_try_decode_success_collects_diagnostics(self, catalog):
        raw = JSON_to_string(
            {
                "blueprint": {
                    "item": "blueprint",
                    "entities": [
                        {"entity_number": 1, "name": "pipe", "position": {"x": 0.5, "y": 0.5}},
                        {"entity_number": 2, "name": "pipe", "position": {"x": 0.5, "y": 0.5}},
                    ],
                }
            }
        )
        result = bp_string.try_decode(raw, catalog)
        assert result.ok
        assert len(result.value.entities) == 1
        assert any("overlaps" in message for message in result.diagnostics)

    def test_try_decode_failure(self, catalog):
        result = bp_string.try_decode("garbage", catalog)
        assert not result.ok
        assert result.value is None
        assert isinstance(result.error, InvalidFormatError)

    def test_try_encode(self, catalog):
        result = bp_string.try_encode(build_sample(catalog))
        assert result.ok
        assert result.value.startswith("0")

    def test_async_variants(self, catalog):
        async def run():
            encoded = await bp_string.encode_async(build_sample(catalog))
            return await bp_string.decode_async(encoded.value, catalog)

        result = asyncio.run(run())
        assert result.ok
        assert result.value.name == "Sample"
