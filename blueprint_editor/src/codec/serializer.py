"""JSON-level conversion between interchange documents and the model."""

from __future__ import annotations

import copy
import math
from typing import Any, Dict, List, Mapping, Optional, Union

from blueprint_editor.src.catalog.catalog import Catalog
from blueprint_editor.src.common.constants import (
    BLUEPRINT_KEY,
    BOOK_KEY,
    DEFAULT_CONFIG,
    WIRE_LIST_MAJOR_VERSION,
    EditorConfig,
)
from blueprint_editor.src.common.diagnostics import EditorDiagnostics
from blueprint_editor.src.common.geometry import version_number, version_tuple
from blueprint_editor.src.model.blueprint import Blueprint, Icon
from blueprint_editor.src.model.book import Book
from blueprint_editor.src.model.entity import Entity
from .validation import blueprint_bodies, check_structure, check_supported, split_payload
from .wire_format import (
    read_legacy_wires,
    read_wire_list,
    resolve_wires,
    write_legacy_wires,
    write_wire_list,
)

Document = Union[Blueprint, Book]

BLUEPRINT_FIELDS = frozenset(
    {"item", "label", "description", "icons", "entities", "tiles", "wires", "version"}
)
BOOK_FIELDS = frozenset(
    {"item", "label", "description", "icons", "blueprints", "active_index", "version"}
)
ENTITY_FIELDS = frozenset(
    {"entity_number", "name", "position", "direction", "type", "connections", "neighbours"}
)

STAGE = "codec"


# ----------------------------------------------------------------------
# JSON -> model
# ----------------------------------------------------------------------


def document_from_dict(
    payload: Any,
    catalog: Optional[Catalog] = None,
    diagnostics: Optional[EditorDiagnostics] = None,
    config: EditorConfig = DEFAULT_CONFIG,
) -> Document:
    """Validate a decoded JSON document and build the model from it.

    Raises InvalidFormatError for structural problems and an
    UnsupportedBlueprintError subclass for unknown kinds; nothing is built
    unless the whole document passes.
    """
    catalog = catalog if catalog is not None else Catalog.default()
    diagnostics = diagnostics if diagnostics is not None else EditorDiagnostics()

    key, body = split_payload(payload)
    check_structure(key, body)
    check_supported(blueprint_bodies(key, body), catalog)

    if key == BLUEPRINT_KEY:
        return blueprint_from_body(body, catalog, diagnostics, config)
    return book_from_body(body, catalog, diagnostics, config)


def _icons_from_body(body: Mapping[str, Any]) -> List[Icon]:
    icons = []
    for position, icon in enumerate(body.get("icons", []), start=1):
        signal = icon["signal"]
        icons.append(
            Icon(
                index=icon.get("index", position),
                signal_type=signal.get("type", "item"),
                name=signal["name"],
            )
        )
    return icons


def _version_of(body: Mapping[str, Any], config: EditorConfig):
    if "version" in body:
        return version_tuple(body["version"])
    return config.default_version


def blueprint_from_body(
    body: Mapping[str, Any],
    catalog: Catalog,
    diagnostics: EditorDiagnostics,
    config: EditorConfig = DEFAULT_CONFIG,
) -> Blueprint:
    version = _version_of(body, config)
    sixteen_way = version[0] >= WIRE_LIST_MAJOR_VERSION
    blueprint = Blueprint(
        catalog,
        config,
        name=body.get("label", config.default_blueprint_name),
        description=body.get("description", ""),
        icons=_icons_from_body(body),
        version=version,
        extra={k: copy.deepcopy(v) for k, v in body.items() if k not in BLUEPRINT_FIELDS},
    )
    graph = blueprint.graph

    numbers: Dict[int, int] = {}
    wire_refs = []
    for raw in body.get("entities", []):
        entry = catalog.lookup(raw["name"])
        number = raw["entity_number"]
        wire_refs.extend(read_legacy_wires(raw))

        direction = raw.get("direction", 0)
        if sixteen_way:
            direction = direction // 2 if direction % 2 == 0 else -1
        if direction not in entry.valid_directions():
            diagnostics.debug(
                f"Direction {raw.get('direction')} of {entry.name} reset to north",
                stage=STAGE,
                kind=entry.name,
            )
            direction = 0

        direction_type = None
        if entry.flow_typed:
            direction_type = raw.get("type") if raw.get("type") in ("input", "output") else "input"

        position = (float(raw["position"]["x"]), float(raw["position"]["y"]))
        if not graph.can_place(entry, position, direction):
            diagnostics.warning(
                f"Skipped {entry.name} #{number} at {position}: overlaps another entity",
                stage=STAGE,
                kind=entry.name,
            )
            continue

        entity = Entity(
            entity_id=graph.allocate_id(),
            entry=entry,
            position=position,
            direction=direction,
            direction_type=direction_type,
            properties={
                k: copy.deepcopy(v) for k, v in raw.items() if k not in ENTITY_FIELDS
            },
        )
        graph.insert(entity)
        numbers[number] = entity.entity_id

    listed, rejected = read_wire_list(body.get("wires", []))
    for row in rejected:
        diagnostics.warning(
            f"Skipped wire {row}: unknown connector or mismatched colours", stage=STAGE
        )
    wire_refs.extend(listed)
    connections, dangling = resolve_wires(wire_refs, numbers)
    for connection in connections:
        graph.add_connection(connection)
    for source, _, target, _, color in dangling:
        diagnostics.warning(
            f"Skipped {color} wire from #{source} to missing entity #{target}",
            stage=STAGE,
        )

    for raw in body.get("tiles", []):
        cell = (math.floor(raw["position"]["x"]), math.floor(raw["position"]["y"]))
        if blueprint.tile_at(cell) is not None:
            diagnostics.warning(f"Skipped duplicate tile at {cell}", stage=STAGE, kind=raw["name"])
            continue
        blueprint.write_tile(cell, raw["name"])

    return blueprint


def book_from_body(
    body: Mapping[str, Any],
    catalog: Catalog,
    diagnostics: EditorDiagnostics,
    config: EditorConfig = DEFAULT_CONFIG,
) -> Book:
    pages = sorted(
        enumerate(body.get("blueprints", [])),
        key=lambda item: (item[1].get("index", item[0]), item[0]),
    )
    requested = body.get("active_index", 0)

    blueprints = []
    active = 0
    for position, page in pages:
        index = page.get("index", position)
        if BLUEPRINT_KEY not in page:
            held = ", ".join(k for k in page if k != "index") or "nothing"
            diagnostics.warning(f"Skipped book page {index} holding {held}", stage=STAGE)
            continue
        if index <= requested:
            active = len(blueprints)
        blueprints.append(blueprint_from_body(page[BLUEPRINT_KEY], catalog, diagnostics, config))

    return Book(
        blueprints,
        active_index=active,
        name=body.get("label", config.default_book_name),
        description=body.get("description", ""),
        icons=_icons_from_body(body),
        version=_version_of(body, config),
        extra={k: copy.deepcopy(v) for k, v in body.items() if k not in BOOK_FIELDS},
        config=config,
    )


# ----------------------------------------------------------------------
# model -> JSON
# ----------------------------------------------------------------------


def _number(value: float) -> Union[int, float]:
    return int(value) if float(value).is_integer() else value


def _icons_to_list(icons: List[Icon]) -> List[Dict[str, Any]]:
    return [
        {"signal": {"type": icon.signal_type, "name": icon.name}, "index": icon.index}
        for icon in icons
    ]


def blueprint_to_body(blueprint: Blueprint) -> Dict[str, Any]:
    sixteen_way = blueprint.version[0] >= WIRE_LIST_MAJOR_VERSION
    body: Dict[str, Any] = {"item": "blueprint", "label": blueprint.name}
    if blueprint.description:
        body["description"] = blueprint.description
    if blueprint.icons:
        body["icons"] = _icons_to_list(blueprint.icons)

    entities = blueprint.entities
    export_index = {entity.entity_id: i for i, entity in enumerate(entities, start=1)}
    entity_dicts: Dict[int, Dict[str, Any]] = {}
    connections = {}
    for entity in entities:
        number = export_index[entity.entity_id]
        data: Dict[str, Any] = {
            "entity_number": number,
            "name": entity.name,
            "position": {"x": _number(entity.position[0]), "y": _number(entity.position[1])},
        }
        if entity.direction:
            data["direction"] = entity.direction * 2 if sixteen_way else entity.direction
        if entity.direction_type is not None:
            data["type"] = entity.direction_type
        for key, value in entity.properties.items():
            if key not in ENTITY_FIELDS:
                data[key] = copy.deepcopy(value)
        entity_dicts[number] = data
        for connection in entity.connections:
            connections.setdefault(connection, None)

    if sixteen_way:
        wires = write_wire_list(connections, export_index)
    else:
        kinds = {entity.entity_id: entity.entry.prototype_type for entity in entities}
        write_legacy_wires(entity_dicts, connections, export_index, kinds)
        wires = []

    if entity_dicts:
        body["entities"] = list(entity_dicts.values())
    if blueprint.tiles:
        body["tiles"] = [
            {"name": tile.name, "position": {"x": tile.position[0], "y": tile.position[1]}}
            for tile in blueprint.tiles
        ]
    if wires:
        body["wires"] = wires
    for key, value in blueprint.extra.items():
        body.setdefault(key, copy.deepcopy(value))
    body["version"] = version_number(blueprint.version)
    return body


def book_to_body(book: Book) -> Dict[str, Any]:
    body: Dict[str, Any] = {"item": "blueprint-book", "label": book.name}
    if book.description:
        body["description"] = book.description
    if book.icons:
        body["icons"] = _icons_to_list(book.icons)
    body["blueprints"] = [
        {"index": i, BLUEPRINT_KEY: blueprint_to_body(blueprint)}
        for i, blueprint in enumerate(book)
    ]
    body["active_index"] = book.active_index or 0
    for key, value in book.extra.items():
        body.setdefault(key, copy.deepcopy(value))
    body["version"] = version_number(book.version)
    return body


def document_to_dict(document: Document) -> Dict[str, Any]:
    if isinstance(document, Book):
        return {BOOK_KEY: book_to_body(document)}
    return {BLUEPRINT_KEY: blueprint_to_body(document)}
