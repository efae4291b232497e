"""Structural checks and kind validation for decoded JSON documents.

Both passes run over the whole document, every book page included, before
any model object is built.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Dict, Iterator, List, Mapping, Tuple

from blueprint_editor.src.catalog.catalog import Catalog
from blueprint_editor.src.common.constants import BLUEPRINT_KEY, BOOK_KEY
from .errors import (
    InvalidFormatError,
    UnsupportedModdedContentError,
    UnsupportedTrainBlueprintError,
)

DOCUMENT_KEYS = (BLUEPRINT_KEY, BOOK_KEY)


def _is_number(value: Any) -> bool:
    """Finite and representable as a float."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def split_payload(payload: Any) -> Tuple[str, Dict[str, Any]]:
    """Return the discriminator key and its body."""
    if not isinstance(payload, dict):
        raise InvalidFormatError("Blueprint string does not hold a JSON object")
    keys = [key for key in payload if key in DOCUMENT_KEYS]
    if len(keys) != 1 or len(payload) != 1:
        found = ", ".join(sorted(payload)) or "nothing"
        raise InvalidFormatError(
            f"Expected exactly one of 'blueprint' or 'blueprint_book', found {found}"
        )
    key = keys[0]
    body = payload[key]
    if not isinstance(body, dict):
        raise InvalidFormatError(f"'{key}' must be an object")
    return key, body


def _check_position(value: Any, where: str) -> None:
    if not isinstance(value, dict):
        raise InvalidFormatError(f"{where}.position must be an object")
    for axis in ("x", "y"):
        if not _is_number(value.get(axis)):
            raise InvalidFormatError(f"{where}.position.{axis} must be a finite number")


def _check_header(body: Mapping[str, Any], where: str) -> None:
    for key in ("label", "description"):
        if key in body and not isinstance(body[key], str):
            raise InvalidFormatError(f"{where}.{key} must be a string")
    icons = body.get("icons", [])
    if not isinstance(icons, list):
        raise InvalidFormatError(f"{where}.icons must be a list")
    for i, icon in enumerate(icons):
        signal = icon.get("signal") if isinstance(icon, dict) else None
        if not isinstance(signal, dict) or not isinstance(signal.get("name"), str):
            raise InvalidFormatError(f"{where}.icons[{i}].signal.name must be a string")


def check_blueprint_body(body: Mapping[str, Any], where: str = "blueprint") -> None:
    _check_header(body, where)
    entities = body.get("entities", [])
    if not isinstance(entities, list):
        raise InvalidFormatError(f"{where}.entities must be a list")
    seen = set()
    for i, entity in enumerate(entities):
        at = f"{where}.entities[{i}]"
        if not isinstance(entity, dict):
            raise InvalidFormatError(f"{at} must be an object")
        if not isinstance(entity.get("name"), str):
            raise InvalidFormatError(f"{at}.name must be a string")
        _check_position(entity.get("position"), at)
        number = entity.get("entity_number")
        if not _is_int(number):
            raise InvalidFormatError(f"{at}.entity_number must be an integer")
        if number in seen:
            raise InvalidFormatError(f"{at}.entity_number {number} is used twice")
        seen.add(number)
        if "direction" in entity and not _is_int(entity["direction"]):
            raise InvalidFormatError(f"{at}.direction must be an integer")

    tiles = body.get("tiles", [])
    if not isinstance(tiles, list):
        raise InvalidFormatError(f"{where}.tiles must be a list")
    for i, tile in enumerate(tiles):
        at = f"{where}.tiles[{i}]"
        if not isinstance(tile, dict) or not isinstance(tile.get("name"), str):
            raise InvalidFormatError(f"{at}.name must be a string")
        _check_position(tile.get("position"), at)

    wires = body.get("wires", [])
    if not isinstance(wires, list):
        raise InvalidFormatError(f"{where}.wires must be a list")
    for i, wire in enumerate(wires):
        if not (isinstance(wire, list) and len(wire) == 4 and all(_is_int(v) for v in wire)):
            raise InvalidFormatError(f"{where}.wires[{i}] must be four integers")

    if "version" in body and not _is_int(body["version"]):
        raise InvalidFormatError(f"{where}.version must be an integer")


def check_book_body(body: Mapping[str, Any], where: str = "blueprint_book") -> None:
    _check_header(body, where)
    pages = body.get("blueprints", [])
    if not isinstance(pages, list):
        raise InvalidFormatError(f"{where}.blueprints must be a list")
    for i, page in enumerate(pages):
        if not isinstance(page, dict):
            raise InvalidFormatError(f"{where}.blueprints[{i}] must be an object")
        if "index" in page and not _is_int(page["index"]):
            raise InvalidFormatError(f"{where}.blueprints[{i}].index must be an integer")
        if BLUEPRINT_KEY in page:
            if not isinstance(page[BLUEPRINT_KEY], dict):
                raise InvalidFormatError(f"{where}.blueprints[{i}].blueprint must be an object")
            check_blueprint_body(page[BLUEPRINT_KEY], f"{where}.blueprints[{i}].blueprint")
    if "active_index" in body and not _is_int(body["active_index"]):
        raise InvalidFormatError(f"{where}.active_index must be an integer")
    if "version" in body and not _is_int(body["version"]):
        raise InvalidFormatError(f"{where}.version must be an integer")


def check_structure(key: str, body: Mapping[str, Any]) -> None:
    if key == BLUEPRINT_KEY:
        check_blueprint_body(body)
    else:
        check_book_body(body)


def blueprint_bodies(key: str, body: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Every blueprint body in the document, in page order."""
    if key == BLUEPRINT_KEY:
        return [body]
    return [
        page[BLUEPRINT_KEY]
        for page in body.get("blueprints", [])
        if isinstance(page.get(BLUEPRINT_KEY), dict)
    ]


def _requested_items(items: Any) -> Iterator[str]:
    # 1.x: {"speed-module": 2}; 2.x: [{"id": {"name": "speed-module"}, ...}]
    if isinstance(items, dict):
        yield from (name for name in items if isinstance(name, str))
    elif isinstance(items, list):
        for request in items:
            ident = request.get("id") if isinstance(request, dict) else None
            if isinstance(ident, dict) and isinstance(ident.get("name"), str):
                yield ident["name"]


def referenced_kinds(body: Mapping[str, Any]) -> Iterator[Tuple[str, str]]:
    """Yield ``(category, name)`` for every kind a blueprint body refers to."""
    for entity in body.get("entities", []):
        yield "entity", entity["name"]
        for item in _requested_items(entity.get("items")):
            yield "item", item
        recipe = entity.get("recipe")
        if isinstance(recipe, str):
            yield "recipe", recipe
    for tile in body.get("tiles", []):
        yield "tile", tile["name"]
    for icon in body.get("icons", []):
        signal = icon["signal"]
        if signal.get("type", "item") == "item":
            yield "item", signal["name"]


def find_unsupported(
    bodies: List[Mapping[str, Any]], catalog: Catalog
) -> Tuple[List[str], List[str]]:
    """Collect unknown kinds as ``(train_kinds, other_kinds)``, first-seen order."""
    known = {
        "entity": catalog.__contains__,
        "tile": catalog.has_tile,
        "item": catalog.has_item,
        "recipe": catalog.has_recipe,
    }
    trains: Dict[str, None] = {}
    others: Dict[str, None] = {}
    for body in bodies:
        for category, name in referenced_kinds(body):
            if category == "entity" and catalog.is_train_kind(name):
                trains.setdefault(name, None)
            elif not known[category](name):
                others.setdefault(name, None)
    return list(trains), list(others)


def check_supported(bodies: List[Mapping[str, Any]], catalog: Catalog) -> None:
    """Raise for unsupported kinds; train kinds take precedence."""
    trains, others = find_unsupported(bodies, catalog)
    if trains:
        raise UnsupportedTrainBlueprintError(trains)
    if others:
        raise UnsupportedModdedContentError(others)
