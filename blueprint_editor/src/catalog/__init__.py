"""Catalog of known entity, tile, item and recipe kinds."""

from .catalog import (
    Catalog,
    CatalogCategory,
    CatalogEntry,
    UnknownKindError,
    entry_from_prototype,
)
from .properties import property_schema, settings_keys

__all__ = [
    "Catalog",
    "CatalogCategory",
    "CatalogEntry",
    "UnknownKindError",
    "entry_from_prototype",
    "property_schema",
    "settings_keys",
]
