"""
Pytest configuration for the blueprint editor project.
Ensures that the root directory is in the Python path so imports work correctly,
and provides a small hand-built catalog so tests do not depend on game data.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from blueprint_editor.src.catalog.catalog import Catalog, CatalogEntry  # noqa: E402
from blueprint_editor.src.common.constants import EditorConfig  # noqa: E402

PUMPJACK_OUTPUTS = {0: ((1, -2),), 2: ((2, -1),), 4: ((-1, 2),), 6: ((-2, 1),)}
PIPE_OUTPUTS = {0: ((0, -1), (1, 0), (0, 1), (-1, 0))}


def build_test_catalog() -> Catalog:
    entries = [
        CatalogEntry(
            "pipe", prototype_type="pipe", rotatable=False, fluid_connections=PIPE_OUTPUTS
        ),
        CatalogEntry(
            "pumpjack",
            prototype_type="mining-drill",
            size=(3, 3),
            fluid_connections=PUMPJACK_OUTPUTS,
        ),
        CatalogEntry("transport-belt", prototype_type="transport-belt"),
        CatalogEntry("underground-belt", prototype_type="underground-belt", flow_typed=True),
        CatalogEntry("assembling-machine-1", prototype_type="assembling-machine", size=(3, 3)),
        CatalogEntry("assembling-machine-2", prototype_type="assembling-machine", size=(3, 3)),
        CatalogEntry("stone-furnace", prototype_type="furnace", size=(2, 2), rotatable=False),
        CatalogEntry("inserter", prototype_type="inserter"),
        CatalogEntry(
            "small-electric-pole",
            prototype_type="electric-pole",
            rotatable=False,
            max_wire_distance=7.5,
        ),
        CatalogEntry(
            "medium-electric-pole",
            prototype_type="electric-pole",
            rotatable=False,
            max_wire_distance=9.0,
        ),
        CatalogEntry(
            "power-switch",
            prototype_type="power-switch",
            size=(2, 2),
            rotatable=False,
            max_wire_distance=10.0,
        ),
        CatalogEntry("constant-combinator", prototype_type="constant-combinator"),
        CatalogEntry("arithmetic-combinator", prototype_type="arithmetic-combinator", size=(1, 2)),
        CatalogEntry("wooden-chest", prototype_type="container", rotatable=False),
    ]
    return Catalog(
        entities=entries,
        tiles=["concrete", "stone-path"],
        items=[
            "pipe",
            "pumpjack",
            "transport-belt",
            "iron-plate",
            "copper-cable",
            "speed-module",
            "wooden-chest",
        ],
        recipes=["iron-gear-wheel", "electronic-circuit", "copper-cable"],
    )


@pytest.fixture
def catalog():
    return build_test_catalog()


@pytest.fixture
def config():
    return EditorConfig()


@pytest.fixture
def blueprint(catalog, config):
    from blueprint_editor.src.model.blueprint import Blueprint

    return Blueprint(catalog, config, name="Test")


@pytest.fixture
def default_catalog(catalog):
    """Route ``Catalog.default()`` to the test catalog."""
    from unittest.mock import patch

    with patch("blueprint_editor.src.catalog.catalog._default_catalog", return_value=catalog):
        yield catalog
