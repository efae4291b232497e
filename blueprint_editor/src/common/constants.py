"""Shared constants across the blueprint editor core."""

from dataclasses import dataclass, field
from typing import Optional, Tuple

# Interchange string
VERSION_MARKER = "0"
BLUEPRINT_KEY = "blueprint"
BOOK_KEY = "blueprint_book"

# Directions use the 8-way numbering; modelled kinds only use the even values.
CARDINAL_DIRECTIONS = (0, 2, 4, 6)

# Game versions from 2.0 on store 16-way directions and top-level wire lists.
WIRE_LIST_MAJOR_VERSION = 2

# Factorio 1.1 default circuit wire reach
DEFAULT_WIRE_DISTANCE = 9.0

WIRE_COLORS = ("red", "green")
COPPER = "copper"

# Prototype types that need track topology
TRAIN_PROTOTYPE_TYPES = frozenset(
    {
        "locomotive",
        "cargo-wagon",
        "fluid-wagon",
        "artillery-wagon",
        "straight-rail",
        "curved-rail",
        "curved-rail-a",
        "curved-rail-b",
        "half-diagonal-rail",
        "legacy-straight-rail",
        "legacy-curved-rail",
        "elevated-straight-rail",
        "elevated-curved-rail-a",
        "elevated-curved-rail-b",
        "elevated-half-diagonal-rail",
        "rail-ramp",
        "rail-support",
        "rail-signal",
        "rail-chain-signal",
        "train-stop",
    }
)

# Vanilla names of the same family, checked even when the loaded game data
# does not know them (1.1 strings decoded against 2.0 data and vice versa).
TRAIN_KINDS = frozenset(TRAIN_PROTOTYPE_TYPES)

TRANSPORT_PROTOTYPE_TYPES = frozenset(
    {
        "transport-belt",
        "underground-belt",
        "splitter",
        "loader",
        "loader-1x1",
        "linked-belt",
        "lane-splitter",
    }
)

FLOW_TYPED_PROTOTYPE_TYPES = frozenset(
    {"underground-belt", "loader", "loader-1x1", "linked-belt"}
)

COPPER_WIRE_PROTOTYPE_TYPES = frozenset({"electric-pole", "power-switch"})

NON_ROTATABLE_PROTOTYPE_TYPES = frozenset(
    {
        "pipe",
        "container",
        "logistic-container",
        "infinity-container",
        "electric-pole",
        "lamp",
        "wall",
        "gate",
        "roboport",
        "radar",
        "beacon",
        "solar-panel",
        "accumulator",
        "rocket-silo",
        "lab",
        "reactor",
        "heat-pipe",
        "programmable-speaker",
        "power-switch",
        "electric-energy-interface",
        "land-mine",
        "turret",
        "ammo-turret",
        "electric-turret",
        "fluid-turret",
    }
)


@dataclass(frozen=True)
class EditorConfig:
    """Tunable settings shared by the codec, model and layout generator."""

    version_marker: str = VERSION_MARKER
    default_version: Tuple[int, int, int, int] = (1, 1, 110, 0)
    default_blueprint_name: str = "Blueprint"
    default_book_name: str = "Blueprint Book"

    # Placeable area is [-extent, extent) on both axes, in tiles
    blueprint_extent: int = 10000

    default_wire_distance: float = DEFAULT_WIRE_DISTANCE

    conduit_kind: str = "pipe"
    extractor_kinds: Tuple[str, ...] = field(default_factory=lambda: ("pumpjack",))
    conduit_search_margin: int = 4

    history_limit: Optional[int] = None


DEFAULT_CONFIG = EditorConfig()
