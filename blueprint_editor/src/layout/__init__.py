"""Layout generation for derived entity networks."""

from .conduit_planner import (
    ConduitLayout,
    ConduitPlacement,
    ConduitPlanner,
    ExtractorSpec,
    generate_conduits,
)

__all__ = [
    "ConduitLayout",
    "ConduitPlacement",
    "ConduitPlanner",
    "ExtractorSpec",
    "generate_conduits",
]
