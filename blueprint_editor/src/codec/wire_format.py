"""Wire (circuit and copper) encoding for both interchange generations.

Game versions before 2.0 list wires on each entity: circuit wires under
``connections[circuit_id][color]``, pole copper under ``neighbours`` and
power switch copper under ``connections["Cu0"/"Cu1"]``. From 2.0 on, the
blueprint carries one top-level ``wires`` list of
``[entity_a, connector_a, entity_b, connector_b]`` rows.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from blueprint_editor.src.common.constants import COPPER
from blueprint_editor.src.model.entity import Connection

# 2.x wire connector ids
CONNECTOR_IDS: Dict[Tuple[str, int], int] = {
    ("red", 1): 1,
    ("green", 1): 2,
    ("red", 2): 3,
    ("green", 2): 4,
    (COPPER, 1): 5,
    (COPPER, 2): 6,
}
CONNECTOR_KEYS = {value: key for key, value in CONNECTOR_IDS.items()}

POWER_SWITCH = "power-switch"

# (source_number, source_circuit, target_number, target_circuit, color)
WireRef = Tuple[int, int, int, int, str]


def read_legacy_wires(entity: Mapping[str, Any]) -> List[WireRef]:
    """Wire references listed on one pre-2.0 entity."""
    number = entity["entity_number"]
    refs: List[WireRef] = []

    connections = entity.get("connections") or {}
    if isinstance(connections, dict):
        for point, colors in connections.items():
            if point in ("Cu0", "Cu1"):
                circuit = 1 if point == "Cu0" else 2
                for link in colors or []:
                    if isinstance(link, dict) and "entity_id" in link:
                        refs.append((number, circuit, link["entity_id"], 1, COPPER))
                continue
            if not str(point).isdigit() or not isinstance(colors, dict):
                continue
            for color, links in colors.items():
                if color not in ("red", "green"):
                    continue
                for link in links or []:
                    if not isinstance(link, dict) or "entity_id" not in link:
                        continue
                    circuit_id = link.get("circuit_id", 1)
                    if isinstance(circuit_id, int):
                        refs.append((number, int(point), link["entity_id"], circuit_id, color))

    for neighbour in entity.get("neighbours") or []:
        if not isinstance(neighbour, int):
            continue
        refs.append((number, 1, neighbour, 1, COPPER))
    return refs


def read_wire_list(rows: Iterable[List[int]]) -> Tuple[List[WireRef], List[List[int]]]:
    """Decode 2.x ``wires`` rows.

    Returns the references plus the rows that name an unknown connector or
    join connectors of different colours.
    """
    refs: List[WireRef] = []
    rejected: List[List[int]] = []
    for row in rows:
        source, source_connector, target, target_connector = row
        source_key = CONNECTOR_KEYS.get(source_connector)
        target_key = CONNECTOR_KEYS.get(target_connector)
        if source_key is None or target_key is None or source_key[0] != target_key[0]:
            rejected.append(list(row))
            continue
        refs.append((source, source_key[1], target, target_key[1], source_key[0]))
    return refs, rejected


def resolve_wires(
    refs: Iterable[WireRef], numbers: Mapping[int, int]
) -> Tuple[List[Connection], List[WireRef]]:
    """Map wire references onto local ids.

    Returns the distinct connections plus the references that point at
    entity numbers which are not in ``numbers``.
    """
    resolved: Dict[Connection, None] = {}
    dangling: List[WireRef] = []
    for ref in refs:
        source, source_circuit, target, target_circuit, color = ref
        if (
            not isinstance(target, int)
            or target not in numbers
            or source not in numbers
            or source == target
        ):
            dangling.append(ref)
            continue
        connection = Connection(
            numbers[source], numbers[target], color, source_circuit, target_circuit
        )
        resolved.setdefault(connection, None)
    return list(resolved), dangling


def write_legacy_wires(
    entity_dicts: Mapping[int, Dict[str, Any]],
    connections: Iterable[Connection],
    export_index: Mapping[int, int],
    kinds: Mapping[int, str],
) -> None:
    """Add pre-2.0 wire fields to the entity dicts, keyed by export index."""
    circuits: Dict[int, Dict[str, Dict[str, List[Dict[str, int]]]]] = defaultdict(
        lambda: defaultdict(lambda: defaultdict(list))
    )
    neighbours: Dict[int, List[int]] = defaultdict(list)
    switch_links: Dict[int, Dict[str, List[Dict[str, int]]]] = defaultdict(
        lambda: defaultdict(list)
    )

    for connection in connections:
        ends = (
            (connection.source_id, connection.source_circuit),
            (connection.target_id, connection.target_circuit),
        )
        if connection.is_copper:
            switches = [end for end in ends if kinds.get(end[0]) == POWER_SWITCH]
            if switches:
                (switch_id, circuit) = switches[0]
                other_id = connection.other(switch_id)
                switch_links[export_index[switch_id]][f"Cu{circuit - 1}"].append(
                    {"entity_id": export_index[other_id], "wire_id": 0}
                )
            else:
                a, b = export_index[connection.source_id], export_index[connection.target_id]
                neighbours[a].append(b)
                neighbours[b].append(a)
            continue

        for (own, own_circuit), (other, other_circuit) in (ends, ends[::-1]):
            link = {"entity_id": export_index[other]}
            if other_circuit != 1:
                link["circuit_id"] = other_circuit
            circuits[export_index[own]][str(own_circuit)][connection.color].append(link)

    for number, entity in entity_dicts.items():
        points: Dict[str, Any] = {}
        for point, colors in sorted(circuits.get(number, {}).items()):
            points[point] = {
                color: sorted(links, key=_link_key) for color, links in sorted(colors.items())
            }
        for point, links in sorted(switch_links.get(number, {}).items()):
            points[point] = sorted(links, key=_link_key)
        if points:
            entity["connections"] = points
        if number in neighbours:
            entity["neighbours"] = sorted(neighbours[number])


def _link_key(link: Mapping[str, int]) -> Tuple[int, int]:
    return (link["entity_id"], link.get("circuit_id", 1))


def write_wire_list(
    connections: Iterable[Connection], export_index: Mapping[int, int]
) -> List[List[int]]:
    rows = []
    for connection in connections:
        rows.append(
            [
                export_index[connection.source_id],
                CONNECTOR_IDS[(connection.color, connection.source_circuit)],
                export_index[connection.target_id],
                CONNECTOR_IDS[(connection.color, connection.target_circuit)],
            ]
        )
    rows.sort()
    return rows

