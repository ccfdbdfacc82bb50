"""
Street and Path Utilities for Joyride
This module turns routing graph paths into maneuver steps and summarizes
steps as street-by-street breakdowns.
"""

import networkx as nx
from typing import List, Optional, Sequence, Tuple
from joyride.core.models import RouteStep
from .geo import bearing_change, calculate_bearing

# a heading change above this starts a new step even on the same street
TURN_THRESHOLD_DEG = 45.0

METERS_TO_MILES = 0.000621371


def _first(value):
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _is_tagged(value) -> bool:
    if isinstance(value, (list, tuple)):
        return any(_is_tagged(v) for v in value)
    return value not in (None, False, "no", "")


def edge_road_classes(data) -> frozenset:
    """Road classes of an OSM edge: its highway type (links count as their base class) plus toll / tunnel flags."""
    classes = set()
    highway = _first(data.get("highway"))
    if highway:
        # ramps belong to the class they serve
        classes.add(str(highway))
        classes.add(str(highway).removesuffix("_link"))
    if _is_tagged(data.get("toll")):
        classes.add("toll")
    if _is_tagged(data.get("tunnel")):
        classes.add("tunnel")
    return frozenset(classes)


def _edge_bearing(graph: nx.DiGraph, u, v) -> Optional[float]:
    u_lat, u_lon = graph.nodes[u].get('y'), graph.nodes[u].get('x')
    v_lat, v_lon = graph.nodes[v].get('y'), graph.nodes[v].get('x')
    if None in (u_lat, u_lon, v_lat, v_lon):
        return None
    if (u_lat, u_lon) == (v_lat, v_lon):
        return None
    return calculate_bearing(u_lat, u_lon, v_lat, v_lon)


def get_steps_from_path(graph: nx.DiGraph, path: List[int]) -> List[RouteStep]:
    """
    Group the edges of a node path into maneuver steps.

    A new step starts when the street name changes or the heading turns by
    more than TURN_THRESHOLD_DEG. `graph` must hold one edge per (u, v).
    """
    steps: List[RouteStep] = []
    started = False
    current_name = None
    current_distance = 0.0
    current_classes = set()
    last_bearing = None

    for u, v in zip(path, path[1:]):
        data = graph.get_edge_data(u, v)
        if data is None:
            continue

        street_name = _first(data.get("name")) or None
        try:
            length_meters = float(data.get("length", 0.0) or 0.0)
        except (ValueError, TypeError):
            length_meters = 0.0
        bearing = _edge_bearing(graph, u, v)

        turned = (
            last_bearing is not None
            and bearing is not None
            and bearing_change(last_bearing, bearing) > TURN_THRESHOLD_DEG
        )
        if started and (street_name != current_name or turned):
            steps.append(_make_step(current_name, current_distance, current_classes))
            current_distance = 0.0
            current_classes = set()

        started = True
        current_name = street_name
        current_distance += length_meters
        current_classes |= edge_road_classes(data)
        if bearing is not None:
            last_bearing = bearing

    if started:
        steps.append(_make_step(current_name, current_distance, current_classes))

    return steps


def _make_step(name: Optional[str], distance: float, classes) -> RouteStep:
    return RouteStep(
        names=(name,) if name else (),
        distance_m=distance,
        transport_mode="driving",
        road_classes=frozenset(classes),
    )


def get_street_distances(steps: Sequence[RouteStep]) -> List[Tuple[str, float]]:
    """Merge consecutive steps on the same street into (street, miles)."""
    street_distances: List[Tuple[str, float]] = []
    for step in steps:
        name = step.first_name or "Unnamed"
        miles = step.distance_m * METERS_TO_MILES
        if street_distances and street_distances[-1][0] == name:
            street_distances[-1] = (name, street_distances[-1][1] + miles)
        else:
            street_distances.append((name, miles))
    return street_distances


def print_route_street_names(steps: Sequence[RouteStep]) -> None:
    street_distances = get_street_distances(steps)

    print(f"\n🛣️  Route Street Names:")
    print("=" * 60)

    total_miles = 0.0
    for i, (street_name, distance_miles) in enumerate(street_distances, 1):
        total_miles += distance_miles
        print(f"{i:2d}. {street_name} - {distance_miles:.2f} miles")

    print("=" * 60)
    print(f"Total distance: {total_miles:.2f} miles")
