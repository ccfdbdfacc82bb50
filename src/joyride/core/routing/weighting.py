# weighting.py
'''
Weighting:
Assigns the edge weights the local graph provider routes on

Includes:
    - Travel time: free-flow travel time between nodes
    - Congested time: travel time scaled by a per road type congestion factor
'''
from typing import Dict, Optional

# default speeds in km/h by osm road type
SPEEDS_BY_TYPE = {
    "motorway": 100,
    "trunk": 90,
    "primary": 80,
    "secondary": 65,
    "tertiary": 55,
    "residential": 40,
    "service": 30,
    "unclassified": 35,
}

# used if highway type is not in the dict above
DEFAULT_KPH = 35.0

# extra share of travel time expected from traffic, by osm road type
DEFAULT_CONGESTION_BY_TYPE = {
    "motorway": 0.6,
    "trunk": 0.5,
    "primary": 0.4,
    "secondary": 0.25,
    "tertiary": 0.15,
    "residential": 0.05,
    "service": 0.0,
    "unclassified": 0.0,
}


def _road_type(data) -> Optional[str]:
    highway = data.get("highway")
    if isinstance(highway, (list, tuple)):
        highway = highway[0] if highway else None
    return highway


def _resolve_speed_kph(value, default: Optional[float]) -> Optional[float]:
    """Normalize OSM speed values (including strings like '45 mph')."""
    if value is None:
        return default

    if isinstance(value, (list, tuple)):
        for candidate in value:
            resolved = _resolve_speed_kph(candidate, None)
            if resolved:
                return resolved
        return default

    if isinstance(value, str):
        text = value.strip().lower()
        multiplier = 1.0
        if text.endswith("mph"):
            multiplier = 1.60934
            text = text[:-3]
        elif text.endswith("km/h"):
            text = text[:-4]
        digits = "".join(ch for ch in text if ch.isdigit() or ch == ".")
        if digits:
            try:
                return float(digits) * multiplier
            except ValueError:
                return default
        return default

    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def add_travel_time(graph) -> None:
    """compute travel times of edges in seconds, preferring a tagged maxspeed over the road type default"""
    for _, _, data in graph.edges(data=True):
        fallback = SPEEDS_BY_TYPE.get(_road_type(data), DEFAULT_KPH)
        speed_kph = _resolve_speed_kph(data.get("maxspeed"), fallback)
        speed_mps = speed_kph * 1000 / 3600  # convert to m/s
        length_m = float(data.get("length", 0.0) or 0.0)
        data["travel_time"] = length_m / max(speed_mps, 1e-3)


def congested_time(data, congestion_by_type: Optional[Dict[str, float]] = None) -> float:
    """congested_time = travel_time * (1 + congestion[road type])"""
    congestion = congestion_by_type if congestion_by_type else DEFAULT_CONGESTION_BY_TYPE
    factor = float(congestion.get(_road_type(data), 0.0))
    return float(data.get("travel_time", 0.0)) * (1.0 + factor)


def add_congested_time(graph, congestion_by_type: Optional[Dict[str, float]] = None) -> None:
    """Attach congested_time to every edge. Requires add_travel_time to have run."""
    for _, _, data in graph.edges(data=True):
        data["congested_time"] = congested_time(data, congestion_by_type)
