"""
Geographic Utility Functions for Joyride
This module provides geographic helpers like distance and bearing calculation.
"""

import math
from typing import Optional, Tuple

from joyride.core.models import Waypoint

EARTH_RADIUS_M = 6371000  # mean Earth radius in meters


def validate_coordinate(lat: float, lon: float, label: str = "coordinate") -> None:
    """
    Validate that (lat, lon) is a real coordinate.
    Raises ValueError otherwise.
    """
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise ValueError(
            f"{label} ({lat:.6f}, {lon:.6f}) is not a valid coordinate. "
            "Expected lat in [-90, 90] and lon in [-180, 180]."
        )


def parse_coord(coord, name: Optional[str] = None) -> Waypoint:
    if isinstance(coord, Waypoint):
        return coord

    if hasattr(coord, "lat") and hasattr(coord, "lon"):
        return Waypoint(coord.lat, coord.lon, name=name)

    if isinstance(coord, dict) and "lat" in coord and "lon" in coord:
        return Waypoint(coord["lat"], coord["lon"], name=coord.get("name", name))

    if isinstance(coord, (list, tuple)) and len(coord) == 2:
        return Waypoint(coord[0], coord[1], name=name)

    raise ValueError("Coordinate must be a list [lat, lon] or an object with lat/lon")


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return great-circle distance in meters between two lat/lon points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the bearing between two GPS coordinates.

    Args:
        lat1, lon1: Starting point coordinates
        lat2, lon2: Ending point coordinates

    Returns:
        Bearing in degrees (0-360)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlon_rad = math.radians(lon2 - lon1)

    y = math.sin(dlon_rad) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(dlon_rad)

    bearing_deg = math.degrees(math.atan2(y, x))

    # Normalize to 0-360 degrees
    return (bearing_deg + 360) % 360


def bearing_change(bearing1: float, bearing2: float) -> float:
    """Smallest absolute angle in degrees (0-180) between two bearings."""
    diff = abs(bearing2 - bearing1) % 360
    return 360 - diff if diff > 180 else diff


def heading_change(prev: Tuple[float, float], curr: Tuple[float, float], nxt: Tuple[float, float]) -> float:
    """
    Planar heading change in radians (0-pi) at `curr`, with headings taken
    as atan2(dlat, dlon) on raw degrees.
    """
    angle1 = math.atan2(curr[0] - prev[0], curr[1] - prev[1])
    angle2 = math.atan2(nxt[0] - curr[0], nxt[1] - curr[1])
    diff = abs(angle2 - angle1)
    if diff > math.pi:
        diff = 2 * math.pi - diff
    return diff

