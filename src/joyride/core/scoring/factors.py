'''
Optional scoring factors.

None of these are registered on a default ScoringEngine. Each one is a plain
route -> float function plus a helper that wraps it as a ScoringFactor, so it
can be switched on per engine:

    engine = ScoringEngine()
    engine.register(curviness_factor(weight=0.2))
'''
import math
from typing import Iterable, Optional, Set

from joyride.core.models import CandidateRoute
from joyride.core.scoring.engine import ScoringFactor
from joyride.core.utils.geo import bearing_change, calculate_bearing, haversine_distance, heading_change

NON_DRIVING_MODES = frozenset({"walking", "cycling"})

# max bearing drift (degrees) still counted as "straight"
STRAIGHT_TOLERANCE_DEG = 10.0


def curviness_score(route: CandidateRoute) -> float:
    """
    Total heading change along the geometry per km, normalized so that
    pi/2 radians per km (or more) scores 1.
    """
    if route.geometry is None or route.distance_m <= 0:
        return 0.0
    coords = route.geometry.coordinates
    if len(coords) < 3:
        return 0.0

    total = 0.0
    for prev, curr, nxt in zip(coords, coords[1:], coords[2:]):
        total += heading_change(prev, curr, nxt)

    normalized = total / (route.distance_m / 1000) / (math.pi / 2)
    return min(1.0, normalized)


def _named_roads(routes: Iterable[CandidateRoute]) -> Set[str]:
    return {
        step.first_name
        for route in routes
        for step in route.steps
        if step.first_name
    }


def road_overlap_score(route: CandidateRoute, reference_routes: Iterable[CandidateRoute]) -> float:
    """Share of this route's named roads that also appear in the reference routes."""
    own = _named_roads([route])
    if not own:
        return 0.0
    shared = own & _named_roads(reference_routes)
    return len(shared) / len(own)


def is_drivable(route: CandidateRoute) -> bool:
    return not any(step.transport_mode in NON_DRIVING_MODES for step in route.steps)


def drivability_score(route: CandidateRoute) -> float:
    return 1.0 if is_drivable(route) else 0.0


def longest_straight_segment(route: CandidateRoute, tolerance_deg: float = STRAIGHT_TOLERANCE_DEG) -> float:
    """
    Length in meters of the longest stretch of geometry whose bearing stays
    within `tolerance_deg` of the stretch's first bearing.
    """
    if route.geometry is None:
        return 0.0
    coords = route.geometry.coordinates

    longest = 0.0
    current = 0.0
    anchor: Optional[float] = None
    for (lat1, lon1), (lat2, lon2) in zip(coords, coords[1:]):
        length = haversine_distance(lat1, lon1, lat2, lon2)
        if length == 0:
            continue
        bearing = calculate_bearing(lat1, lon1, lat2, lon2)
        if anchor is not None and bearing_change(anchor, bearing) <= tolerance_deg:
            current += length
        else:
            anchor = bearing
            current = length
        longest = max(longest, current)
    return longest


def straightness_score(route: CandidateRoute) -> float:
    """1 minus the share of the route covered by its longest straight stretch."""
    if route.distance_m <= 0:
        return 0.0
    share = longest_straight_segment(route) / route.distance_m
    return min(1.0, max(0.0, 1.0 - share))


def curviness_factor(weight: float = 0.2) -> ScoringFactor:
    return ScoringFactor("curviness", weight, curviness_score)


def road_overlap_factor(reference_routes: Iterable[CandidateRoute], weight: float = 0.1) -> ScoringFactor:
    references = tuple(reference_routes)
    return ScoringFactor("road_overlap", weight, lambda route: road_overlap_score(route, references))


def drivability_factor(weight: float = 1.0) -> ScoringFactor:
    return ScoringFactor("drivability", weight, drivability_score)


def straightness_factor(weight: float = 0.1) -> ScoringFactor:
    return ScoringFactor("straightness", weight, straightness_score)
