'''
Road attributes:
    Projects a candidate route onto the per-step road names the scorer uses.

    - road_names: first road name of every step, across all legs, in order
    - step_count: number of steps across all legs
    - unique_road_name_count: number of distinct names (UNKNOWN_ROAD included)
'''
from dataclasses import dataclass
from typing import Tuple

from joyride.core.errors import UnscoreableRoute
from joyride.core.models import CandidateRoute

# stands in for steps the provider returned without a road name
UNKNOWN_ROAD = "(unknown)"


@dataclass(frozen=True)
class RoadAttributes:
    road_names: Tuple[str, ...]
    step_count: int
    unique_road_name_count: int


def extract_road_attributes(route: CandidateRoute) -> RoadAttributes:
    if not route.legs:
        raise UnscoreableRoute(f"route {route.provenance} has no legs")

    road_names = tuple(
        step.first_name or UNKNOWN_ROAD
        for leg in route.legs
        for step in leg.steps
    )
    return RoadAttributes(
        road_names=road_names,
        step_count=len(road_names),
        unique_road_name_count=len(set(road_names)),
    )


def is_scoreable(route: CandidateRoute) -> bool:
    """True when the route has at least one leg and one step."""
    return any(leg.steps for leg in route.legs)
