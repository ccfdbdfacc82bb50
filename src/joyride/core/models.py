"""
Route data model shared by the providers, the scoring engine and the selector.

All values are frozen dataclasses: a candidate handed to the scorer can not be
mutated by it. Coordinates are (lat, lon) tuples throughout.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

LatLon = Tuple[float, float]


@dataclass(frozen=True)
class Waypoint:
    """A geographic coordinate with an optional name and accuracy radius."""
    lat: float
    lon: float
    name: Optional[str] = None
    accuracy_m: Optional[float] = None

    @property
    def coordinate(self) -> LatLon:
        return (self.lat, self.lon)


@dataclass(frozen=True)
class RouteStep:
    """One maneuver segment of a leg."""
    names: Tuple[str, ...]
    distance_m: float
    transport_mode: str = "driving"
    road_classes: FrozenSet[str] = frozenset()

    @property
    def first_name(self) -> Optional[str]:
        return self.names[0] if self.names else None


@dataclass(frozen=True)
class RouteLeg:
    steps: Tuple[RouteStep, ...]


@dataclass(frozen=True)
class RouteGeometry:
    coordinates: Tuple[LatLon, ...]


@dataclass(frozen=True)
class Provenance:
    """Which profile produced a route and where it sat in that profile's result."""
    profile: str
    index: int


@dataclass(frozen=True)
class CandidateRoute:
    legs: Tuple[RouteLeg, ...]
    distance_m: float
    expected_travel_time_s: float
    provenance: Provenance
    geometry: Optional[RouteGeometry] = None

    @property
    def steps(self) -> Tuple[RouteStep, ...]:
        return tuple(step for leg in self.legs for step in leg.steps)

    def same_path(self, other: "CandidateRoute") -> bool:
        """Content equality, ignoring which profile returned the route."""
        return (
            self.legs == other.legs
            and self.distance_m == other.distance_m
            and self.geometry == other.geometry
        )


@dataclass(frozen=True)
class RouteScore:
    value: float
    components: Dict[str, float] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class ScoredRoute:
    route: CandidateRoute
    score: RouteScore
