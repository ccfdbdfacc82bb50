'''
Scoring engine:
    Computes the joyride score of a candidate route.

    score = (sum of weight * factor(route) over registered factors)
            * (1 - same_road_penalty)
            * (1 - main_road_penalty)

    The default factors are road change (0.4), turn density (0.2) and
    road variety (0.2). Extra factors (see factors.py) can be registered
    on an engine instance; none are active by default.
'''
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from joyride.core.errors import NoCandidatesAvailable
from joyride.core.models import CandidateRoute, RouteScore, ScoredRoute
from joyride.core.scoring.attributes import extract_road_attributes, is_scoreable

_logger = logging.getLogger(__name__)

MAIN_ROAD_KEYWORDS = ("Highway", "Expressway", "Freeway", "Turnpike", "Parkway")
MAIN_ROAD_STEP_PENALTY = 0.1

# turns per km at which the turn score saturates
TURN_DENSITY_SATURATION = 0.5


@dataclass(frozen=True)
class ScoringFactor:
    """A weighted sub-score: route -> float."""
    name: str
    weight: float
    compute: Callable[[CandidateRoute], float]


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def road_change_score(route: CandidateRoute) -> float:
    """Share of adjacent step pairs whose road names differ."""
    attrs = extract_road_attributes(route)
    names = attrs.road_names
    changes = sum(1 for a, b in zip(names, names[1:]) if a != b)
    return _ratio(changes, attrs.step_count)


def max_consecutive_same_road(road_names) -> int:
    current = 0
    longest = 0
    for i, name in enumerate(road_names):
        if i == 0 or name != road_names[i - 1]:
            current = 1
        else:
            current += 1
        longest = max(longest, current)
    return longest


def same_road_penalty(route: CandidateRoute) -> float:
    """Longest run of steps on one road, as a share of all steps."""
    attrs = extract_road_attributes(route)
    return _ratio(max_consecutive_same_road(attrs.road_names), attrs.step_count)


def turn_density(route: CandidateRoute) -> float:
    """Steps per kilometer; 0 for a zero-length route."""
    attrs = extract_road_attributes(route)
    return _ratio(attrs.step_count, route.distance_m / 1000)


def turn_score(route: CandidateRoute) -> float:
    return min(1.0, turn_density(route) / TURN_DENSITY_SATURATION)


def road_variety_score(route: CandidateRoute) -> float:
    attrs = extract_road_attributes(route)
    return _ratio(attrs.unique_road_name_count, attrs.step_count)


def main_road_penalty(route: CandidateRoute) -> float:
    """0.1 per step on a road whose name marks it as a main road. Not capped."""
    penalty = 0.0
    for step in route.steps:
        name = step.first_name
        if name and any(keyword in name for keyword in MAIN_ROAD_KEYWORDS):
            penalty += MAIN_ROAD_STEP_PENALTY
    return penalty


DEFAULT_FACTORS = (
    ScoringFactor("road_change", 0.4, road_change_score),
    ScoringFactor("turn", 0.2, turn_score),
    ScoringFactor("road_variety", 0.2, road_variety_score),
)


class ScoringEngine:
    """Aggregates registered factors into one score per route."""

    def __init__(self, factors: Optional[Iterable[ScoringFactor]] = None):
        self._factors: Dict[str, ScoringFactor] = {}
        for factor in DEFAULT_FACTORS if factors is None else factors:
            self.register(factor)

    @property
    def factors(self) -> List[ScoringFactor]:
        return list(self._factors.values())

    def register(self, factor: ScoringFactor) -> None:
        if factor.name in self._factors:
            raise ValueError(f"Scoring factor '{factor.name}' is already registered")
        self._factors[factor.name] = factor

    def deregister(self, name: str) -> ScoringFactor:
        try:
            return self._factors.pop(name)
        except KeyError:
            raise KeyError(f"Scoring factor '{name}' is not registered") from None

    def score(self, route: CandidateRoute) -> RouteScore:
        """
        Score one route. The route must have at least one step; callers
        filter unscoreable routes first (see score_pool).
        """
        components: Dict[str, float] = {}
        weighted = 0.0
        for factor in self._factors.values():
            value = factor.compute(route)
            components[factor.name] = value
            weighted += value * factor.weight

        same_road = same_road_penalty(route)
        main_road = main_road_penalty(route)
        components["same_road_penalty"] = same_road
        components["main_road_penalty"] = main_road

        total = weighted * (1 - same_road) * (1 - main_road)

        _logger.debug(
            "Route %s/%d score %.4f components %s",
            route.provenance.profile,
            route.provenance.index,
            total,
            components,
        )
        return RouteScore(value=total, components=components)

    def score_pool(self, routes: Iterable[CandidateRoute]) -> List[ScoredRoute]:
        """
        Score every scoreable route, keeping pool order. Routes without
        steps are dropped; raises NoCandidatesAvailable if none remain.
        """
        scored: List[ScoredRoute] = []
        for route in routes:
            if not is_scoreable(route):
                _logger.info(
                    "Skipping unscoreable route %s/%d (no steps)",
                    route.provenance.profile,
                    route.provenance.index,
                )
                continue
            scored.append(ScoredRoute(route=route, score=self.score(route)))

        if not scored:
            raise NoCandidatesAvailable("No scoreable candidate routes")
        return scored


def score_route(route: CandidateRoute) -> RouteScore:
    """Score a route with the default factors."""
    return ScoringEngine().score(route)
