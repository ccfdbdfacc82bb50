import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from joyride.core.errors import NoCandidatesAvailable
from joyride.core.models import CandidateRoute, ScoredRoute, Waypoint
from joyride.core.providers.base import RoutingProvider
from joyride.core.routing.profiles import DEFAULT_PROFILES, RoutePreferences, RoutingProfile
from joyride.core.scoring.engine import ScoringEngine
from joyride.core.selection.selector import SelectableRoute, presentable_route, select_best_route
from joyride.core.utils.streets import print_route_street_names

_logger = logging.getLogger(__name__)

'''
Produce Routes:
    - Requests candidate routes for every profile concurrently
    - Pools whatever succeeded
    - Scores the pool and selects the best route
    - Maps the winner back onto the canonical (first successful) profile's routes
'''


@dataclass(frozen=True)
class CandidatePool:
    """All routes collected for one request, plus the canonical profile's own result."""
    routes: List[CandidateRoute]
    canonical_routes: List[CandidateRoute]


@dataclass(frozen=True)
class RouteSelection:
    selected: ScoredRoute
    presentation: SelectableRoute
    scored_pool: List[ScoredRoute]


async def request_candidates(
    provider: RoutingProvider,
    origin: Waypoint,
    destination: Waypoint,
    profiles: Sequence[RoutingProfile] = DEFAULT_PROFILES,
    preferences: Optional[RoutePreferences] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> CandidatePool:
    """
    Request routes for every profile at once and wait for all of them.

    A profile that fails is logged and skipped. Raises NoCandidatesAvailable
    if nothing was returned, or if `cancel_event` is set before all requests
    have finished.
    """
    if not profiles:
        raise ValueError("At least one routing profile is required")
    if len({p.name for p in profiles}) != len(profiles):
        raise ValueError("Routing profiles must have distinct names")
    preferences = preferences or RoutePreferences()

    gathered = asyncio.gather(
        *(provider.request_routes(origin, destination, p, preferences) for p in profiles),
        return_exceptions=True,
    )
    results = await _join(gathered, cancel_event)

    routes: List[CandidateRoute] = []
    canonical: Optional[List[CandidateRoute]] = None
    for profile, result in zip(profiles, results):
        if isinstance(result, BaseException):
            _logger.warning("Route request for profile %s failed: %s", profile.name, result)
            continue
        routes.extend(result)
        if canonical is None and result:
            canonical = list(result)

    if not routes or canonical is None:
        raise NoCandidatesAvailable(
            f"No routes returned for profiles {[p.name for p in profiles]}"
        )
    return CandidatePool(routes=routes, canonical_routes=canonical)


async def _join(gathered: asyncio.Future, cancel_event: Optional[asyncio.Event]):
    if cancel_event is None:
        return await gathered

    cancelled = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait({gathered, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        cancelled.cancel()
        if not gathered.done():
            gathered.cancel()
            # collect the cancelled gather so its CancelledError is retrieved
            with contextlib.suppress(asyncio.CancelledError):
                await gathered

    if gathered not in done:
        raise NoCandidatesAvailable("Route selection was cancelled")
    return gathered.result()


async def choose_route(
    provider: RoutingProvider,
    origin: Waypoint,
    destination: Waypoint,
    profiles: Sequence[RoutingProfile] = DEFAULT_PROFILES,
    preferences: Optional[RoutePreferences] = None,
    engine: Optional[ScoringEngine] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> RouteSelection:
    """Collect candidates, score them and pick the route to present."""
    pool = await request_candidates(provider, origin, destination, profiles, preferences, cancel_event)

    engine = engine or ScoringEngine()
    scored_pool = engine.score_pool(pool.routes)
    selected = select_best_route(scored_pool)
    presentation = presentable_route(selected.route, pool.canonical_routes)

    _logger.info(
        "Selected route %s/%d (score %.4f, %.0f m, %.0f s) from %d candidate(s); alternative index %s",
        selected.route.provenance.profile,
        selected.route.provenance.index,
        selected.score.value,
        selected.route.distance_m,
        selected.route.expected_travel_time_s,
        len(scored_pool),
        presentation.alternative_index,
    )
    return RouteSelection(selected=selected, presentation=presentation, scored_pool=scored_pool)


def find_and_show_ranked_routes(
    provider: RoutingProvider,
    origin: Waypoint,
    destination: Waypoint,
    profiles: Sequence[RoutingProfile] = DEFAULT_PROFILES,
) -> RouteSelection:
    """
    Run a full selection and print every candidate, then the street names
    of the chosen route.
    """
    print(f"Finding routes from {origin.coordinate} to {destination.coordinate}...")
    selection = asyncio.run(choose_route(provider, origin, destination, profiles))

    print("\nAll candidate routes:")
    ranked = sorted(selection.scored_pool, key=lambda s: s.score.value, reverse=True)
    for i, entry in enumerate(ranked, 1):
        route = entry.route
        print(
            f"ROUTE {i} [{route.provenance.profile} #{route.provenance.index}] - "
            f"Score: {entry.score.value:.3f} | Time: {route.expected_travel_time_s / 60:.1f} min | "
            f"Steps: {len(route.steps)}"
        )

    chosen = selection.selected
    print(f"\nTOP ROUTE - Score: {chosen.score.value:.3f} | Time: {chosen.route.expected_travel_time_s / 60:.1f} min")
    print_route_street_names(chosen.route.steps)
    return selection
