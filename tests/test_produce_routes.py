import asyncio
import gc
import logging

import pytest

from joyride.core.errors import NoCandidatesAvailable, RoutingProviderError
from joyride.core.models import CandidateRoute, Provenance, RouteLeg, Waypoint
from joyride.core.routing.produce_routes import choose_route, request_candidates
from joyride.core.routing.profiles import (
    AUTOMOBILE,
    AUTOMOBILE_AVOIDING_TRAFFIC,
    RoutePreferences,
    RoutingProfile,
)
from joyride.core.scoring.engine import ScoringEngine, ScoringFactor

ORIGIN = Waypoint(35.293683, -120.672025)
DESTINATION = Waypoint(35.252955, -120.684900, name="Target")
TRAFFIC = AUTOMOBILE_AVOIDING_TRAFFIC.name


def test_pool_keeps_profile_then_provider_order(make_route, make_provider):
    auto = [make_route(["A"], index=0), make_route(["B"], index=1)]
    traffic = [make_route(["C"], profile=TRAFFIC, index=0)]
    provider = make_provider({"automobile": auto, TRAFFIC: traffic})

    pool = asyncio.run(request_candidates(provider, ORIGIN, DESTINATION))

    assert pool.routes == auto + traffic
    assert pool.canonical_routes == auto


def test_requests_share_preferences(make_provider, make_route):
    provider = make_provider({"automobile": [make_route(["A"])]})

    asyncio.run(request_candidates(provider, ORIGIN, DESTINATION))

    assert [call[2] for call in provider.calls] == [AUTOMOBILE, AUTOMOBILE_AVOIDING_TRAFFIC]
    for origin, destination, _, preferences in provider.calls:
        assert (origin, destination) == (ORIGIN, DESTINATION)
        assert preferences.avoid_motorway
        assert preferences.include_alternatives
        assert preferences.shape_resolution == "full"
        assert set(preferences.step_attributes) == {"congestion", "duration", "distance", "maxspeed"}


def test_one_failing_profile_is_tolerated(make_route, make_provider):
    traffic = [make_route(["A", "B", "C"], profile=TRAFFIC, index=0)]
    provider = make_provider({
        "automobile": RoutingProviderError("connection reset"),
        TRAFFIC: traffic,
    })

    selection = asyncio.run(choose_route(provider, ORIGIN, DESTINATION))

    assert selection.selected.route is traffic[0]
    assert selection.presentation.canonical_routes == tuple(traffic)
    assert selection.presentation.alternative_index is None


def test_all_profiles_failing(make_provider):
    provider = make_provider({
        "automobile": RoutingProviderError("timeout"),
        TRAFFIC: RuntimeError("boom"),
    })

    with pytest.raises(NoCandidatesAvailable):
        asyncio.run(choose_route(provider, ORIGIN, DESTINATION))


def test_all_profiles_empty(make_provider):
    provider = make_provider({"automobile": [], TRAFFIC: []})

    with pytest.raises(NoCandidatesAvailable):
        asyncio.run(request_candidates(provider, ORIGIN, DESTINATION))


def test_only_unscoreable_routes(make_provider):
    empty = CandidateRoute(
        legs=(RouteLeg(steps=()),),
        distance_m=100.0,
        expected_travel_time_s=10.0,
        provenance=Provenance("automobile", 0),
    )
    provider = make_provider({"automobile": [empty]})

    with pytest.raises(NoCandidatesAvailable):
        asyncio.run(choose_route(provider, ORIGIN, DESTINATION))


def test_unscoreable_routes_are_dropped(make_route, make_provider):
    empty = CandidateRoute(
        legs=(RouteLeg(steps=()),),
        distance_m=100.0,
        expected_travel_time_s=10.0,
        provenance=Provenance("automobile", 0),
    )
    good = make_route(["A", "B"], index=1)
    provider = make_provider({"automobile": [empty, good]})

    selection = asyncio.run(choose_route(provider, ORIGIN, DESTINATION))

    assert [e.route for e in selection.scored_pool] == [good]
    assert selection.presentation.alternative_index == 0


def test_motorway_heavy_route_loses(make_route, make_provider):
    motorway = make_route(
        ["Cabrillo Highway", "Cabrillo Highway", "Coast Freeway"], distance_m=25000.0, index=0
    )
    scenic = make_route(
        ["Foothill Boulevard", "Los Osos Valley Road", "Madonna Road", "Higuera Street"],
        distance_m=8000.0,
        profile=TRAFFIC,
        index=0,
    )
    provider = make_provider({"automobile": [motorway], TRAFFIC: [scenic]})

    selection = asyncio.run(choose_route(provider, ORIGIN, DESTINATION))

    assert selection.selected.route is scenic
    # the winner is not addressable from the canonical (automobile) result
    assert selection.presentation.alternative_index is None
    assert selection.presentation.route is motorway


def test_winner_from_other_profile_mapped_by_path(make_route, make_provider):
    auto = [
        make_route(["Cabrillo Highway", "Cabrillo Highway"], distance_m=20000.0, index=0),
        make_route(["A", "B", "C", "D"], distance_m=6000.0, index=1),
    ]
    traffic = [make_route(["A", "B", "C", "D"], distance_m=6000.0, profile=TRAFFIC, index=0)]
    provider = make_provider({"automobile": auto, TRAFFIC: traffic})
    engine = ScoringEngine()
    engine.register(ScoringFactor("prefers_traffic", 0.1, lambda r: float(r.provenance.profile == TRAFFIC)))

    selection = asyncio.run(choose_route(provider, ORIGIN, DESTINATION, engine=engine))

    assert selection.selected.route is traffic[0]
    # same road path as the automobile alternative
    assert selection.presentation.alternative_index == 0
    assert selection.presentation.route is auto[1]


def test_requests_run_concurrently(make_route):
    started = []

    class BarrierProvider:
        def __init__(self):
            self.ready = None

        async def request_routes(self, origin, destination, profile, preferences):
            if self.ready is None:
                self.ready = asyncio.Event()
            started.append(profile.name)
            if len(started) == 2:
                self.ready.set()
            # a sequential orchestrator would never get past this
            await self.ready.wait()
            return [make_route(["A", "B"], profile=profile.name)]

    async def run():
        return await asyncio.wait_for(
            request_candidates(BarrierProvider(), ORIGIN, DESTINATION), timeout=2
        )

    pool = asyncio.run(run())

    assert len(pool.routes) == 2
    assert sorted(started) == sorted(["automobile", TRAFFIC])


def test_cancel_event_aborts_selection(make_route):
    cancelled = []

    class HangingProvider:
        async def request_routes(self, origin, destination, profile, preferences):
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                cancelled.append(profile.name)
                raise
            return [make_route(["A"])]

    async def run():
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, cancel.set)
        try:
            await choose_route(HangingProvider(), ORIGIN, DESTINATION, cancel_event=cancel)
        finally:
            # let the cancelled requests unwind
            await asyncio.sleep(0)

    with pytest.raises(NoCandidatesAvailable):
        asyncio.run(run())
    assert sorted(cancelled) == sorted(["automobile", TRAFFIC])


def test_unset_cancel_event_does_not_interfere(make_route, make_provider):
    provider = make_provider({"automobile": [make_route(["A", "B"])]})

    async def run():
        return await choose_route(provider, ORIGIN, DESTINATION, cancel_event=asyncio.Event())

    selection = asyncio.run(run())
    assert selection.selected.route.provenance == Provenance("automobile", 0)


def test_profiles_must_be_distinct_and_present(make_provider):
    provider = make_provider({})

    with pytest.raises(ValueError):
        asyncio.run(request_candidates(provider, ORIGIN, DESTINATION, profiles=[]))
    with pytest.raises(ValueError):
        asyncio.run(request_candidates(provider, ORIGIN, DESTINATION, profiles=[AUTOMOBILE, AUTOMOBILE]))


def test_custom_profiles_and_preferences(make_route, make_provider):
    scenic = RoutingProfile(name="scenic", identifier="driving", weight="length")
    provider = make_provider({"scenic": [make_route(["A", "B"], profile="scenic")]})
    preferences = RoutePreferences(avoid_motorway=False, include_alternatives=False)

    selection = asyncio.run(
        choose_route(provider, ORIGIN, DESTINATION, profiles=[scenic], preferences=preferences)
    )

    assert selection.selected.route.provenance.profile == "scenic"
    assert provider.calls[0][3] is preferences


def test_cancelled_selection_leaves_no_unretrieved_errors(caplog):
    class HangingProvider:
        async def request_routes(self, origin, destination, profile, preferences):
            await asyncio.sleep(3600)

    async def run():
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, cancel.set)
        await request_candidates(HangingProvider(), ORIGIN, DESTINATION, cancel_event=cancel)

    with caplog.at_level(logging.ERROR, logger="asyncio"):
        with pytest.raises(NoCandidatesAvailable):
            asyncio.run(run())
        gc.collect()

    assert not [r for r in caplog.records if "never retrieved" in r.getMessage()]
