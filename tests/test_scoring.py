import pytest

from joyride.core.errors import NoCandidatesAvailable
from joyride.core.models import CandidateRoute, Provenance, RouteLeg
from joyride.core.scoring.engine import (
    DEFAULT_FACTORS,
    ScoringEngine,
    ScoringFactor,
    main_road_penalty,
    max_consecutive_same_road,
    road_change_score,
    same_road_penalty,
    score_route,
    turn_score,
)
from joyride.core.selection.selector import select_best_route


def test_example_route_scores_0_275(make_route):
    # 4 steps [A, A, B, C] over 4 km
    score = score_route(make_route(["A", "A", "B", "C"], distance_m=4000.0))

    assert score.components["road_change"] == pytest.approx(0.5)
    assert score.components["same_road_penalty"] == pytest.approx(0.5)
    assert score.components["turn"] == pytest.approx(1.0)
    assert score.components["road_variety"] == pytest.approx(0.75)
    assert score.components["main_road_penalty"] == 0.0
    assert score.value == pytest.approx(0.275)


def test_single_step_route(make_route):
    route = make_route(["Ocean Avenue"], distance_m=4000.0)
    score = score_route(route)

    # 1 step over 4 km -> 0.25 turns/km -> 0.5
    assert score.components["road_change"] == 0.0
    assert score.components["same_road_penalty"] == 1.0
    assert score.components["turn"] == pytest.approx(0.5)
    assert score.value == 0.0


def test_turn_score_saturates(make_route):
    assert turn_score(make_route(["A", "B"], distance_m=4000.0)) == pytest.approx(1.0)
    assert turn_score(make_route(["A", "B", "C", "D", "E"], distance_m=1000.0)) == 1.0
    assert turn_score(make_route(["A"], distance_m=10000.0)) == pytest.approx(0.2)


def test_zero_distance_counts_as_no_turns(make_route):
    route = make_route(["A", "B"], distance_m=0.0)

    assert turn_score(route) == 0.0
    assert score_route(route).value == pytest.approx((1 / 2 * 0.4 + 2 / 2 * 0.2) * (1 - 1 / 2))


def test_road_changes_span_leg_boundaries(make_route):
    route = make_route(["A", "A", "B"], legs=[1, 2])

    assert road_change_score(route) == pytest.approx(1 / 3)
    assert same_road_penalty(route) == pytest.approx(2 / 3)


def test_longest_run_resets_on_every_change():
    assert max_consecutive_same_road(("A", "A", "B", "A", "A", "A", "C")) == 3
    assert max_consecutive_same_road(("A",)) == 1
    assert max_consecutive_same_road(()) == 0


def test_main_road_penalty_counts_keyword_steps(make_route):
    route = make_route(["Main Street", "Cabrillo Highway", "Gibraltar Expressway", "Oak Street"])
    assert main_road_penalty(route) == pytest.approx(0.2)


def test_main_road_keywords_are_case_sensitive(make_route):
    route = make_route(["Old highway Road", "PARKWAY DRIVE", "Freewayside Lane"])
    # only "Freewayside Lane" contains a keyword verbatim
    assert main_road_penalty(route) == pytest.approx(0.1)


def test_many_main_road_steps_drive_score_negative(make_route):
    names = ["Cabrillo Highway", "Pacific Coast Highway"] * 6
    score = score_route(make_route(names, distance_m=12000.0))

    assert score.components["main_road_penalty"] == pytest.approx(1.2)
    assert score.value < 0


def test_local_route_beats_motorway_route(make_route):
    motorway = make_route(
        ["Cabrillo Highway", "Cabrillo Highway", "Coast Freeway", "Coast Freeway"],
        distance_m=30000.0,
        profile="automobile",
    )
    local = make_route(
        ["Foothill Boulevard", "Los Osos Valley Road", "Madonna Road", "Higuera Street", "Marsh Street"],
        distance_m=9000.0,
        profile="automobile-avoiding-traffic",
    )
    engine = ScoringEngine()
    best = select_best_route(engine.score_pool([motorway, local]))

    assert best.route is local


def test_more_distinct_roads_never_lowers_score(make_route):
    # same step count, same road changes, same longest run
    repeated = make_route(["A", "B", "A", "B"])
    varied = make_route(["A", "B", "C", "D"])

    assert score_route(varied).value > score_route(repeated).value


def test_scoring_is_deterministic(make_route):
    route = make_route(["A", "A", "B", "C", None, "Cabrillo Highway"], distance_m=7300.0)

    first = score_route(route)
    second = ScoringEngine().score(route)

    assert first.value == second.value
    assert first.components == second.components


def test_score_does_not_depend_on_pool_order(make_route):
    a = make_route(["A", "B", "C"], index=0)
    b = make_route(["A", "A", "A", "B"], index=1)
    engine = ScoringEngine()

    forward = {e.route.provenance: e.score.value for e in engine.score_pool([a, b])}
    backward = {e.route.provenance: e.score.value for e in engine.score_pool([b, a])}

    assert forward == backward
    assert forward[a.provenance] == score_route(a).value


def test_score_pool_skips_routes_without_steps(make_route):
    empty = CandidateRoute(
        legs=(RouteLeg(steps=()),),
        distance_m=1000.0,
        expected_travel_time_s=60.0,
        provenance=Provenance("automobile", 0),
    )
    no_legs = CandidateRoute(legs=(), distance_m=0.0, expected_travel_time_s=0.0, provenance=Provenance("automobile", 1))
    good = make_route(["A", "B"], index=2)

    scored = ScoringEngine().score_pool([empty, no_legs, good])

    assert [e.route for e in scored] == [good]


def test_score_pool_without_scoreable_routes_fails():
    empty = CandidateRoute(
        legs=(RouteLeg(steps=()),),
        distance_m=1000.0,
        expected_travel_time_s=60.0,
        provenance=Provenance("automobile", 0),
    )

    with pytest.raises(NoCandidatesAvailable):
        ScoringEngine().score_pool([empty])
    with pytest.raises(NoCandidatesAvailable):
        ScoringEngine().score_pool([])


def test_scoring_does_not_mutate_route(make_route):
    route = make_route(["A", "B", "B"])
    before = (route.legs, route.distance_m, route.provenance)

    score_route(route)

    assert (route.legs, route.distance_m, route.provenance) == before


def test_default_engine_uses_shipped_factors():
    engine = ScoringEngine()
    assert [(f.name, f.weight) for f in engine.factors] == [
        ("road_change", 0.4),
        ("turn", 0.2),
        ("road_variety", 0.2),
    ]
    assert tuple(engine.factors) == DEFAULT_FACTORS


def test_registered_factor_joins_the_weighted_sum(make_route):
    route = make_route(["A", "A", "B", "C"], distance_m=4000.0)
    engine = ScoringEngine()
    engine.register(ScoringFactor("constant", 0.5, lambda r: 1.0))

    score = engine.score(route)

    assert score.components["constant"] == 1.0
    assert score.value == pytest.approx((0.2 + 0.2 + 0.15 + 0.5) * 0.5)

    engine.deregister("constant")
    assert engine.score(route).value == pytest.approx(0.275)


def test_factor_registration_errors():
    engine = ScoringEngine()

    with pytest.raises(ValueError):
        engine.register(ScoringFactor("turn", 0.1, lambda r: 0.0))
    with pytest.raises(KeyError):
        engine.deregister("curviness")


def test_engine_without_factors_scores_zero(make_route):
    engine = ScoringEngine(factors=[])
    assert engine.score(make_route(["A", "B"])).value == 0.0
