import asyncio
from typing import Dict, List, Optional, Sequence, Union

import pytest

from joyride.core.models import CandidateRoute, Provenance, RouteGeometry, RouteLeg, RouteStep


def build_route(
    names: Sequence[Optional[str]],
    distance_m: float = 4000.0,
    profile: str = "automobile",
    index: int = 0,
    legs: Optional[Sequence[int]] = None,
    modes: Optional[Sequence[str]] = None,
    geometry: Optional[Sequence[tuple]] = None,
    travel_time_s: float = 600.0,
) -> CandidateRoute:
    """
    Route with one step per name (None -> unnamed step), steps spread evenly
    over distance_m. `legs` splits the steps into legs of the given sizes.
    """
    per_step = distance_m / len(names) if names else 0.0
    steps = [
        RouteStep(
            names=(name,) if name else (),
            distance_m=per_step,
            transport_mode=(modes[i] if modes else "driving"),
        )
        for i, name in enumerate(names)
    ]
    sizes = list(legs) if legs is not None else [len(steps)]
    grouped = []
    start = 0
    for size in sizes:
        grouped.append(RouteLeg(steps=tuple(steps[start:start + size])))
        start += size
    return CandidateRoute(
        legs=tuple(grouped),
        distance_m=distance_m,
        expected_travel_time_s=travel_time_s,
        provenance=Provenance(profile, index),
        geometry=RouteGeometry(tuple(geometry)) if geometry else None,
    )


class FakeProvider:
    """
    In-memory routing provider. `results` maps profile name to the routes it
    returns or the exception it raises.
    """

    def __init__(self, results: Dict[str, Union[List[CandidateRoute], Exception]]):
        self.results = results
        self.calls = []

    async def request_routes(self, origin, destination, profile, preferences):
        self.calls.append((origin, destination, profile, preferences))
        await asyncio.sleep(0)
        result = self.results.get(profile.name, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def make_route():
    return build_route


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def configs_dir(tmp_path, monkeypatch):
    from joyride.core.routing import profiles

    monkeypatch.setattr(profiles, "CONFIGS_DIR", tmp_path)
    return tmp_path
