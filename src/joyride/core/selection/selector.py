'''
Selector:
    - Picks the highest scoring route from a scored pool
    - Maps the winner back onto the canonical route set, which navigation
      SDKs address as "primary route + alternative at index K"
'''
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from joyride.core.errors import AlternativeIndexUnresolvable, NoCandidatesAvailable
from joyride.core.models import CandidateRoute, ScoredRoute

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectableRoute:
    """
    What the presentation layer receives: the canonical route set plus which
    alternative to select (None means the primary route).
    """
    canonical_routes: Sequence[CandidateRoute]
    alternative_index: Optional[int]

    @property
    def route(self) -> CandidateRoute:
        if self.alternative_index is None:
            return self.canonical_routes[0]
        return self.canonical_routes[self.alternative_index + 1]


def select_best_route(scored_pool: Sequence[ScoredRoute]) -> ScoredRoute:
    """
    Return the entry with the strictly greatest score.
    On ties the entry seen first wins.
    """
    best: Optional[ScoredRoute] = None
    for entry in scored_pool:
        if best is None or entry.score.value > best.score.value:
            best = entry
    if best is None:
        raise NoCandidatesAvailable("Cannot select from an empty pool")
    return best


def resolve_selectable_index(
    selected: CandidateRoute,
    canonical_routes: Sequence[CandidateRoute],
) -> Optional[int]:
    """
    Position of `selected` within the canonical routes, as an alternative index.

    Returns None when `selected` is the canonical primary route, K when it is
    canonical_routes[K + 1]. A route produced by another profile is matched
    by path content. Raises AlternativeIndexUnresolvable otherwise.
    """
    for position, route in enumerate(canonical_routes):
        if route.provenance == selected.provenance:
            return None if position == 0 else position - 1

    for position, route in enumerate(canonical_routes):
        if route.same_path(selected):
            return None if position == 0 else position - 1

    raise AlternativeIndexUnresolvable(
        f"Route {selected.provenance.profile}/{selected.provenance.index} "
        f"is not among the {len(canonical_routes)} canonical routes"
    )


def presentable_route(
    selected: CandidateRoute,
    canonical_routes: Sequence[CandidateRoute],
) -> SelectableRoute:
    """Resolve the selection; fall back to the canonical primary route if it can't be addressed."""
    if not canonical_routes:
        raise NoCandidatesAvailable("Canonical route set is empty")
    try:
        index = resolve_selectable_index(selected, canonical_routes)
    except AlternativeIndexUnresolvable as e:
        _logger.warning("%s; presenting the canonical primary route instead", e)
        index = None
    return SelectableRoute(canonical_routes=tuple(canonical_routes), alternative_index=index)
