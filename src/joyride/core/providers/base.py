"""Interface every routing provider implements."""
from typing import List, Protocol

from joyride.core.models import CandidateRoute, Waypoint
from joyride.core.routing.profiles import RoutePreferences, RoutingProfile


class RoutingProvider(Protocol):
    """
    Computes candidate routes for one profile.

    Implementations return the routes in the provider's own order (primary
    route first, then alternatives) with provenance set to
    (profile.name, position), and raise RoutingProviderError on failure.
    Calls for different profiles may run concurrently.
    """

    async def request_routes(
        self,
        origin: Waypoint,
        destination: Waypoint,
        profile: RoutingProfile,
        preferences: RoutePreferences,
    ) -> List[CandidateRoute]:
        ...
