'''
Mapbox provider:
    Talks to the Mapbox Directions v5 API over HTTP and returns CandidateRoutes.

    - Formats coordinates as lon,lat and builds the /directions/v5/mapbox/{profile} URL
    - Sets request options (alternatives, excludes, annotations)
    - Parses the response JSON into our route model

    Scoring and selection happen elsewhere.
'''
import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from joyride.config import MAPBOX_BASE_URL, ROUTING_TIMEOUT
from joyride.core.errors import RoutingProviderError
from joyride.core.models import CandidateRoute, Provenance, RouteGeometry, RouteLeg, RouteStep, Waypoint
from joyride.core.routing.profiles import RoutePreferences, RoutingProfile

_logger = logging.getLogger(__name__)


class MapboxDirectionsProvider:
    """
    Mapbox Directions v5 client.

    Each call is a blocking requests.get run in a worker thread, so
    request_routes can be awaited concurrently for several profiles.
    """

    def __init__(self, access_token: str, base_url: str = MAPBOX_BASE_URL, timeout: float = ROUTING_TIMEOUT):
        if not access_token:
            raise ValueError("A Mapbox access token is required.")
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout  # seconds to wait for the API before giving up

    #----------------
    # Internal helpers
    #----------------
    def format_coordinates(self, waypoints: List[Waypoint]) -> str:
        """Convert waypoints to Mapbox format 'lon,lat;lon,lat;...'"""
        return ';'.join(f"{w.lon},{w.lat}" for w in waypoints)

    def build_params(self, preferences: RoutePreferences) -> Dict[str, str]:
        params = {
            "access_token": self.access_token,
            "alternatives": "true" if preferences.include_alternatives else "false",
            "geometries": "geojson",
            "overview": "full" if preferences.shape_resolution == "full" else "simplified",
            "steps": "true",
            "annotations": ",".join(preferences.step_attributes),
        }
        if preferences.road_classes_to_avoid:
            params["exclude"] = ",".join(preferences.road_classes_to_avoid)
        return params

    #----------------
    # Public methods
    #----------------
    async def request_routes(
        self,
        origin: Waypoint,
        destination: Waypoint,
        profile: RoutingProfile,
        preferences: RoutePreferences,
    ) -> List[CandidateRoute]:
        return await asyncio.to_thread(self.fetch_routes, origin, destination, profile, preferences)

    def fetch_routes(
        self,
        origin: Waypoint,
        destination: Waypoint,
        profile: RoutingProfile,
        preferences: RoutePreferences,
    ) -> List[CandidateRoute]:
        coordinates = self.format_coordinates([origin, destination])
        url = f"{self.base_url}/directions/v5/mapbox/{profile.identifier}/{coordinates}"

        try:
            response = requests.get(url, params=self.build_params(preferences), timeout=self.timeout)
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise RoutingProviderError(f"Directions request for '{profile.name}' failed: {e}") from e

        if not isinstance(data, dict):
            raise RoutingProviderError(
                f"Directions error for '{profile.name}': unexpected response body ({response.status_code})"
            )
        if response.status_code != 200 or data.get("code") != "Ok":
            raise RoutingProviderError(
                f"Directions error for '{profile.name}': "
                f"{data.get('code', response.status_code)} {data.get('message', '')}".strip()
            )

        routes = parse_routes(data, profile.name)
        _logger.info("Profile %s produced %d route(s)", profile.name, len(routes))
        return routes[:preferences.max_routes]


def parse_routes(data: Dict[str, Any], profile_name: str) -> List[CandidateRoute]:
    """Normalize a Directions API response body into CandidateRoutes."""
    return [
        _parse_route(route, Provenance(profile_name, i))
        for i, route in enumerate(data.get("routes", []))
    ]


def _parse_route(route: Dict[str, Any], provenance: Provenance) -> CandidateRoute:
    legs = tuple(
        RouteLeg(steps=tuple(_parse_step(step) for step in leg.get("steps", [])))
        for leg in route.get("legs", [])
    )
    return CandidateRoute(
        legs=legs,
        distance_m=float(route.get("distance", 0.0)),
        expected_travel_time_s=float(route.get("duration", 0.0)),
        provenance=provenance,
        geometry=_parse_geometry(route.get("geometry")),
    )


def _parse_step(step: Dict[str, Any]) -> RouteStep:
    # multiple names come back joined with ";"
    names = tuple(n.strip() for n in (step.get("name") or "").split(";") if n.strip())
    classes = set()
    for intersection in step.get("intersections", []):
        classes.update(intersection.get("classes", []))
    return RouteStep(
        names=names,
        distance_m=float(step.get("distance", 0.0)),
        transport_mode=step.get("mode", "driving"),
        road_classes=frozenset(classes),
    )


def _parse_geometry(geometry: Optional[Dict[str, Any]]) -> Optional[RouteGeometry]:
    if not isinstance(geometry, dict) or not geometry.get("coordinates"):
        return None
    # GeoJSON is (lon, lat)
    return RouteGeometry(coordinates=tuple((lat, lon) for lon, lat, *_ in geometry["coordinates"]))
