'''
Graph provider:
    Computes candidate routes on a local OpenStreetMap drive graph
    with osmnx + networkx.

    - Drops edges whose road class the preferences avoid
    - Finds up to k simple paths ordered by the profile's edge weight
    - Converts each node path into maneuver steps (see utils/streets.py)
'''
import asyncio
import logging
from typing import List, Tuple

import networkx as nx
import osmnx as ox

from joyride.core.errors import RoutingProviderError
from joyride.core.models import CandidateRoute, Provenance, RouteGeometry, RouteLeg, Waypoint
from joyride.core.routing.profiles import RoutePreferences, RoutingProfile
from joyride.core.routing.weighting import congested_time
from joyride.core.utils.streets import edge_road_classes, get_steps_from_path

_logger = logging.getLogger(__name__)


class GraphRoutingProvider:
    """Routes on an in-memory graph that already carries travel_time on its edges."""

    def __init__(self, graph: nx.MultiDiGraph):
        self.graph = graph

    async def request_routes(
        self,
        origin: Waypoint,
        destination: Waypoint,
        profile: RoutingProfile,
        preferences: RoutePreferences,
    ) -> List[CandidateRoute]:
        return await asyncio.to_thread(self.compute_routes, origin, destination, profile, preferences)

    def compute_routes(
        self,
        origin: Waypoint,
        destination: Waypoint,
        profile: RoutingProfile,
        preferences: RoutePreferences,
    ) -> List[CandidateRoute]:
        simple = _to_simple_digraph(self.graph, profile, preferences.road_classes_to_avoid)

        o = _nearest_node(self.graph, origin)
        d = _nearest_node(self.graph, destination)

        routes: List[CandidateRoute] = []
        try:
            for i, path in enumerate(nx.shortest_simple_paths(simple, o, d, weight="cost")):
                if i >= preferences.max_routes:
                    break
                routes.append(_path_to_route(simple, path, Provenance(profile.name, i)))
        except (nx.NetworkXNoPath, nx.NodeNotFound) as e:
            raise RoutingProviderError(f"No route for profile '{profile.name}': {e}") from e

        _logger.info("Profile %s produced %d route(s)", profile.name, len(routes))
        return routes


# --- Helpers ---
def _nearest_node(graph: nx.MultiDiGraph, point: Waypoint):
    # nearest_nodes expects (x=lon, y=lat)
    return ox.nearest_nodes(graph, point.lon, point.lat)


def _edge_cost(data, profile: RoutingProfile) -> float:
    if profile.weight == "congested_time":
        return congested_time(data, profile.congestion_by_type)
    return float(data.get(profile.weight, float("inf")))


def _to_simple_digraph(G: nx.MultiDiGraph, profile: RoutingProfile, avoid: Tuple[str, ...]) -> nx.DiGraph:
    """
    Collapse parallel edges to a single DiGraph edge per (u,v), keeping the
    edge with the MINIMUM profile cost (stored as 'cost'). Edges of an avoided
    road class are dropped.
    """
    H = nx.DiGraph()
    H.add_nodes_from(G.nodes(data=True))
    for u, v, key, data in G.edges(keys=True, data=True):
        if edge_road_classes(data) & set(avoid):
            continue
        w = _edge_cost(data, profile)
        if H.has_edge(u, v):
            if w < H[u][v]["cost"]:
                H[u][v].clear()
                H[u][v].update(data, cost=w)
        else:
            H.add_edge(u, v, **data)
            H[u][v]["cost"] = w
    return H


def _path_to_route(graph: nx.DiGraph, path: List[int], provenance: Provenance) -> CandidateRoute:
    steps = get_steps_from_path(graph, path)
    distance = 0.0
    duration = 0.0
    for u, v in zip(path, path[1:]):
        data = graph[u][v]
        distance += float(data.get("length", 0.0) or 0.0)
        duration += float(data.get("travel_time", 0.0))

    coords = tuple((graph.nodes[n]["y"], graph.nodes[n]["x"]) for n in path)
    return CandidateRoute(
        legs=(RouteLeg(steps=tuple(steps)),),
        distance_m=distance,
        expected_travel_time_s=duration,
        provenance=provenance,
        geometry=RouteGeometry(coordinates=coords),
    )
