"""
Loads and caches the OpenStreetMap drive graph used by the local graph provider.
"""

import logging
import osmnx as ox
from joyride.config import GRAPH_PATH, GRAPH_PLACE_NAME, ensure_directories
from joyride.core.routing.weighting import add_congested_time, add_travel_time

_logger = logging.getLogger(__name__)


def load_graph(place_name: str = GRAPH_PLACE_NAME):
    """Load the cached drive graph, downloading it first if needed, and attach routing weights."""
    ensure_directories()
    if GRAPH_PATH.exists():
        _logger.info("Loading cached graph from %s", GRAPH_PATH)
        graph = ox.load_graphml(GRAPH_PATH)
    else:
        _logger.info("Downloading graph for %s", place_name)
        graph = ox.graph_from_place(place_name, network_type="drive")
        ox.save_graphml(graph, GRAPH_PATH)
        _logger.info("Saved graph to %s", GRAPH_PATH)

    add_travel_time(graph)
    add_congested_time(graph)
    _logger.info(
        "Graph ready: %d nodes, %d edges",
        graph.number_of_nodes(),
        graph.number_of_edges(),
    )
    return graph
