import logging

from joyride.config import ROUTING_PROVIDER, mapbox_access_token
from joyride.core.data.graph import load_graph
from joyride.core.providers.graph import GraphRoutingProvider
from joyride.core.providers.mapbox import MapboxDirectionsProvider

_logger = logging.getLogger(__name__)


def build_provider(name: str = ROUTING_PROVIDER):
    """Create the routing provider named by configuration ('graph' or 'mapbox')."""
    _logger.info("Creating %s routing provider", name)
    if name == "mapbox":
        return MapboxDirectionsProvider(mapbox_access_token())
    if name == "graph":
        return GraphRoutingProvider(load_graph())
    raise ValueError(f"Unknown routing provider '{name}' (expected 'graph' or 'mapbox')")
