#!/usr/bin/env python3
"""
Pick the most enjoyable route between two points on the local OSM graph.

TO RUN:
    python3 -m joyride.core.main --origin 35.293683 -120.672025 --destination 35.252955 -120.684900

TO KILL:
    ctrl + c
"""
import argparse
import logging

from joyride.config import LOG_LEVEL
from joyride.core.data.graph import load_graph
from joyride.core.providers.graph import GraphRoutingProvider
from joyride.core.routing.produce_routes import find_and_show_ranked_routes
from joyride.core.routing.profiles import load_profile
from joyride.core.utils.geo import parse_coord, validate_coordinate

# SLODOCO to Target
DEFAULT_ORIGIN = (35.293683, -120.672025)
DEFAULT_DESTINATION = (35.252955, -120.684900)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Select the most enjoyable driving route.")
    parser.add_argument("--origin", nargs=2, type=float, metavar=("LAT", "LON"), default=DEFAULT_ORIGIN)
    parser.add_argument("--destination", nargs=2, type=float, metavar=("LAT", "LON"), default=DEFAULT_DESTINATION)
    parser.add_argument(
        "--profile",
        action="append",
        dest="profiles",
        help="Profile to request (repeatable). Defaults to automobile + automobile-avoiding-traffic.",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))

    origin = parse_coord(args.origin)
    destination = parse_coord(args.destination)
    validate_coordinate(origin.lat, origin.lon, "Origin")
    validate_coordinate(destination.lat, destination.lon, "Destination")

    names = args.profiles or ["automobile", "automobile-avoiding-traffic"]
    profiles = [load_profile(name) for name in names]

    print("Loading road network...")
    provider = GraphRoutingProvider(load_graph())

    find_and_show_ranked_routes(
        provider,
        origin,
        destination,
        profiles,
    )


if __name__ == "__main__":
    main()
