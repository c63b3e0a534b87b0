#!/usr/bin/env python3
"""
Routing Integration Script
==========================

Standalone script to exercise the engine against a live routing provider.

This script:
    1. Seeds the grid with a sample crowd around central Ujjain
    2. Requests direct, avoidance and alternative routes
    3. Logs every candidate's crowd intersection
    4. Reports the selected route's statistics

Prerequisites:
    - Network access to an OSRM-compatible provider
    - Install the package: pip install -e .

Usage:
    python scripts/route_integration.py
    python scripts/route_integration.py --url http://localhost:5000
    python scripts/route_integration.py --start 23.1800,75.7850 --end 23.1850,75.7950
"""

import argparse
import asyncio
import logging
import os
import sys

from crowd_router.engine import CrowdRoutingEngine
from crowd_router.errors import NoRouteFound
from crowd_router.grid import PopulationGrid
from crowd_router.routing import OSRMClient


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


SAMPLE_CROWDS = [
    {"lat": 23.1821, "lng": 75.7890, "count": 20},
    {"lat": 23.1823, "lng": 75.7892, "count": 40},
    {"lat": 23.1830, "lng": 75.7885, "count": 0},
    {"lat": 23.1815, "lng": 75.7870, "count": 5},
    {"lat": 23.1829, "lng": 75.7905, "count": 8},
]


def parse_point(value: str) -> tuple:
    lat, lng = value.split(",")
    return (float(lat), float(lng))


async def run(url: str, start: tuple, end: tuple, timeout: float) -> bool:
    """
    Run one route calculation.

    Returns:
        True if a route was selected
    """
    logger.info("=" * 60)
    logger.info("Routing Integration Run")
    logger.info("=" * 60)
    logger.info(f"Provider: {url}")
    logger.info(f"Start: {start}")
    logger.info(f"End: {end}")
    logger.info("=" * 60)

    grid = PopulationGrid()
    grid.load_seed(SAMPLE_CROWDS)

    with CrowdRoutingEngine(grid, OSRMClient(base_url=url, timeout=timeout)) as engine:
        for area in engine.get_populated_areas():
            logger.info(f"  Area ({area.lat:.4f}, {area.lng:.4f}): {area.population} [{area.level.value}]")
        logger.info(f"Crowd zones: {len(engine.crowd_zones)}")

        try:
            selection = await engine.calculate_route(start, end)
        except NoRouteFound as e:
            logger.error(f"❌ {e}")
            return False

        logger.info("-" * 40)
        for index, candidate in enumerate(selection.candidates):
            marker = "*" if index == selection.index else " "
            logger.info(
                f" {marker} {candidate.kind.value:<12} points={len(candidate):<5} "
                f"crowd={candidate.intersection.total_intersection:.2f}"
            )

        logger.info("=" * 60)
        logger.info("SELECTED ROUTE")
        logger.info("=" * 60)
        for key, value in selection.statistics.to_dict().items():
            logger.info(f"  {key}: {value}")

    return True


def main():
    parser = argparse.ArgumentParser(
        description="Integration run of crowd-aware routing against a live provider"
    )
    parser.add_argument(
        "--url",
        type=str,
        default=os.environ.get("CROWD_ROUTER_PROVIDER_URL", "https://router.project-osrm.org"),
        help="Base URL of the routing provider",
    )
    parser.add_argument(
        "--start",
        type=parse_point,
        default=(23.1800, 75.7850),
        help="Start point as lat,lng",
    )
    parser.add_argument(
        "--end",
        type=parse_point,
        default=(23.1850, 75.7950),
        help="End point as lat,lng",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Provider request timeout in seconds (default: 10)",
    )

    args = parser.parse_args()

    ok = asyncio.run(run(args.url, args.start, args.end, args.timeout))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
