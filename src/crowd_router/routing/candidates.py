"""
Route Candidate Generator
=========================

Produces up to three candidate routes for a trip and scores each one
against the crowd zones.

Branches:
    1. DIRECT:      provider's shortest path start -> end
    2. AVOIDANCE:   start -> 3 synthetic waypoints -> end, where the
                    waypoints sit beside the heaviest crowd zone along the
                    perpendicular of the start -> end line
                    (only attempted when crowd zones exist)
    3. ALTERNATIVE: provider's second-ranked path for start -> end

Failure Isolation:
    Every branch runs independently. A branch that fails (network error,
    provider error, missing geometry, timeout) is logged and yields no
    candidate; it never aborts the other branches.

Concurrency:
    Branches run concurrently. The blocking HTTP call of each branch runs
    in a worker thread via asyncio.to_thread and is bounded by
    asyncio.wait_for. All branches read the same immutable zone snapshot
    captured when the request starts.

Scoring:
    For each zone, ratio = (route points inside zone) / (route points).
        total_intersection   = sum(ratio * zone.weight)
        worst_zone           = zone with the highest ratio (first wins ties)
        average_intersection = total_intersection / zone count (0 if none)
"""

import asyncio
import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from crowd_router.errors import ProviderUnavailable
from crowd_router.models.geo import LatLng
from crowd_router.models.route import (
    IntersectionReport,
    RouteCandidate,
    RouteKind,
    WorstZone,
)
from crowd_router.models.zones import CrowdZone
from crowd_router.routing.osrm_client import OSRMClient


logger = logging.getLogger(__name__)


AVOIDANCE_DISTANCES: Tuple[float, ...] = (0.002, 0.004, 0.006)


# =============================================================================
# Scoring
# =============================================================================

def analyze_crowd_intersections(
    route: Sequence[LatLng],
    crowd_zones: Sequence[CrowdZone],
) -> IntersectionReport:
    """
    Measure how much a route overlaps the crowd zones.

    An empty route has ratio 0 against every zone.

    Args:
        route: Ordered (lat, lng) points
        crowd_zones: Zone snapshot to score against

    Returns:
        IntersectionReport for the route
    """
    if not crowd_zones:
        return IntersectionReport.empty()

    points = np.asarray(route, dtype=float).reshape(-1, 2)
    n_points = len(points)

    total = 0.0
    worst: Optional[WorstZone] = None

    for zone in crowd_zones:
        if n_points:
            offsets = points - np.asarray(zone.center, dtype=float)
            distances = np.sqrt((offsets ** 2).sum(axis=1))
            inside = int(np.count_nonzero(distances <= zone.radius))
            ratio = inside / n_points
        else:
            inside = 0
            ratio = 0.0

        total += ratio * zone.weight

        if worst is None or ratio > worst.ratio:
            worst = WorstZone(zone=zone, ratio=ratio, point_count=inside)

    return IntersectionReport(
        total_intersection=total,
        worst_zone=worst,
        average_intersection=total / len(crowd_zones),
    )


# =============================================================================
# Avoidance Geometry
# =============================================================================

def find_worst_zone(crowd_zones: Sequence[CrowdZone]) -> Optional[CrowdZone]:
    """Zone with the maximum weight; the first one wins ties."""
    worst: Optional[CrowdZone] = None
    for zone in crowd_zones:
        if worst is None or zone.weight > worst.weight:
            worst = zone
    return worst


def create_avoidance_waypoints(
    start: LatLng,
    end: LatLng,
    crowd_zone: CrowdZone,
    distances: Sequence[float] = AVOIDANCE_DISTANCES,
) -> List[LatLng]:
    """
    Build waypoints offset from a zone center, perpendicular to the trip.

    The perpendicular unit vector of (d_lat, d_lng) is (-d_lng, d_lat) / length.

    Returns:
        One waypoint per distance, or an empty list when start == end
    """
    d_lat = end[0] - start[0]
    d_lng = end[1] - start[1]
    length = math.sqrt(d_lat * d_lat + d_lng * d_lng)

    if length == 0:
        return []

    perp_lat = -d_lng / length
    perp_lng = d_lat / length

    return [
        (
            crowd_zone.center[0] + perp_lat * distance,
            crowd_zone.center[1] + perp_lng * distance,
        )
        for distance in distances
    ]


# =============================================================================
# Generator
# =============================================================================

class RouteCandidateGenerator:
    """
    Fetches and scores candidate routes from the routing provider.

    Attributes:
        client: Provider adapter
        branch_timeout: Seconds allowed for each branch

    Example:
        generator = RouteCandidateGenerator(OSRMClient(), branch_timeout=15.0)

        candidates = await generator.get_multiple_routes(
            start, end, grid.crowd_zones
        )
    """

    def __init__(self, client: OSRMClient, branch_timeout: float = 15.0) -> None:
        if branch_timeout <= 0:
            raise ValueError("branch_timeout must be positive")

        self.client = client
        self.branch_timeout = branch_timeout

        # Branches that produced no candidate, per kind
        self._empty_branches = {kind: 0 for kind in RouteKind}

    # -------------------------------------------------------------------------
    # Branches
    # -------------------------------------------------------------------------

    def get_direct_route(self, start: LatLng, end: LatLng) -> Optional[List[LatLng]]:
        """Provider's shortest path, or None on failure."""
        try:
            return self.client.fetch_routes([start, end])[0]
        except ProviderUnavailable as e:
            logger.warning(f"Direct routing failed: {e}")
            return None

    def get_avoidance_route(
        self,
        start: LatLng,
        end: LatLng,
        crowd_zones: Sequence[CrowdZone],
    ) -> Optional[List[LatLng]]:
        """Route through waypoints beside the heaviest zone, or None."""
        worst = find_worst_zone(crowd_zones)
        if worst is None:
            return None

        waypoints = create_avoidance_waypoints(start, end, worst)
        if not waypoints:
            logger.info("Start equals end, skipping avoidance route")
            return None

        try:
            return self.client.fetch_routes([start, *waypoints, end])[0]
        except ProviderUnavailable as e:
            logger.warning(f"Avoidance routing failed: {e}")
            return None

    def get_alternative_route(self, start: LatLng, end: LatLng) -> Optional[List[LatLng]]:
        """Provider's second-ranked path, or None if absent or on failure."""
        try:
            routes = self.client.fetch_routes([start, end], alternatives=True)
        except ProviderUnavailable as e:
            logger.warning(f"Alternative routing failed: {e}")
            return None

        if len(routes) < 2:
            logger.info("Provider returned no alternative route")
            return None
        return routes[1]

    # -------------------------------------------------------------------------
    # Orchestration
    # -------------------------------------------------------------------------

    async def get_multiple_routes(
        self,
        start: LatLng,
        end: LatLng,
        crowd_zones: Sequence[CrowdZone] = (),
    ) -> List[RouteCandidate]:
        """
        Fetch all branches concurrently and score each result.

        Args:
            start: Origin (lat, lng)
            end: Destination (lat, lng)
            crowd_zones: Current zones; copied once into an immutable snapshot

        Returns:
            Candidates in branch order (direct, avoidance, alternative),
            omitting branches that produced nothing
        """
        zones: Tuple[CrowdZone, ...] = tuple(crowd_zones)

        branches = [
            (RouteKind.DIRECT, self.get_direct_route, (start, end)),
            (RouteKind.ALTERNATIVE, self.get_alternative_route, (start, end)),
        ]
        if zones:
            branches.insert(
                1, (RouteKind.AVOIDANCE, self.get_avoidance_route, (start, end, zones))
            )

        results = await asyncio.gather(
            *(self._run_branch(kind, fn, args) for kind, fn, args in branches)
        )

        candidates = []
        for (kind, _, _), points in zip(branches, results):
            if points is None:
                continue
            candidates.append(
                RouteCandidate(
                    points=tuple(points),
                    kind=kind,
                    intersection=analyze_crowd_intersections(points, zones),
                )
            )

        logger.info(
            f"Generated {len(candidates)} candidate routes "
            f"({', '.join(c.kind.value for c in candidates) or 'none'}) "
            f"against {len(zones)} crowd zones"
        )
        return candidates

    async def _run_branch(
        self,
        kind: RouteKind,
        fn: Callable[..., Optional[List[LatLng]]],
        args: tuple,
    ) -> Optional[List[LatLng]]:
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(fn, *args),
                timeout=self.branch_timeout,
            )
        except asyncio.TimeoutError:
            self._empty_branches[kind] += 1
            logger.warning(
                f"{kind.value} route timed out after {self.branch_timeout:.1f}s"
            )
            return None
        except Exception as e:
            self._empty_branches[kind] += 1
            logger.error(f"Unexpected error in {kind.value} route branch: {e}", exc_info=True)
            return None

        if result is None:
            self._empty_branches[kind] += 1
        return result

    def get_metrics(self) -> dict:
        """Get per-branch empty counts for observability."""
        return {
            "branch_timeout": self.branch_timeout,
            "empty_branches": {kind.value: count for kind, count in self._empty_branches.items()},
        }
