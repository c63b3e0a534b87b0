"""
Routing Module
==============

Crowd-aware route generation, scoring and selection.

Components:
    - OSRMClient: Adapter for the external routing provider
    - RouteCandidateGenerator: Direct / avoidance / alternative candidates
    - analyze_crowd_intersections: Crowd overlap scoring
    - RouteSelector: Best-route selection and manual override
    - compute_route_statistics: Summary metrics for a selected route
"""

from crowd_router.routing.osrm_client import OSRMClient
from crowd_router.routing.candidates import (
    RouteCandidateGenerator,
    analyze_crowd_intersections,
    create_avoidance_waypoints,
    find_worst_zone,
)
from crowd_router.routing.selector import RouteSelector, select_best_route
from crowd_router.routing.statistics import compute_route_statistics

__all__ = [
    "OSRMClient",
    "RouteCandidateGenerator",
    "analyze_crowd_intersections",
    "create_avoidance_waypoints",
    "find_worst_zone",
    "RouteSelector",
    "select_best_route",
    "compute_route_statistics",
]
