"""
Route Statistics
================

Summary metrics for a selected route.

Metrics:
    crowded_points        = points with routing weight > 2
    average_weight        = mean per-point routing weight (0 if empty)
    total_distance_meters = sum of planar segment lengths * 111000
    efficiency_percent    = max(0, 100 - crowded / total * 100) (0 if empty)

Distance Approximation:
    Segment lengths are Euclidean in degree space with 1 degree ~= 111 km.
    Longitude compression at higher latitudes is not corrected.
"""

from typing import Callable

import numpy as np

from crowd_router.models.route import RouteCandidate, RouteStatistics


WeightFn = Callable[[float, float], int]

METERS_PER_DEGREE = 111000.0
CROWDED_WEIGHT_THRESHOLD = 2


def route_distance_meters(points) -> float:
    """Planar length of a polyline of (lat, lng) points, in meters."""
    coords = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(coords) < 2:
        return 0.0
    segments = np.diff(coords, axis=0)
    return float(np.sqrt((segments ** 2).sum(axis=1)).sum() * METERS_PER_DEGREE)


def compute_route_statistics(route: RouteCandidate, weight_fn: WeightFn) -> RouteStatistics:
    """
    Compute statistics for a route against the current routing weights.
    
    Args:
        route: Selected candidate
        weight_fn: (lat, lng) -> routing weight, normally
            PopulationGrid.get_routing_weight
            
    Returns:
        RouteStatistics for the route
    """
    total_points = len(route.points)
    weights = np.array([weight_fn(lat, lng) for lat, lng in route.points], dtype=float)
    
    crowded_points = int(np.count_nonzero(weights > CROWDED_WEIGHT_THRESHOLD))
    
    if total_points:
        average_weight = float(weights.mean())
        efficiency = max(0.0, 100.0 - crowded_points / total_points * 100.0)
    else:
        average_weight = 0.0
        efficiency = 0.0
    
    return RouteStatistics(
        total_points=total_points,
        crowded_points=crowded_points,
        average_weight=average_weight,
        total_distance_meters=route_distance_meters(route.points),
        efficiency_percent=efficiency,
        route_type=route.kind.value,
        crowd_intersection=route.intersection.total_intersection,
    )
