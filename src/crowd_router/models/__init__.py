"""
Data Models
===========

Value types for the crowd router.

This module re-exports all data models for convenient access.

Models:
    Geo:
        - LatLng: Internal (lat, lng) coordinate tuple
        - GridKey: Structured key of a population grid cell
    
    Crowd:
        - CrowdLevel: Display classification of a population
        - PopulatedArea: Grid cell with a positive population
        - CrowdZone: Weighted circle derived from a dense cell
    
    Route:
        - RouteKind: direct, avoidance or alternative
        - IntersectionReport / WorstZone: Crowd overlap of a route
        - RouteCandidate: One proposed path
        - RouteStatistics: Summary metrics of a selected path
        - RouteSelection: Chosen candidate plus statistics
"""

from crowd_router.models.geo import GridKey, LatLng, validate_coordinate, validate_point
from crowd_router.models.zones import CrowdLevel, CrowdZone, PopulatedArea
from crowd_router.models.route import (
    IntersectionReport,
    RouteCandidate,
    RouteKind,
    RouteSelection,
    RouteStatistics,
    WorstZone,
)

__all__ = [
    # Geo
    "LatLng",
    "GridKey",
    "validate_coordinate",
    "validate_point",
    # Crowd
    "CrowdLevel",
    "PopulatedArea",
    "CrowdZone",
    # Route
    "RouteKind",
    "WorstZone",
    "IntersectionReport",
    "RouteCandidate",
    "RouteStatistics",
    "RouteSelection",
]
