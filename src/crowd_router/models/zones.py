"""
Crowd Models
============

Value types for populated grid cells and the crowd zones derived from them.

A CrowdZone is a circle in degree space:
    radius = max(0.001, population * 0.0003)
    weight = routing_weight(population)

Zones are never stored independently. They are rebuilt from the grid on
every mutation and handed out as immutable tuples.
"""

import math
from dataclasses import dataclass
from enum import Enum

from crowd_router.models.geo import LatLng


class CrowdLevel(str, Enum):
    """
    Display classification of a cell population.
    
    Attributes:
        NONE: 0 people
        LOW: 1-2 people
        MODERATE: 3-5 people
        HIGH: 6-9 people
        SEVERE: 10 or more people
    """
    
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"
    
    @classmethod
    def from_population(cls, population: int) -> "CrowdLevel":
        if population <= 0:
            return cls.NONE
        if population < 3:
            return cls.LOW
        if population < 6:
            return cls.MODERATE
        if population < 10:
            return cls.HIGH
        return cls.SEVERE


@dataclass(frozen=True, slots=True)
class PopulatedArea:
    """
    A grid cell with a positive population.
    
    Attributes:
        lat: Latitude of the cell corner
        lng: Longitude of the cell corner
        population: Number of people reported in the cell (> 0)
    """
    
    lat: float
    lng: float
    population: int
    
    @property
    def level(self) -> CrowdLevel:
        return CrowdLevel.from_population(self.population)
    
    def to_dict(self) -> dict:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "population": self.population,
            "level": self.level.value,
        }


@dataclass(frozen=True, slots=True)
class CrowdZone:
    """
    Circular region flagging a dense population cluster.
    
    Attributes:
        center: Zone center (lat, lng), the source cell's corner
        radius: Radius in degrees
        population: Population of the source cell (>= 3)
        weight: Routing weight penalty for the zone
    """
    
    center: LatLng
    radius: float
    population: int
    weight: int
    
    def contains(self, point: LatLng) -> bool:
        """Degree-space Euclidean containment test (boundary inclusive)."""
        d_lat = point[0] - self.center[0]
        d_lng = point[1] - self.center[1]
        return math.sqrt(d_lat * d_lat + d_lng * d_lng) <= self.radius
    
    def to_dict(self) -> dict:
        return {
            "center": list(self.center),
            "radius": self.radius,
            "population": self.population,
            "weight": self.weight,
        }
