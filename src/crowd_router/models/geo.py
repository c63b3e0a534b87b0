"""
Geographic Primitives
=====================

Coordinate types and validation shared by the grid and the router.

Conventions:
    - Internally every point is a (lat, lng) tuple of floats.
    - The routing provider speaks (lng, lat); conversion happens only in
      crowd_router.routing.osrm_client.
    - Grid cells are addressed by a structured integer key, never by a
      formatted float string.
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Sequence, Tuple

from crowd_router.errors import InvalidCoordinate


# Internal coordinate type: (lat, lng)
LatLng = Tuple[float, float]

DEFAULT_GRID_SIZE = 0.0005


def _as_finite_float(value: Any, name: str) -> float:
    # bool is a Real subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidCoordinate(f"{name} must be a number, got {value!r}")
    result = float(value)
    if not math.isfinite(result):
        raise InvalidCoordinate(f"{name} must be finite, got {value!r}")
    return result


def validate_coordinate(lat: Any, lng: Any) -> LatLng:
    """
    Validate and normalize a latitude/longitude pair.
    
    Args:
        lat: Latitude in degrees, must lie in [-90, 90]
        lng: Longitude in degrees, must lie in [-180, 180]
        
    Returns:
        Normalized (lat, lng) tuple of floats
        
    Raises:
        InvalidCoordinate: If either value is non-numeric, non-finite
            or out of range
    """
    lat_f = _as_finite_float(lat, "lat")
    lng_f = _as_finite_float(lng, "lng")
    
    if not -90.0 <= lat_f <= 90.0:
        raise InvalidCoordinate(f"lat must be within [-90, 90], got {lat_f}")
    if not -180.0 <= lng_f <= 180.0:
        raise InvalidCoordinate(f"lng must be within [-180, 180], got {lng_f}")
    
    return (lat_f, lng_f)


def validate_point(point: Any) -> LatLng:
    """Validate a (lat, lng) sequence of length two."""
    if not isinstance(point, Sequence) or isinstance(point, str) or len(point) != 2:
        raise InvalidCoordinate(f"point must be a (lat, lng) pair, got {point!r}")
    return validate_coordinate(point[0], point[1])


@dataclass(frozen=True, slots=True)
class GridKey:
    """
    Composite key of a population grid cell.
    
    Each coordinate is quantized independently:
        index = floor(coord / grid_size)
    
    Two points inside the same grid_size x grid_size cell share a key.
    
    Attributes:
        lat_index: Quantized latitude index
        lng_index: Quantized longitude index
    """
    
    lat_index: int
    lng_index: int
    
    @classmethod
    def from_coordinates(
        cls,
        lat: float,
        lng: float,
        grid_size: float = DEFAULT_GRID_SIZE,
    ) -> "GridKey":
        return cls(
            lat_index=math.floor(lat / grid_size),
            lng_index=math.floor(lng / grid_size),
        )
    
    def to_coordinates(self, grid_size: float = DEFAULT_GRID_SIZE) -> LatLng:
        """Return the cell's corner coordinate (lat, lng)."""
        return (self.lat_index * grid_size, self.lng_index * grid_size)
