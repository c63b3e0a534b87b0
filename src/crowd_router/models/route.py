"""
Route Models
============

Transient values produced while scoring candidate routes.

None of these hold a reference to the population grid. Zones embedded in
an IntersectionReport are the snapshot taken when the candidate was
scored, so later grid mutations never change a past score.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from crowd_router.models.geo import LatLng
from crowd_router.models.zones import CrowdZone


class RouteKind(str, Enum):
    """
    How a candidate route was obtained.

    Attributes:
        DIRECT: Provider's shortest path start -> end
        AVOIDANCE: Path forced through waypoints beside the worst zone
        ALTERNATIVE: Provider's second-ranked alternative path
    """

    DIRECT = "direct"
    AVOIDANCE = "avoidance"
    ALTERNATIVE = "alternative"


@dataclass(frozen=True, slots=True)
class WorstZone:
    """
    Zone with the highest intersection ratio for a route.

    Attributes:
        zone: The crowd zone
        ratio: Fraction of route points inside the zone
        point_count: Number of route points inside the zone
    """

    zone: CrowdZone
    ratio: float
    point_count: int


@dataclass(frozen=True, slots=True)
class IntersectionReport:
    """
    How much a route overlaps the crowd zones.

    Attributes:
        total_intersection: Sum over zones of ratio * weight
        worst_zone: Zone with the highest ratio, None without zones
        average_intersection: total_intersection / zone count (0 without zones)
    """

    total_intersection: float
    worst_zone: Optional[WorstZone]
    average_intersection: float

    @classmethod
    def empty(cls) -> "IntersectionReport":
        return cls(total_intersection=0.0, worst_zone=None, average_intersection=0.0)

    def to_dict(self) -> dict:
        worst = None
        if self.worst_zone is not None:
            worst = {
                "zone": self.worst_zone.zone.to_dict(),
                "ratio": self.worst_zone.ratio,
                "point_count": self.worst_zone.point_count,
            }
        return {
            "total_intersection": self.total_intersection,
            "worst_zone": worst,
            "average_intersection": self.average_intersection,
        }


@dataclass(frozen=True, slots=True)
class RouteCandidate:
    """
    One proposed path between start and end.

    Attributes:
        points: Ordered (lat, lng) points of the path
        kind: How the path was obtained
        intersection: Crowd intersection report for the path
    """

    points: Tuple[LatLng, ...]
    kind: RouteKind
    intersection: IntersectionReport

    def __len__(self) -> int:
        return len(self.points)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "points": [list(p) for p in self.points],
            "intersection": self.intersection.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class RouteStatistics:
    """
    Summary metrics for a selected route.

    Attributes:
        total_points: Number of points on the route
        crowded_points: Points whose routing weight exceeds 2
        average_weight: Mean per-point routing weight (0 for empty routes)
        total_distance_meters: Planar length, 1 degree ~= 111 km
        efficiency_percent: max(0, 100 - crowded/total * 100), 0 when empty
        route_type: RouteKind value of the route
        crowd_intersection: Route's total intersection score
    """

    total_points: int
    crowded_points: int
    average_weight: float
    total_distance_meters: float
    efficiency_percent: float
    route_type: str
    crowd_intersection: float

    def to_dict(self) -> dict:
        return {
            "total_points": self.total_points,
            "crowded_points": self.crowded_points,
            "average_weight": round(self.average_weight, 4),
            "total_distance_meters": round(self.total_distance_meters, 2),
            "efficiency_percent": round(self.efficiency_percent, 2),
            "route_type": self.route_type,
            "crowd_intersection": round(self.crowd_intersection, 4),
        }


@dataclass(frozen=True, slots=True)
class RouteSelection:
    """
    The chosen route among a candidate list, with its statistics.

    Attributes:
        candidates: Every candidate produced for the request
        index: Position of the chosen candidate in `candidates`
        statistics: Statistics computed when the route was selected
    """

    candidates: Tuple[RouteCandidate, ...]
    index: int
    statistics: RouteStatistics

    @property
    def route(self) -> RouteCandidate:
        return self.candidates[self.index]

    @property
    def points(self) -> List[LatLng]:
        return list(self.route.points)
