"""
API Models
==========

Request and response schemas for the HTTP surface.

Output Contract (POST /route):
    {
        "selected_index": 1,
        "route": {
            "kind": "avoidance",
            "points": [[23.1821, 75.789], ...],
            "intersection": {
                "total_intersection": 0.0,
                "worst_zone": null,
                "average_intersection": 0.0
            }
        },
        "candidates": [...],
        "statistics": {
            "total_points": 42,
            "crowded_points": 0,
            "average_weight": 1.0,
            "total_distance_meters": 812.4,
            "efficiency_percent": 100.0,
            "route_type": "avoidance",
            "crowd_intersection": 0.0
        }
    }
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from crowd_router.models.route import RouteSelection


class PointModel(BaseModel):
    """
    Geographic point supplied by the UI.

    Range checks are left to the engine so that every entry point raises
    the same InvalidCoordinate error.
    """

    lat: float = Field(..., description="Latitude in degrees")
    lng: float = Field(..., description="Longitude in degrees")

    def as_tuple(self) -> tuple:
        return (self.lat, self.lng)


class AddPersonRequest(PointModel):
    """Report people at a location."""

    count: int = Field(default=1, description="Number of people to add (> 0)")


class AddPersonResponse(BaseModel):
    """Result of an add-person event."""

    population: int = Field(..., ge=1, description="New population of the cell")
    populated_areas: int = Field(..., ge=0, description="Number of populated cells")
    crowd_zones: int = Field(..., ge=0, description="Number of crowd zones")


class RouteRequest(BaseModel):
    """Request a crowd-aware route between two points."""

    start: PointModel = Field(..., description="Route origin")
    end: PointModel = Field(..., description="Route destination")


class PopulatedAreaModel(BaseModel):
    """A populated grid cell."""

    lat: float
    lng: float
    population: int = Field(..., gt=0)
    level: str = Field(..., description="Crowd level: low, moderate, high, severe")


class CrowdZoneModel(BaseModel):
    """A derived crowd zone."""

    center: List[float] = Field(..., min_length=2, max_length=2)
    radius: float = Field(..., gt=0)
    population: int = Field(..., ge=3)
    weight: int = Field(..., ge=1)


class CrowdSnapshot(BaseModel):
    """Current crowd state for rendering."""

    populated_areas: List[PopulatedAreaModel] = Field(default_factory=list)
    crowd_zones: List[CrowdZoneModel] = Field(default_factory=list)


class WorstZoneModel(BaseModel):
    zone: CrowdZoneModel
    ratio: float = Field(..., ge=0.0, le=1.0)
    point_count: int = Field(..., ge=0)


class IntersectionModel(BaseModel):
    total_intersection: float = Field(..., ge=0.0)
    worst_zone: Optional[WorstZoneModel] = None
    average_intersection: float = Field(..., ge=0.0)


class CandidateModel(BaseModel):
    kind: str
    points: List[List[float]]
    intersection: IntersectionModel


class StatisticsModel(BaseModel):
    """Route statistics for display."""

    total_points: int = Field(..., ge=0)
    crowded_points: int = Field(..., ge=0)
    average_weight: float = Field(..., ge=0.0)
    total_distance_meters: float = Field(..., ge=0.0)
    efficiency_percent: float = Field(..., ge=0.0, le=100.0)
    route_type: str
    crowd_intersection: float = Field(..., ge=0.0)


class RouteResponse(BaseModel):
    """Selected route, every candidate (for manual override) and statistics."""

    selected_index: int = Field(..., ge=0)
    route: CandidateModel
    candidates: List[CandidateModel]
    statistics: StatisticsModel

    @classmethod
    def from_selection(cls, selection: RouteSelection) -> "RouteResponse":
        candidates = [c.to_dict() for c in selection.candidates]
        return cls.model_validate({
            "selected_index": selection.index,
            "route": candidates[selection.index],
            "candidates": candidates,
            "statistics": selection.statistics.to_dict(),
        })


class SessionResponse(BaseModel):
    """
    Result of selecting a point in the route session.

    `route` is filled when the point completes a start/end pair.
    """

    event: str = Field(..., description="start_set, end_set or reset")
    start: Optional[List[float]] = None
    end: Optional[List[float]] = None
    route: Optional[RouteResponse] = None
