"""
Crowd Zone Model
================

Derives weighted crowd zones from populated grid cells and answers
point/route queries against them.

Zone Rules:
    - Only cells with population >= MIN_ZONE_POPULATION produce a zone
    - radius = max(MIN_ZONE_RADIUS, population * RADIUS_PER_PERSON)
    - weight = routing_weight(population)

Query Semantics:
    Distances are Euclidean in degree space (not geodesic). A point lookup
    returns the FIRST zone in zone order that contains the point, which is
    not necessarily the nearest one.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from crowd_router.models.geo import LatLng
from crowd_router.models.zones import CrowdZone, PopulatedArea


logger = logging.getLogger(__name__)


MIN_ZONE_POPULATION = 3
MIN_ZONE_RADIUS = 0.001
RADIUS_PER_PERSON = 0.0003


def routing_weight(population: int) -> int:
    """
    Step function mapping a cell population to a routing penalty.
    
        0     -> 1
        1-2   -> 2
        3-5   -> 5
        6-9   -> 10
        >= 10 -> 20
    """
    if population <= 0:
        return 1
    if population < 3:
        return 2
    if population < 6:
        return 5
    if population < 10:
        return 10
    return 20


def zone_radius(population: int) -> float:
    return max(MIN_ZONE_RADIUS, population * RADIUS_PER_PERSON)


class CrowdZoneModel:
    """
    Holds the current zone set and answers containment queries.
    
    The zone set is a tuple that is replaced in a single assignment on
    every recompute, so readers always see either the old or the new set.
    
    Example:
        model = CrowdZoneModel()
        model.recompute(grid.get_populated_areas())
        
        zone = model.point_in_zone((23.1821, 75.789))
        hit = model.zones_on_route(route_points)
    """
    
    def __init__(self) -> None:
        self._zones: Tuple[CrowdZone, ...] = ()
    
    @property
    def zones(self) -> Tuple[CrowdZone, ...]:
        """Current immutable zone snapshot."""
        return self._zones
    
    def __len__(self) -> int:
        return len(self._zones)
    
    def recompute(self, areas: Iterable[PopulatedArea]) -> Tuple[CrowdZone, ...]:
        """
        Rebuild the full zone set from populated areas.
        
        Args:
            areas: Populated grid cells, in grid order
            
        Returns:
            The new zone tuple
        """
        zones = tuple(
            CrowdZone(
                center=(area.lat, area.lng),
                radius=zone_radius(area.population),
                population=area.population,
                weight=routing_weight(area.population),
            )
            for area in areas
            if area.population >= MIN_ZONE_POPULATION
        )
        self._zones = zones
        logger.debug(f"Recomputed crowd zones: {len(zones)} zones")
        return zones
    
    def clear(self) -> None:
        self._zones = ()
    
    def point_in_zone(self, point: LatLng) -> Optional[CrowdZone]:
        """Return the first zone containing `point`, or None."""
        return find_zone(point, self._zones)
    
    def zones_on_route(self, route: Sequence[LatLng]) -> List[CrowdZone]:
        """Return zones hit by any route point, deduplicated by identity."""
        return zones_on_route(route, self._zones)


def find_zone(point: LatLng, zones: Sequence[CrowdZone]) -> Optional[CrowdZone]:
    for zone in zones:
        if zone.contains(point):
            return zone
    return None


def zones_on_route(
    route: Sequence[LatLng],
    zones: Sequence[CrowdZone],
) -> List[CrowdZone]:
    hit: List[CrowdZone] = []
    seen = set()
    for point in route:
        zone = find_zone(point, zones)
        if zone is not None and id(zone) not in seen:
            seen.add(id(zone))
            hit.append(zone)
    return hit
