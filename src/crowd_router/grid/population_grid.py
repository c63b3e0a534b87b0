"""
Population Grid
===============

Spatial population index for reported crowd locations.

This index:
    - Quantizes (lat, lng) into fixed-size cells (default 0.0005 degrees)
    - Accumulates integer population counts per cell
    - Recomputes the crowd zone set in full after every mutation
    - Answers population and routing-weight queries for any coordinate

Cell Size:
    0.0005 degrees is roughly 55m x 50m near the equator and narrower in
    longitude at higher latitudes. Points within the same cell are treated
    as the same location.

Concurrency:
    Mutations and snapshots are guarded by a re-entrant lock so a grid can
    be shared by several request handlers. Zone snapshots are immutable
    tuples and are safe to hand to concurrent route evaluation.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from crowd_router.errors import InvalidArgument
from crowd_router.grid.zones import CrowdZoneModel, routing_weight
from crowd_router.models.geo import DEFAULT_GRID_SIZE, GridKey, validate_coordinate
from crowd_router.models.zones import CrowdZone, PopulatedArea


logger = logging.getLogger(__name__)


class PopulationGrid:
    """
    Grid of population counts with derived crowd zones.

    Population counts are monotonic: there is no API to remove people
    from a cell, only to clear the whole grid.

    Attributes:
        grid_size: Cell size in degrees

    Example:
        grid = PopulationGrid()

        grid.add_person(23.1821, 75.7890, count=20)
        grid.get_population(23.1821, 75.7890)      # 20
        grid.get_routing_weight(23.1821, 75.7890)  # 20

        for zone in grid.crowd_zones:
            print(zone.center, zone.radius, zone.weight)
    """

    def __init__(self, grid_size: float = DEFAULT_GRID_SIZE) -> None:
        """
        Initialize an empty grid.

        Args:
            grid_size: Cell size in degrees, must be positive
        """
        if grid_size <= 0:
            raise ValueError("grid_size must be positive")

        self.grid_size = grid_size

        self._populations: Dict[GridKey, int] = {}
        self._zone_model = CrowdZoneModel()
        self._lock = threading.RLock()

        logger.info(f"PopulationGrid initialized: grid_size={grid_size}")

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_person(self, lat: Any, lng: Any, count: Any = 1) -> int:
        """
        Add people to the cell containing (lat, lng).

        Validation happens before any mutation; on failure the grid is
        left untouched.

        Args:
            lat: Latitude in [-90, 90]
            lng: Longitude in [-180, 180]
            count: Positive number of people to add

        Returns:
            New population of the cell

        Raises:
            InvalidCoordinate: If lat/lng are invalid
            InvalidArgument: If count is not a positive integer
        """
        lat_f, lng_f = validate_coordinate(lat, lng)
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidArgument(f"count must be an integer, got {count!r}")
        if count <= 0:
            raise InvalidArgument(f"count must be positive, got {count}")

        key = self._key(lat_f, lng_f)
        with self._lock:
            population = self._populations.get(key, 0) + count
            self._populations[key] = population
            self._recompute_zones()

        logger.debug(
            f"Added {count} at ({lat_f}, {lng_f}) -> cell population {population}"
        )
        return population

    def load_seed(self, entries: Iterable[Mapping[str, Any]]) -> int:
        """
        Bulk-load crowd entries of the form {"lat", "lng", "count"}.

        Every entry is validated before any is applied, so a bad entry
        leaves the grid untouched. Entries with a count of zero or less
        are skipped. Zones are recomputed once after the whole batch.

        Returns:
            Number of entries applied

        Raises:
            InvalidCoordinate: If any entry has invalid lat/lng
            InvalidArgument: If any entry has a non-integer count
        """
        batch: List[Tuple[GridKey, int]] = []
        for entry in entries:
            lat_f, lng_f = validate_coordinate(entry.get("lat"), entry.get("lng"))
            count = entry.get("count", 1)
            if isinstance(count, bool) or not isinstance(count, int):
                raise InvalidArgument(f"count must be an integer, got {count!r}")
            if count <= 0:
                continue
            batch.append((self._key(lat_f, lng_f), count))

        with self._lock:
            for key, count in batch:
                self._populations[key] = self._populations.get(key, 0) + count
            if batch:
                self._recompute_zones()

        logger.info(f"Loaded {len(batch)} seed crowd entries")
        return len(batch)

    def clear_all(self) -> None:
        """Reset all cells and zones. Idempotent."""
        with self._lock:
            self._populations.clear()
            self._zone_model.clear()
        logger.info("PopulationGrid cleared")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_population(self, lat: Any, lng: Any) -> int:
        """Population of the cell containing (lat, lng); 0 if untouched."""
        lat_f, lng_f = validate_coordinate(lat, lng)
        return self._populations.get(self._key(lat_f, lng_f), 0)

    def get_routing_weight(self, lat: Any, lng: Any) -> int:
        """Routing penalty of the cell containing (lat, lng)."""
        return routing_weight(self.get_population(lat, lng))

    def get_populated_areas(self) -> List[PopulatedArea]:
        """
        List cells with a positive population, in insertion order.

        The order is stable for a given grid state.
        """
        with self._lock:
            items: List[Tuple[GridKey, int]] = list(self._populations.items())

        areas = []
        for key, population in items:
            if population > 0:
                lat, lng = key.to_coordinates(self.grid_size)
                areas.append(PopulatedArea(lat=lat, lng=lng, population=population))
        return areas

    @property
    def crowd_zones(self) -> Tuple[CrowdZone, ...]:
        """Immutable snapshot of the current crowd zones."""
        return self._zone_model.zones

    @property
    def cell_count(self) -> int:
        return len(self._populations)

    @property
    def total_population(self) -> int:
        with self._lock:
            return sum(self._populations.values())

    def get_metrics(self) -> dict:
        """Get grid metrics for observability."""
        return {
            "grid_size": self.grid_size,
            "populated_cells": self.cell_count,
            "total_population": self.total_population,
            "crowd_zones": len(self._zone_model),
        }

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _key(self, lat: float, lng: float) -> GridKey:
        return GridKey.from_coordinates(lat, lng, self.grid_size)

    def _recompute_zones(self) -> None:
        self._zone_model.recompute(self.get_populated_areas())
