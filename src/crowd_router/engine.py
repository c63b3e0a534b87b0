"""
Crowd Routing Engine
====================

Explicitly constructed service object tying the grid, the provider client
and the selector together.

Lifecycle:
    engine = CrowdRoutingEngine.create(settings)   # create
    engine.add_person(...)                          # use
    selection = await engine.calculate_route(start, end)
    engine.close()                                  # dispose

The engine owns its PopulationGrid and OSRMClient. Nothing is shared at
module level, so independent engines (e.g. one per test) never see each
other's state.

Flow of calculate_route:
    validate points -> snapshot zones -> fetch candidates concurrently
    -> select least congested -> compute statistics -> remember selection
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from crowd_router.errors import NoRouteFound
from crowd_router.grid import PopulationGrid
from crowd_router.models.geo import validate_point
from crowd_router.models.route import RouteCandidate, RouteSelection
from crowd_router.models.zones import CrowdZone, PopulatedArea
from crowd_router.routing import OSRMClient, RouteCandidateGenerator, RouteSelector


logger = logging.getLogger(__name__)


class CrowdRoutingEngine:
    """
    Crowd-aware routing service.

    Attributes:
        grid: Population grid owned by this engine
        client: Routing provider adapter owned by this engine
        generator: Candidate generator using `client`
        selector: Route selector scoring against `grid`

    Example:
        with CrowdRoutingEngine(PopulationGrid(), OSRMClient()) as engine:
            engine.add_person(23.1821, 75.7890, 20)
            selection = asyncio.run(
                engine.calculate_route((23.18, 75.78), (23.19, 75.80))
            )
            print(selection.statistics.efficiency_percent)
    """

    def __init__(
        self,
        grid: PopulationGrid,
        client: OSRMClient,
        branch_timeout: float = 15.0,
    ) -> None:
        self.grid = grid
        self.client = client
        self.generator = RouteCandidateGenerator(client, branch_timeout=branch_timeout)
        self.selector = RouteSelector(grid.get_routing_weight)

        self._current: Optional[RouteSelection] = None
        self._closed: bool = False

    @classmethod
    def create(cls, settings: Any) -> "CrowdRoutingEngine":
        """
        Build an engine from Settings and load configured seed crowds.

        Args:
            settings: crowd_router.config.Settings
        """
        grid = PopulationGrid(grid_size=settings.grid.grid_size)
        client = OSRMClient(
            base_url=settings.provider.base_url,
            profile=settings.provider.profile,
            timeout=settings.provider.timeout_seconds,
        )
        engine = cls(
            grid=grid,
            client=client,
            branch_timeout=settings.routing.branch_timeout_seconds,
        )

        if settings.grid.seed_crowds:
            grid.load_seed(seed.model_dump() for seed in settings.grid.seed_crowds)

        return engine

    # -------------------------------------------------------------------------
    # Crowd data
    # -------------------------------------------------------------------------

    def add_person(self, lat: Any, lng: Any, count: Any = 1) -> int:
        """Add people at (lat, lng); returns the new cell population."""
        return self.grid.add_person(lat, lng, count)

    def get_populated_areas(self) -> List[PopulatedArea]:
        return self.grid.get_populated_areas()

    @property
    def crowd_zones(self) -> Tuple[CrowdZone, ...]:
        return self.grid.crowd_zones

    def clear_all(self) -> None:
        """Clear all crowd data. The last route selection is kept for display."""
        self.grid.clear_all()

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    async def calculate_route(self, start: Any, end: Any) -> RouteSelection:
        """
        Compute candidates for start -> end and select the least congested.

        Raises:
            InvalidCoordinate: If start or end is invalid
            NoRouteFound: If every branch produced nothing
        """
        start_point = validate_point(start)
        end_point = validate_point(end)
        zones = self.grid.crowd_zones

        logger.info(
            f"Calculating routes {start_point} -> {end_point} "
            f"with {len(zones)} crowd zones"
        )

        candidates = await self.generator.get_multiple_routes(start_point, end_point, zones)
        if not candidates:
            logger.warning("No routes found")
            raise NoRouteFound(f"No route found between {start_point} and {end_point}")

        self._current = self.selector.select_best(candidates)
        return self._current

    def select_route(self, index: int) -> RouteSelection:
        """
        Manually select another candidate of the last calculation.

        Statistics are recomputed against the current grid.

        Raises:
            NoRouteFound: If no route has been calculated yet
            InvalidArgument: If index is not an integer or is out of range
        """
        if self._current is None:
            raise NoRouteFound("No route has been calculated yet")

        self._current = self.selector.select(self._current.candidates, index)
        logger.info(f"Selected {self._current.route.kind.value} route (index {index})")
        return self._current

    @property
    def current_selection(self) -> Optional[RouteSelection]:
        return self._current

    @property
    def route_options(self) -> Sequence[RouteCandidate]:
        return self._current.candidates if self._current else ()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def get_metrics(self) -> dict:
        """Get engine metrics for observability."""
        return {
            "grid": self.grid.get_metrics(),
            "routing": self.generator.get_metrics(),
            "has_selection": self._current is not None,
        }

    def close(self) -> None:
        """Release the provider client. Idempotent."""
        if self._closed:
            return
        self.client.close()
        self._closed = True
        logger.info("CrowdRoutingEngine closed")

    def __enter__(self) -> "CrowdRoutingEngine":
        return self

    def __exit__(self, *args) -> None:
        self.close()
