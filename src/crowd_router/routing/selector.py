"""
Route Selector
==============

Chooses among scored candidates.

Selection Rule:
    The candidate with the lowest total_intersection wins. Ties go to the
    earliest candidate in list order. An empty list selects nothing; that
    is a normal outcome, not an error.
"""

import logging
from typing import Optional, Sequence

from crowd_router.errors import InvalidArgument, NoRouteFound
from crowd_router.models.route import RouteCandidate, RouteSelection
from crowd_router.routing.statistics import WeightFn, compute_route_statistics


logger = logging.getLogger(__name__)


def select_best_route(candidates: Sequence[RouteCandidate]) -> Optional[int]:
    """Index of the least-congested candidate, or None if there are none."""
    best_index: Optional[int] = None
    for index, candidate in enumerate(candidates):
        if (
            best_index is None
            or candidate.intersection.total_intersection
            < candidates[best_index].intersection.total_intersection
        ):
            best_index = index
    return best_index


class RouteSelector:
    """
    Builds RouteSelection values from candidate lists.
    
    Statistics are computed fresh on every selection against the weight
    function supplied at construction (normally the live grid).
    """
    
    def __init__(self, weight_fn: WeightFn) -> None:
        self.weight_fn = weight_fn
    
    def select_best(self, candidates: Sequence[RouteCandidate]) -> RouteSelection:
        """
        Select the least-congested candidate.
        
        Raises:
            NoRouteFound: If the candidate list is empty
        """
        index = select_best_route(candidates)
        if index is None:
            raise NoRouteFound("No candidate routes available")
        
        selection = self.select(candidates, index)
        logger.info(
            f"Best route selected ({selection.route.kind.value}) with "
            f"{len(selection.route)} points, "
            f"intersection={selection.route.intersection.total_intersection:.3f}"
        )
        return selection
    
    def select(self, candidates: Sequence[RouteCandidate], index: int) -> RouteSelection:
        """
        Select a specific candidate (manual override).
        
        Raises:
            NoRouteFound: If the candidate list is empty
            InvalidArgument: If index is not an integer or is out of range
        """
        if not candidates:
            raise NoRouteFound("No candidate routes available")
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidArgument(f"Route index must be an integer, got {index!r}")
        if not 0 <= index < len(candidates):
            raise InvalidArgument(
                f"Route index {index} out of range (0..{len(candidates) - 1})"
            )
        
        return RouteSelection(
            candidates=tuple(candidates),
            index=index,
            statistics=compute_route_statistics(candidates[index], self.weight_fn),
        )
