"""
Route Session
=============

Start/end point selection for one user.

Transitions on select_point:
    no start          -> start set                  (START_SET)
    start, no end     -> end set                    (END_SET)
    start and end set -> new start, end cleared     (RESET)

Points are validated before any transition; an invalid point leaves the
session unchanged.
"""

import logging
from enum import Enum
from typing import Any, Optional

from crowd_router.models.geo import LatLng, validate_point


logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    """Outcome of a point selection."""

    START_SET = "start_set"
    END_SET = "end_set"
    RESET = "reset"


class RouteSession:
    """
    Tracks the start and end points chosen by a user.

    Example:
        session = RouteSession()
        session.select_point((23.18, 75.78))   # START_SET
        session.select_point((23.19, 75.80))   # END_SET
        if session.is_ready:
            await engine.calculate_route(session.start, session.end)
    """

    def __init__(self) -> None:
        self.start: Optional[LatLng] = None
        self.end: Optional[LatLng] = None

    @property
    def is_ready(self) -> bool:
        """Whether both points are set."""
        return self.start is not None and self.end is not None

    def select_point(self, point: Any) -> SessionEvent:
        """
        Apply a clicked point.

        Raises:
            InvalidCoordinate: If the point is invalid
        """
        validated = validate_point(point)

        if self.start is None:
            self.start = validated
            self.end = None
            event = SessionEvent.START_SET
        elif self.end is None:
            self.end = validated
            event = SessionEvent.END_SET
        else:
            self.start = validated
            self.end = None
            event = SessionEvent.RESET

        logger.debug(f"Route session {event.value}: start={self.start}, end={self.end}")
        return event

    def reset(self) -> None:
        self.start = None
        self.end = None
