"""
Test Configuration
==================

Pytest fixtures and test configuration for the crowd router.

The routing provider is never contacted: OSRMClient receives a
FakeSession that answers GET requests from a handler function.
"""

from typing import Callable, List, Optional

import pytest
import requests


# =============================================================================
# Fake HTTP layer
# =============================================================================

class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code: int = 200, invalid_json: bool = False):
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._invalid_json:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """
    Records GET calls and answers them from `handler(url, params)`.

    The handler may return a FakeResponse or raise a requests exception.
    """

    def __init__(self, handler: Callable[[str, dict], FakeResponse]):
        self.handler = handler
        self.calls: List[dict] = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": dict(params or {}), "timeout": timeout})
        return self.handler(url, params or {})

    def close(self):
        self.closed = True


def osrm_ok(*routes) -> FakeResponse:
    """Build an "Ok" provider response from routes of (lat, lng) points."""
    return FakeResponse({
        "code": "Ok",
        "routes": [
            {"geometry": {"coordinates": [[lng, lat] for lat, lng in route]}}
            for route in routes
        ],
    })


def url_point_count(url: str) -> int:
    return len(url.rsplit("/", 1)[-1].split(";"))


# =============================================================================
# Geometry fixtures
# =============================================================================

# A grid add at (10.00025, 10.00025) lands in the cell whose corner is
# (10.0, 10.0); with 10 people the zone radius is ~0.003 and weight 20.
ZONE_CENTER = (10.0, 10.0)


def line(start, step, count):
    """`count` points from `start`, advancing by `step` = (d_lat, d_lng)."""
    return [
        (start[0] + step[0] * i, start[1] + step[1] * i)
        for i in range(count)
    ]


@pytest.fixture
def crowded_route():
    """10-point route: 5 points inside the zone at ZONE_CENTER, 5 far outside."""
    inside = line(ZONE_CENTER, (0.0, 0.0005), 5)
    outside = line((ZONE_CENTER[0], ZONE_CENTER[1] + 0.01), (0.0, 0.001), 5)
    return inside + outside


@pytest.fixture
def clear_route():
    """10-point route well away from ZONE_CENTER."""
    return line((10.05, 10.05), (0.0, 0.001), 10)


@pytest.fixture
def partial_route():
    """10-point route with 2 points inside the zone at ZONE_CENTER."""
    inside = line(ZONE_CENTER, (0.0005, 0.0), 2)
    outside = line((ZONE_CENTER[0] + 0.02, ZONE_CENTER[1]), (0.001, 0.0), 8)
    return inside + outside


@pytest.fixture
def grid():
    """Empty population grid."""
    from crowd_router.grid import PopulationGrid

    return PopulationGrid()


@pytest.fixture
def crowded_grid(grid):
    """Grid with a single weight-20 zone centred on ZONE_CENTER."""
    grid.add_person(10.00025, 10.00025, count=10)
    return grid


@pytest.fixture
def provider_handler(crowded_route, clear_route, partial_route):
    """
    Provider behaviour used by engine and API tests.

    direct -> crowded_route, avoidance (waypoints) -> clear_route,
    alternatives -> [crowded_route, partial_route]
    """
    def handler(url: str, params: dict) -> FakeResponse:
        if params.get("alternatives") == "true":
            return osrm_ok(crowded_route, partial_route)
        if url_point_count(url) > 2:
            return osrm_ok(clear_route)
        return osrm_ok(crowded_route)

    return handler


@pytest.fixture
def make_engine():
    """Factory for engines backed by a FakeSession."""
    from crowd_router.engine import CrowdRoutingEngine
    from crowd_router.grid import PopulationGrid
    from crowd_router.routing import OSRMClient

    created = []

    def factory(handler, grid: Optional[PopulationGrid] = None, branch_timeout: float = 5.0):
        session = FakeSession(handler)
        client = OSRMClient(base_url="http://osrm.test", timeout=1.0, session=session)
        engine = CrowdRoutingEngine(grid or PopulationGrid(), client, branch_timeout=branch_timeout)
        created.append(engine)
        return engine, session

    yield factory

    for engine in created:
        engine.close()


@pytest.fixture
def connection_error_handler():
    def handler(url, params):
        raise requests.ConnectionError("connection refused")

    return handler
