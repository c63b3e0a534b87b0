"""
Routing Engine Tests
====================

End-to-end tests of CrowdRoutingEngine with a faked routing provider.
"""

import asyncio

import pytest

from conftest import osrm_ok, url_point_count
from crowd_router.config import Settings
from crowd_router.engine import CrowdRoutingEngine
from crowd_router.errors import InvalidArgument, InvalidCoordinate, NoRouteFound
from crowd_router.models.route import RouteKind


START = (9.99, 9.99)
END = (10.01, 10.02)


class TestCalculateRoute:
    """Tests for CrowdRoutingEngine.calculate_route."""
    
    def test_selects_least_congested_candidate(self, make_engine, crowded_grid, provider_handler):
        engine, session = make_engine(provider_handler, grid=crowded_grid)
        
        selection = asyncio.run(engine.calculate_route(START, END))
        
        assert [c.kind for c in selection.candidates] == [
            RouteKind.DIRECT,
            RouteKind.AVOIDANCE,
            RouteKind.ALTERNATIVE,
        ]
        assert selection.index == 1
        assert selection.route.kind == RouteKind.AVOIDANCE
        assert selection.statistics.crowd_intersection == 0
        assert selection.statistics.efficiency_percent == 100.0
        assert engine.current_selection is selection
        assert len(session.calls) == 3
        assert engine.route_options == selection.candidates
    
    def test_without_crowds_direct_route_wins_tie(self, make_engine, provider_handler):
        engine, session = make_engine(provider_handler)
        
        selection = asyncio.run(engine.calculate_route(START, END))
        
        assert [c.kind for c in selection.candidates] == [RouteKind.DIRECT, RouteKind.ALTERNATIVE]
        assert selection.index == 0
        assert len(session.calls) == 2
    
    def test_empty_geometry_branch_is_dropped(
        self, make_engine, crowded_grid, crowded_route, partial_route
    ):
        def handler(url, params):
            if params.get("alternatives") == "true":
                return osrm_ok(crowded_route, partial_route)
            if url_point_count(url) > 2:
                return osrm_ok([])
            return osrm_ok(crowded_route)
        
        engine, _ = make_engine(handler, grid=crowded_grid)
        
        selection = asyncio.run(engine.calculate_route(START, END))
        
        assert [c.kind for c in selection.candidates] == [RouteKind.DIRECT, RouteKind.ALTERNATIVE]
        assert selection.route.kind == RouteKind.ALTERNATIVE
        assert selection.statistics.total_points > 0
        assert engine.get_metrics()["routing"]["empty_branches"]["avoidance"] == 1
    
    def test_all_branches_failing_raises_no_route(self, make_engine, crowded_grid, connection_error_handler):
        engine, _ = make_engine(connection_error_handler, grid=crowded_grid)
        
        with pytest.raises(NoRouteFound):
            asyncio.run(engine.calculate_route(START, END))
        assert engine.current_selection is None
    
    def test_invalid_points_rejected_before_any_request(self, make_engine, provider_handler):
        engine, session = make_engine(provider_handler)
        
        with pytest.raises(InvalidCoordinate):
            asyncio.run(engine.calculate_route((91.0, 0.0), END))
        with pytest.raises(InvalidCoordinate):
            asyncio.run(engine.calculate_route(START, "north"))
        assert session.calls == []
    
    def test_later_crowds_do_not_rescore_past_selection(self, make_engine, provider_handler):
        engine, _ = make_engine(provider_handler)
        selection = asyncio.run(engine.calculate_route(START, END))
        
        engine.add_person(10.00025, 10.00025, 10)
        
        assert selection.route.intersection.total_intersection == 0
        assert selection.route.intersection.worst_zone is None


class TestSelectRoute:
    """Tests for manual override via CrowdRoutingEngine.select_route."""
    
    def test_requires_previous_calculation(self, make_engine, provider_handler):
        engine, _ = make_engine(provider_handler)
        with pytest.raises(NoRouteFound):
            engine.select_route(0)
    
    def test_override_recomputes_statistics(self, make_engine, crowded_grid, provider_handler):
        engine, _ = make_engine(provider_handler, grid=crowded_grid)
        asyncio.run(engine.calculate_route(START, END))
        
        selection = engine.select_route(0)
        
        assert selection.route.kind == RouteKind.DIRECT
        assert selection.statistics.route_type == "direct"
        assert selection.statistics.crowd_intersection == pytest.approx(10.0)
        assert selection.statistics.crowded_points == 1
        assert engine.current_selection is selection
    
    def test_out_of_range_index(self, make_engine, crowded_grid, provider_handler):
        engine, _ = make_engine(provider_handler, grid=crowded_grid)
        asyncio.run(engine.calculate_route(START, END))
        
        with pytest.raises(InvalidArgument):
            engine.select_route(3)
        with pytest.raises(InvalidArgument):
            engine.select_route("1")
        with pytest.raises(InvalidArgument):
            engine.select_route(1.5)
        with pytest.raises(InvalidArgument):
            engine.select_route(True)
        assert engine.current_selection.index == 1


class TestLifecycle:
    """Tests for engine construction and disposal."""
    
    def test_create_from_settings_loads_seed_crowds(self):
        settings = Settings.model_validate({
            "provider": {"base_url": "http://osrm.test"},
            "grid": {
                "seed_crowds": [
                    {"lat": 23.1821, "lng": 75.7890, "count": 20},
                    {"lat": 23.1830, "lng": 75.7885, "count": 0},
                    {"lat": 23.1815, "lng": 75.7870, "count": 5},
                ],
            },
        })
        
        with CrowdRoutingEngine.create(settings) as engine:
            assert [a.population for a in engine.get_populated_areas()] == [20, 5]
            assert len(engine.crowd_zones) == 2
            assert engine.client.base_url == "http://osrm.test"
    
    def test_engines_do_not_share_state(self, make_engine, provider_handler):
        first, _ = make_engine(provider_handler)
        second, _ = make_engine(provider_handler)
        
        first.add_person(1.0001, 1.0001, 5)
        assert second.get_populated_areas() == []
    
    def test_close_is_idempotent(self, make_engine, provider_handler):
        engine, session = make_engine(provider_handler)
        engine.close()
        engine.close()
        assert session.closed
    
    def test_clear_all_keeps_last_selection(self, make_engine, crowded_grid, provider_handler):
        engine, _ = make_engine(provider_handler, grid=crowded_grid)
        asyncio.run(engine.calculate_route(START, END))
        
        engine.clear_all()
        
        assert engine.crowd_zones == ()
        assert engine.current_selection is not None
        assert engine.get_metrics()["grid"]["total_population"] == 0
