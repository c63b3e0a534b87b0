"""
Route Session Tests
===================

Tests for start/end point selection.
"""

import pytest

from crowd_router.errors import InvalidCoordinate
from crowd_router.session import RouteSession, SessionEvent


class TestRouteSession:
    """Tests for RouteSession.select_point."""
    
    def test_first_point_sets_start(self):
        session = RouteSession()
        assert session.select_point((23.18, 75.78)) == SessionEvent.START_SET
        assert session.start == (23.18, 75.78)
        assert session.end is None
        assert not session.is_ready
    
    def test_second_point_sets_end(self):
        session = RouteSession()
        session.select_point((23.18, 75.78))
        assert session.select_point((23.19, 75.79)) == SessionEvent.END_SET
        assert session.is_ready
    
    def test_third_point_resets_to_new_start(self):
        session = RouteSession()
        session.select_point((23.18, 75.78))
        session.select_point((23.19, 75.79))
        
        assert session.select_point((23.20, 75.80)) == SessionEvent.RESET
        assert session.start == (23.20, 75.80)
        assert session.end is None
    
    def test_invalid_point_leaves_session_unchanged(self):
        session = RouteSession()
        session.select_point((23.18, 75.78))
        
        with pytest.raises(InvalidCoordinate):
            session.select_point((23.19, 200.0))
        with pytest.raises(InvalidCoordinate):
            session.select_point((23.19,))
        
        assert session.start == (23.18, 75.78)
        assert session.end is None
    
    def test_reset(self):
        session = RouteSession()
        session.select_point((23.18, 75.78))
        session.reset()
        assert session.start is None
