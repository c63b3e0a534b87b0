"""
Crowd Router Main Application
=============================

FastAPI entry point for the crowd-aware routing engine.

The engine is created in the application lifespan and stored on
app.state; nothing is kept in module-level globals.

Endpoints:
    GET    /                    - Service information
    GET    /health              - Liveness probe
    GET    /metrics             - Grid and routing metrics
    GET    /crowd               - Populated areas and crowd zones
    POST   /crowd               - Add people at a location
    DELETE /crowd               - Clear all crowd data
    POST   /route               - Calculate the least-congested route
    GET    /route               - Last selected route
    POST   /route/select/{idx}  - Manually select another candidate
    POST   /session/point       - Select start, then end; routes when both are set
    DELETE /session             - Reset the start/end selection

Error Mapping:
    InvalidCoordinate / InvalidArgument -> 422
    NoRouteFound                        -> 404
    Anything else                       -> 500 (logged, state untouched)
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from crowd_router.config import Settings, settings
from crowd_router.engine import CrowdRoutingEngine
from crowd_router.errors import InvalidArgument, InvalidCoordinate, NoRouteFound
from crowd_router.models.api import (
    AddPersonRequest,
    AddPersonResponse,
    CrowdSnapshot,
    PointModel,
    RouteRequest,
    RouteResponse,
    SessionResponse,
)
from crowd_router.session import RouteSession


logger = logging.getLogger(__name__)


def get_engine(request: Request) -> CrowdRoutingEngine:
    return request.app.state.engine


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    app_settings: Optional[Settings] = None,
    engine: Optional[CrowdRoutingEngine] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to build the engine from (defaults to the
            global settings)
        engine: Pre-built engine; when given, the caller owns its lifecycle

    Returns:
        Configured FastAPI application
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan: create the engine, dispose of it on shutdown."""
        app.state.started_at = time.time()
        logger.info(f"Starting {app_settings.app.name} {app_settings.app.version}")

        owns_engine = engine is None
        app.state.engine = engine or CrowdRoutingEngine.create(app_settings)
        app.state.session = RouteSession()
        logger.info(
            f"Routing provider: {app_settings.provider.base_url} "
            f"({app_settings.provider.profile})"
        )

        yield

        logger.info("Shutting down...")
        if owns_engine:
            app.state.engine.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="CrowdRouter",
        description="Crowd-aware route scoring engine",
        version=app_settings.app.version,
        lifespan=lifespan,
    )

    _register_error_handlers(app)
    _register_routes(app, app_settings)

    return app


# =============================================================================
# Error Handlers
# =============================================================================

def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(InvalidCoordinate)
    async def invalid_coordinate(request: Request, exc: InvalidCoordinate) -> JSONResponse:
        return JSONResponse(
            {"error": "invalid_coordinate", "detail": str(exc)},
            status_code=422,
        )

    @app.exception_handler(InvalidArgument)
    async def invalid_argument(request: Request, exc: InvalidArgument) -> JSONResponse:
        return JSONResponse(
            {"error": "invalid_argument", "detail": str(exc)},
            status_code=422,
        )

    @app.exception_handler(NoRouteFound)
    async def no_route_found(request: Request, exc: NoRouteFound) -> JSONResponse:
        return JSONResponse(
            {"error": "no_route_found", "detail": str(exc)},
            status_code=404,
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse({"error": "internal_error"}, status_code=500)


# =============================================================================
# HTTP Endpoints
# =============================================================================

def _register_routes(app: FastAPI, app_settings: Settings) -> None:

    @app.get("/")
    async def root() -> JSONResponse:
        """Service information endpoint."""
        return JSONResponse({
            "service": "CrowdRouter",
            "version": app_settings.app.version,
            "name": app_settings.app.name,
            "status": "running",
            "provider": app_settings.provider.base_url,
        })

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        """Liveness probe - always 200 while the process is running."""
        return JSONResponse({
            "status": "healthy",
            "uptime_seconds": round(time.time() - request.app.state.started_at, 1),
        })

    @app.get("/metrics")
    async def metrics(request: Request) -> JSONResponse:
        """Detailed metrics for observability."""
        return JSONResponse(get_engine(request).get_metrics())

    @app.get("/crowd", response_model=CrowdSnapshot)
    async def get_crowd(request: Request) -> CrowdSnapshot:
        """Populated areas and crowd zones for rendering."""
        engine = get_engine(request)
        return CrowdSnapshot.model_validate({
            "populated_areas": [a.to_dict() for a in engine.get_populated_areas()],
            "crowd_zones": [z.to_dict() for z in engine.crowd_zones],
        })

    @app.post("/crowd", response_model=AddPersonResponse)
    async def add_person(body: AddPersonRequest, request: Request) -> AddPersonResponse:
        """Add people at a location."""
        engine = get_engine(request)
        population = engine.add_person(body.lat, body.lng, body.count)
        logger.info(f"Added {body.count} at ({body.lat}, {body.lng}). New population: {population}")
        return AddPersonResponse(
            population=population,
            populated_areas=len(engine.get_populated_areas()),
            crowd_zones=len(engine.crowd_zones),
        )

    @app.delete("/crowd")
    async def clear_crowd(request: Request) -> JSONResponse:
        """Clear all crowd data."""
        get_engine(request).clear_all()
        return JSONResponse({"status": "cleared"})

    @app.post("/route", response_model=RouteResponse)
    async def calculate_route(body: RouteRequest, request: Request) -> RouteResponse:
        """Calculate candidates and return the least-congested route."""
        selection = await get_engine(request).calculate_route(
            body.start.as_tuple(), body.end.as_tuple()
        )
        return RouteResponse.from_selection(selection)

    @app.get("/route", response_model=RouteResponse)
    async def current_route(request: Request) -> RouteResponse:
        """Last selected route."""
        selection = get_engine(request).current_selection
        if selection is None:
            raise NoRouteFound("No route has been calculated yet")
        return RouteResponse.from_selection(selection)

    @app.post("/route/select/{index}", response_model=RouteResponse)
    async def select_route(index: int, request: Request) -> RouteResponse:
        """Manually select another candidate of the last calculation."""
        selection = get_engine(request).select_route(index)
        return RouteResponse.from_selection(selection)

    @app.post("/session/point", response_model=SessionResponse)
    async def select_point(body: PointModel, request: Request) -> SessionResponse:
        """Pick the start, then the end point; the route is calculated once both are set."""
        session: RouteSession = request.app.state.session
        event = session.select_point(body.as_tuple())

        route = None
        if session.is_ready:
            selection = await get_engine(request).calculate_route(session.start, session.end)
            route = RouteResponse.from_selection(selection)

        return SessionResponse(
            event=event.value,
            start=list(session.start) if session.start else None,
            end=list(session.end) if session.end else None,
            route=route,
        )

    @app.delete("/session")
    async def reset_session(request: Request) -> JSONResponse:
        """Clear the start/end selection."""
        request.app.state.session.reset()
        return JSONResponse({"status": "reset"})


# =============================================================================
# Default Application
# =============================================================================

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "crowd_router.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
    )
