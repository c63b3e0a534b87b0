"""
CrowdRouter
===========

Crowd-aware route scoring engine.

This package tracks reported crowd locations on a quantized population
grid, derives weighted crowd zones, and scores candidate routes from an
external OSRM-compatible provider by how much they traverse those zones,
selecting the least-congested option.

Components:
    - grid: Population grid and crowd zone model
    - routing: Provider client, candidate generation, scoring, statistics
    - engine: Explicitly constructed routing service
    - session: Start/end point selection
    - main: FastAPI application

Example:
    import asyncio
    
    from crowd_router.engine import CrowdRoutingEngine
    from crowd_router.grid import PopulationGrid
    from crowd_router.routing import OSRMClient
    
    with CrowdRoutingEngine(PopulationGrid(), OSRMClient()) as engine:
        engine.add_person(23.1821, 75.7890, count=20)
        selection = asyncio.run(
            engine.calculate_route((23.1800, 75.7850), (23.1850, 75.7950))
        )
        print(selection.statistics.to_dict())
"""

__version__ = "0.1.0"
__author__ = "CrowdRouter Project"

# Note: configuration is not imported here; crowd_router.config loads
# settings on import.

__all__ = [
    "__version__",
]
