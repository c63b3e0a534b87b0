"""
Grid Module
===========

Spatial population accounting for crowd-aware routing.

Components:
    - PopulationGrid: Quantized population counts per cell
    - CrowdZoneModel: Weighted zones derived from dense cells
    - routing_weight: Population -> routing penalty step function
"""

from crowd_router.grid.population_grid import PopulationGrid
from crowd_router.grid.zones import CrowdZoneModel, routing_weight

__all__ = ["PopulationGrid", "CrowdZoneModel", "routing_weight"]
