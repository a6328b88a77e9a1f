"""Public dungeon package interface."""

from .config import GenerationConfig
from .errors import (
    BoundsError,
    ConfigurationError,
    DegenerateInputError,
    GenerationError,
    GenerationInProgressError,
)
from .geometry import Edge, Vertex
from .grid import SpatialGrid
from .pathfinding import CostPolicy, DungeonPathfinder, PathCost, carve_path, make_cost_function
from .pipeline import GenerationDriver, GenerationResult, GenerationState, ProgressEvent, generate
from .prim import add_loop_edges, minimum_spanning_tree
from .rooms import Room, place_rooms
from .tiles import CellType
from .triangulation import triangulate  # noqa: F401

__all__ = [
    "CellType",
    "SpatialGrid",
    "Room",
    "place_rooms",
    "Vertex",
    "Edge",
    "triangulate",
    "minimum_spanning_tree",
    "add_loop_edges",
    "PathCost",
    "CostPolicy",
    "DungeonPathfinder",
    "make_cost_function",
    "carve_path",
    "GenerationConfig",
    "GenerationDriver",
    "GenerationResult",
    "GenerationState",
    "ProgressEvent",
    "generate",
    "GenerationError",
    "ConfigurationError",
    "BoundsError",
    "DegenerateInputError",
    "GenerationInProgressError",
]
