"""Exception hierarchy for dungeon generation.

Only ConfigurationError and BoundsError are fatal to a run. Degenerate
triangulations are converted to "no edges" by the driver, and failed path
searches are reported through a None result rather than an exception.
"""
from __future__ import annotations

from typing import Optional


class GenerationError(Exception):
    """Base class for every error raised by the generation core."""


class ConfigurationError(GenerationError, ValueError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.message = message


class BoundsError(GenerationError, IndexError):
    def __init__(self, pos, offset, size):
        super().__init__(f"coordinate {tuple(pos)} outside grid (offset={tuple(offset)}, size={tuple(size)})")
        self.pos = tuple(pos)
        self.offset = tuple(offset)
        self.size = tuple(size)


class DegenerateInputError(GenerationError):
    def __init__(self, vertex_count: int):
        super().__init__(f"triangulation needs at least 2 vertices, got {vertex_count}")
        self.vertex_count = vertex_count


class GenerationInProgressError(GenerationError):
    def __init__(self, state):
        super().__init__(f"generation already running (state={getattr(state, 'value', state)})")
        self.state = state


__all__ = [
    "GenerationError",
    "ConfigurationError",
    "BoundsError",
    "DegenerateInputError",
    "GenerationInProgressError",
]
