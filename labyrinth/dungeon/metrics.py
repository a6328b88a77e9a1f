from __future__ import annotations

from typing import Dict

from .tiles import CellType


def init_metrics() -> Dict[str, int | float | dict]:
    return {
        'rooms_attempted': 0,
        'rooms_placed': 0,
        'rooms_rejected': 0,
        'triangulation_edges': 0,
        'tree_edges': 0,
        'loop_edges': 0,
        'unreached_vertices': 0,
        'paths_carved': 0,
        'paths_failed': 0,
        'stair_runs': 0,
        'tiles_room': 0,
        'tiles_hallway': 0,
        'tiles_stairs': 0,
        'runtime_ms': 0.0,
        'phase_ms': {},
    }


def record_tile_counts(metrics: Dict, grid) -> None:
    counts = grid.counts()
    metrics['tiles_room'] = counts[CellType.ROOM]
    metrics['tiles_hallway'] = counts[CellType.HALLWAY]
    metrics['tiles_stairs'] = counts[CellType.STAIRS]
