"""Pipeline orchestration for dungeon generation.

``GenerationDriver`` runs the four stages in a fixed order on one fresh grid
per run: room placement, triangulation of the room centres, corridor
selection (spanning tree plus loops) and corridor carving. The run is a
generator (``steps``) so callers can watch it progress; ``generate`` drains it
and forwards every event to an optional progress callback. Events are purely
observational and never change what ends up in the grid.

Event granularity: one PLACING_ROOMS event per placed room, one
TRIANGULATING and one BUILDING_TREE event per run, one PATHFINDING event per
carved corridor (its whole path, start to end) and a final DONE event.
Connections with no path produce no event.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional

from ..logging_utils import get_logger
from .cells import VERTICAL_AXIS, Coord
from .config import GenerationConfig
from .errors import DegenerateInputError, GenerationInProgressError
from .geometry import Edge, vertices_for_rooms
from .grid import SpatialGrid
from .metrics import init_metrics, record_tile_counts
from .pathfinding import CostPolicy, DungeonPathfinder, carve_path, make_cost_function
from .prim import add_loop_edges, minimum_spanning_tree, unreached_vertices
from .rooms import Room, iter_place_rooms
from .triangulation import triangulate

log = get_logger("labyrinth.dungeon")


class GenerationState(str, Enum):
    IDLE = "idle"
    PLACING_ROOMS = "placing_rooms"
    TRIANGULATING = "triangulating"
    BUILDING_TREE = "building_tree"
    PATHFINDING = "pathfinding"
    DONE = "done"


class ProgressEvent(NamedTuple):
    stage: GenerationState
    payload: Dict[str, Any]


ProgressCallback = Callable[[GenerationState, Dict[str, Any]], None]


@dataclass
class GenerationResult:
    config: GenerationConfig
    seed: int
    grid: SpatialGrid
    rooms: List[Room]
    edges: List[Edge]
    selected_edges: List[Edge]
    paths: List[List[Coord]]
    failed_connections: List[Edge]
    metrics: Dict[str, Any]

    def cells(self, include_empty: bool = False):
        return self.grid.items(include_empty=include_empty)

    @property
    def complete(self) -> bool:
        return not self.failed_connections

    def layer(self, y: int) -> List[str]:
        return self.grid.layer(y)

    def summary(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "config": self.config.to_dict(),
            "size": list(self.grid.size),
            "rooms": len(self.rooms),
            "edges": len(self.edges),
            "selected_edges": len(self.selected_edges),
            "paths": len(self.paths),
            "failed_connections": len(self.failed_connections),
            "complete": self.complete,
            "metrics": self.metrics,
        }

    def to_dict(self, include_cells: bool = True) -> Dict[str, Any]:
        d = self.summary()
        d["rooms"] = [r.to_dict() for r in self.rooms]
        d["selected_edges"] = [list(e.key()) for e in self.selected_edges]
        d["failed_connections"] = [list(e.key()) for e in self.failed_connections]
        d["paths"] = [[list(p) for p in path] for path in self.paths]
        if include_cells:
            d["cells"] = [[x, y, z, cell.value] for (x, y, z), cell in self.cells()]
        return d


class _PhaseTimer:
    def __init__(self, metrics: Dict[str, Any]):
        self.metrics = metrics
        self.start = self.mark = time.perf_counter()

    def lap(self, label: str) -> None:
        now = time.perf_counter()
        self.metrics["phase_ms"][label] = int((now - self.mark) * 1000)
        self.mark = now

    def finish(self) -> None:
        self.metrics["runtime_ms"] = int((time.perf_counter() - self.start) * 1000)


class GenerationDriver:
    """Stateful wrapper around one dungeon configuration.

    A request made while a run is in flight (state other than IDLE/DONE) is
    rejected with GenerationInProgressError. Every run, including
    ``regenerate``, starts from a brand new grid.
    """

    def __init__(self, config: Optional[GenerationConfig] = None, progress: Optional[ProgressCallback] = None):
        self.config = config or GenerationConfig()
        self.progress = progress
        self.state = GenerationState.IDLE
        self.result: Optional[GenerationResult] = None
        self.runs = 0

    @property
    def busy(self) -> bool:
        return self.state not in (GenerationState.IDLE, GenerationState.DONE)

    def _enter(self, state: GenerationState) -> None:
        log.debug(event="generation_state", state=state.value)
        self.state = state

    def steps(self, config: Optional[GenerationConfig] = None) -> Iterator[ProgressEvent]:
        if self.busy:
            raise GenerationInProgressError(self.state)
        if config is not None:
            self.config = config
        config = self.config
        seed = config.seed if config.seed is not None else random.randint(1, 1_000_000)
        self.result = None
        self.runs += 1
        self._enter(GenerationState.PLACING_ROOMS)
        finished = False
        try:
            rng = random.Random(seed)
            grid = SpatialGrid(config.grid_size)
            metrics = init_metrics()
            timer = _PhaseTimer(metrics)
            log.info(event="generation_start", seed=seed, mode=config.mode, size=config.grid_size)

            rooms: List[Room] = []
            for room in iter_place_rooms(grid, config.room_attempts, config.max_room_size, rng, flat=config.flat):
                rooms.append(room)
                yield ProgressEvent(GenerationState.PLACING_ROOMS, {"room": room, "index": len(rooms) - 1})
            metrics["rooms_attempted"] = config.room_attempts
            metrics["rooms_placed"] = len(rooms)
            metrics["rooms_rejected"] = config.room_attempts - len(rooms)
            timer.lap("place_rooms")

            self._enter(GenerationState.TRIANGULATING)
            try:
                edges = triangulate(vertices_for_rooms(rooms))
            except DegenerateInputError as e:
                log.info(event="degenerate_triangulation", vertices=e.vertex_count)
                edges = []
            metrics["triangulation_edges"] = len(edges)
            timer.lap("triangulate")
            yield ProgressEvent(GenerationState.TRIANGULATING, {"edges": edges})

            self._enter(GenerationState.BUILDING_TREE)
            selected: List[Edge] = []
            if edges:
                root = edges[0].u
                tree = minimum_spanning_tree(edges, root)
                unreached = unreached_vertices(edges, tree, root)
                if unreached:
                    log.warn(event="disconnected_graph", seed=seed, unreached=len(unreached))
                selected = add_loop_edges(edges, tree, rng, config.loop_chance)
                metrics["tree_edges"] = len(tree)
                metrics["loop_edges"] = len(selected) - len(tree)
                metrics["unreached_vertices"] = len(unreached)
            timer.lap("spanning_tree")
            yield ProgressEvent(GenerationState.BUILDING_TREE, {"selected_edges": selected})

            self._enter(GenerationState.PATHFINDING)
            policy = CostPolicy.for_mode(config.mode, config.stair_cost)
            finder = DungeonPathfinder(grid.size, allow_stairs=policy.allow_stairs)
            paths: List[List[Coord]] = []
            failed: List[Edge] = []
            # One connection at a time: each carved corridor lowers the cost of the next
            for edge in selected:
                start = edge.u.item.center_cell
                end = edge.v.item.center_cell
                path = finder.find_path(start, end, make_cost_function(grid, end, policy))
                if path is None:
                    failed.append(edge)
                    log.info(event="no_path_found", seed=seed, start=start, end=end)
                    continue
                carved = carve_path(grid, path)
                paths.append(path)
                metrics["stair_runs"] += sum(1 for a, b in zip(path, path[1:]) if a[VERTICAL_AXIS] != b[VERTICAL_AXIS])
                yield ProgressEvent(
                    GenerationState.PATHFINDING,
                    {"edge": edge, "path": path, "hallways": carved.hallways, "stairs": carved.stairs},
                )
            metrics["paths_carved"] = len(paths)
            metrics["paths_failed"] = len(failed)
            timer.lap("pathfinding")

            record_tile_counts(metrics, grid)
            timer.finish()
            result = GenerationResult(config, seed, grid, rooms, edges, selected, paths, failed, metrics)
            self.result = result
            self._enter(GenerationState.DONE)
            finished = True
            log.info(
                event="generation_done",
                seed=seed,
                rooms=len(rooms),
                paths=len(paths),
                failed=len(failed),
                runtime_ms=metrics["runtime_ms"],
            )
            yield ProgressEvent(GenerationState.DONE, {"result": result})
        finally:
            if not finished:
                log.warn(event="generation_abandoned", seed=seed, state=self.state.value)
                self.state = GenerationState.IDLE

    def generate(self, config: Optional[GenerationConfig] = None) -> GenerationResult:
        events = self.steps(config)
        try:
            for event in events:
                if self.progress is not None:
                    self.progress(event.stage, event.payload)
        finally:
            events.close()
        return self.result

    def regenerate(self) -> GenerationResult:
        """Run again with the retained config, discarding the previous result."""
        return self.generate()


def generate(config: Optional[GenerationConfig] = None, progress: Optional[ProgressCallback] = None) -> GenerationResult:
    return GenerationDriver(config, progress).generate()


__all__ = [
    "GenerationState",
    "ProgressEvent",
    "GenerationResult",
    "GenerationDriver",
    "generate",
]
