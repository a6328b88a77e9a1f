"""A* corridor search with flat hallways and staircases.

A staircase move climbs or drops one level while running three cells
horizontally. The two middle cells on both levels form the staircase
footprint, so a stair needs a 2-long, 2-high clear run in its direction of
travel. Move legality and weights come from a caller-supplied cost function;
the search itself only knows the move set, the grid bounds, and that a path
must not walk back through its own cells or staircases.
"""
from __future__ import annotations

import heapq
import itertools
import math
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, NamedTuple, Optional, Tuple

from .cells import Coord, Size3D, add, clamp_unit, scale, sub
from .tiles import CellType

FLAT_MOVES: Tuple[Coord, ...] = ((1, 0, 0), (-1, 0, 0), (0, 0, 1), (0, 0, -1))
STAIR_MOVES: Tuple[Coord, ...] = (
    (3, 1, 0), (-3, 1, 0), (0, 1, 3), (0, 1, -3),
    (3, -1, 0), (-3, -1, 0), (0, -1, 3), (0, -1, -3),
)


class PathCost(NamedTuple):
    cost: float = 0.0
    traversable: bool = False
    is_stairs: bool = False


BLOCKED = PathCost()

CostFunction = Callable[[Coord, Coord], PathCost]


@dataclass(frozen=True)
class CostPolicy:
    """Per-cell penalties for flat moves plus the staircase base cost."""

    room_penalty: float
    empty_penalty: float
    hallway_penalty: float
    stair_cost: float = 100.0
    allow_stairs: bool = True

    @classmethod
    def for_mode(cls, mode: str, stair_cost: float = 100.0) -> "CostPolicy":
        if mode == "2d":
            return cls(room_penalty=10.0, empty_penalty=5.0, hallway_penalty=1.0, stair_cost=0.0, allow_stairs=False)
        return cls(room_penalty=5.0, empty_penalty=1.0, hallway_penalty=0.0, stair_cost=stair_cost)


def stair_footprint(origin: Coord, delta: Coord) -> Tuple[Coord, Coord, Coord, Coord]:
    """The four cells a staircase leaving ``origin`` along ``delta`` occupies."""
    horizontal = (clamp_unit(delta[0]), 0, clamp_unit(delta[2]))
    vertical = (0, delta[1], 0)
    upper = add(origin, vertical)
    return (
        add(origin, horizontal),
        add(origin, scale(horizontal, 2)),
        add(upper, horizontal),
        add(upper, scale(horizontal, 2)),
    )


def make_cost_function(grid, goal: Coord, policy: CostPolicy) -> CostFunction:
    """Build the reference cost function for one search towards ``goal``.

    Flat moves cost the straight-line distance to the goal plus a penalty for
    the cell entered; existing hallways are cheapest so later corridors reuse
    earlier ones. Stairs may not be entered sideways. A staircase is allowed
    only between empty/hallway cells and only when its whole footprint is in
    bounds and empty.
    """
    penalties = {
        CellType.ROOM: policy.room_penalty,
        CellType.EMPTY: policy.empty_penalty,
        CellType.HALLWAY: policy.hallway_penalty,
    }
    walkable = (CellType.EMPTY, CellType.HALLWAY)

    def cost(current: Coord, neighbor: Coord) -> PathCost:
        delta = sub(neighbor, current)
        heuristic = math.dist(neighbor, goal)
        if delta[1] == 0:
            cell = grid[neighbor]
            if cell is CellType.STAIRS:
                return BLOCKED
            return PathCost(heuristic + penalties[cell], True, False)
        if not policy.allow_stairs:
            return BLOCKED
        if grid[current] not in walkable or grid[neighbor] not in walkable:
            return BLOCKED
        for pos in stair_footprint(current, delta):
            if not grid.in_bounds(pos) or grid[pos] is not CellType.EMPTY:
                return BLOCKED
        return PathCost(policy.stair_cost + heuristic, True, True)

    return cost


class DungeonPathfinder:
    def __init__(self, size: Size3D, allow_stairs: bool = True):
        self.size = tuple(size)
        self.moves = FLAT_MOVES + STAIR_MOVES if allow_stairs else FLAT_MOVES

    def in_bounds(self, pos: Coord) -> bool:
        return all(0 <= pos[i] < self.size[i] for i in range(3))

    def find_path(self, start: Coord, end: Coord, cost_fn: CostFunction) -> Optional[List[Coord]]:
        """Cheapest path from ``start`` to ``end`` or None when the frontier runs dry."""
        start, end = tuple(start), tuple(end)
        if not (self.in_bounds(start) and self.in_bounds(end)):
            return None
        costs: Dict[Coord, float] = {start: 0.0}
        previous: Dict[Coord, Optional[Coord]] = {start: None}
        used: Dict[Coord, FrozenSet[Coord]] = {start: frozenset()}
        closed = set()
        counter = itertools.count()
        frontier = [(0.0, next(counter), start)]
        while frontier:
            node_cost, _, node = heapq.heappop(frontier)
            if node in closed or node_cost > costs[node]:
                continue
            if node == end:
                return self._reconstruct(previous, end)
            closed.add(node)
            history = used[node]
            for offset in self.moves:
                neighbor = add(node, offset)
                if not self.in_bounds(neighbor) or neighbor in closed or neighbor in history:
                    continue
                step = cost_fn(node, neighbor)
                if not step.traversable:
                    continue
                footprint: Tuple[Coord, ...] = ()
                if step.is_stairs:
                    footprint = stair_footprint(node, offset)
                    if any(pos in history for pos in footprint):
                        continue
                new_cost = costs[node] + step.cost
                if new_cost < costs.get(neighbor, math.inf):
                    costs[neighbor] = new_cost
                    previous[neighbor] = node
                    used[neighbor] = history.union((node,), footprint)
                    heapq.heappush(frontier, (new_cost, next(counter), neighbor))
        return None

    @staticmethod
    def _reconstruct(previous: Dict[Coord, Optional[Coord]], end: Coord) -> List[Coord]:
        path = []
        cur: Optional[Coord] = end
        while cur is not None:
            path.append(cur)
            cur = previous[cur]
        path.reverse()
        return path


class CarvedPath(NamedTuple):
    path: List[Coord]
    hallways: List[Coord]
    stairs: List[Coord]


def carve_path(grid, path: List[Coord]) -> CarvedPath:
    """Stamp ``path`` into ``grid``: empty cells become hallway, stair footprints become stairs.

    Only EMPTY cells are ever written, so rooms and earlier corridors survive.
    """
    hallways: List[Coord] = []
    stairs: List[Coord] = []
    for i, current in enumerate(path):
        if grid[current] is CellType.EMPTY:
            grid[current] = CellType.HALLWAY
            hallways.append(current)
        if i == 0:
            continue
        prev = path[i - 1]
        delta = sub(current, prev)
        if delta[1] != 0:
            for pos in stair_footprint(prev, delta):
                if grid[pos] is CellType.EMPTY:
                    grid[pos] = CellType.STAIRS
                    stairs.append(pos)
    return CarvedPath(path, hallways, stairs)


def is_valid_step(a: Coord, b: Coord) -> bool:
    """True when ``a -> b`` is one flat or staircase move."""
    return sub(b, a) in FLAT_MOVES or sub(b, a) in STAIR_MOVES


__all__ = [
    "PathCost",
    "CostPolicy",
    "DungeonPathfinder",
    "make_cost_function",
    "stair_footprint",
    "carve_path",
    "CarvedPath",
    "is_valid_step",
    "FLAT_MOVES",
    "STAIR_MOVES",
]
