import random
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from .cells import VERTICAL_AXIS, Coord, Size3D, Vec3
from .tiles import CellType


@dataclass(frozen=True)
class Room:
    location: Coord
    size: Size3D

    def __post_init__(self):
        if any(s < 1 for s in self.size):
            raise ValueError(f"room size must be at least 1 on every axis, got {self.size}")

    @property
    def end(self) -> Coord:
        """Exclusive upper corner."""
        return (
            self.location[0] + self.size[0],
            self.location[1] + self.size[1],
            self.location[2] + self.size[2],
        )

    def cells(self) -> Iterator[Coord]:
        lx, ly, lz = self.location
        ex, ey, ez = self.end
        for ix in range(lx, ex):
            for iy in range(ly, ey):
                for iz in range(lz, ez):
                    yield ix, iy, iz

    @property
    def center(self) -> Vec3:
        return (
            self.location[0] + self.size[0] / 2,
            self.location[1] + self.size[1] / 2,
            self.location[2] + self.size[2] / 2,
        )

    @property
    def center_cell(self) -> Coord:
        cx, cy, cz = self.center
        return (int(cx), int(cy), int(cz))

    def intersects(self, other: "Room") -> bool:
        a0, a1 = self.location, self.end
        b0, b1 = other.location, other.end
        return all(a0[i] < b1[i] and b0[i] < a1[i] for i in range(3))

    def buffered(self, margin: int = 1) -> "Room":
        """Room grown by ``margin`` on both horizontal faces; the vertical axis is left alone."""
        return Room(
            (self.location[0] - margin, self.location[1], self.location[2] - margin),
            (self.size[0] + 2 * margin, self.size[1], self.size[2] + 2 * margin),
        )

    def to_dict(self):
        return {"location": list(self.location), "size": list(self.size), "center": list(self.center)}


def _fits(room: Room, grid_size: Size3D, flat: bool) -> bool:
    end = room.end
    for axis in range(3):
        if room.location[axis] < 0:
            return False
        if flat and axis == VERTICAL_AXIS:
            if end[axis] > grid_size[axis]:
                return False
        elif end[axis] >= grid_size[axis]:
            return False
    return True


def _draw_candidate(rng, grid_size: Size3D, max_size: Size3D) -> Room:
    location = (rng.randrange(0, grid_size[0]), rng.randrange(0, grid_size[1]), rng.randrange(0, grid_size[2]))
    size = (rng.randint(1, max_size[0]), rng.randint(1, max_size[1]), rng.randint(1, max_size[2]))
    return Room(location, size)


def iter_place_rooms(grid, attempts: int, max_size: Size3D, rng=None, flat: bool = False) -> Iterator[Room]:
    """Rejection-sample up to ``attempts`` rooms, stamping and yielding each accepted one.

    A candidate is dropped when its buffered box touches an accepted room or
    when its own box does not fit the grid. There is no retry; a crowded grid
    simply yields fewer rooms.
    """
    if rng is None:
        rng = random
    grid_size = grid.size
    accepted: List[Room] = []
    for _ in range(attempts):
        room = _draw_candidate(rng, grid_size, max_size)
        buffer = room.buffered()
        if any(r.intersects(buffer) for r in accepted):
            continue
        if not _fits(room, grid_size, flat):
            continue
        accepted.append(room)
        for pos in room.cells():
            grid[pos] = CellType.ROOM
        yield room


def place_rooms(grid, attempts: int, max_size: Size3D, rng=None, flat: bool = False) -> List[Room]:
    return list(iter_place_rooms(grid, attempts, max_size, rng, flat))


def rooms_overlap(rooms: List[Room]) -> List[Tuple[Room, Room]]:
    """Pairs of rooms whose boxes intersect (diagnostic helper; empty for placed layouts)."""
    out = []
    for i, a in enumerate(rooms):
        for b in rooms[i + 1:]:
            if a.intersects(b):
                out.append((a, b))
    return out
