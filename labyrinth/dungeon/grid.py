"""Bounded 3D occupancy grid.

Dense nested-list storage indexed ``[x][y][z]`` relative to a fixed origin
offset. Every read and write is bounds-checked; callers that look outside the
extent must ask ``in_bounds`` first.
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

from .cells import Coord, Size3D
from .errors import BoundsError, ConfigurationError
from .tiles import CellType, char_for


class SpatialGrid:
    __slots__ = ("size", "offset", "_cells")

    def __init__(self, size: Size3D, offset: Coord = (0, 0, 0)):
        if len(size) != 3 or any(int(s) < 1 for s in size):
            raise ConfigurationError(f"grid size must be three positive integers, got {tuple(size)}", "grid_size")
        self.size: Size3D = (int(size[0]), int(size[1]), int(size[2]))
        self.offset: Coord = (int(offset[0]), int(offset[1]), int(offset[2]))
        sx, sy, sz = self.size
        self._cells = [[[CellType.EMPTY for _ in range(sz)] for _ in range(sy)] for _ in range(sx)]

    def in_bounds(self, pos: Coord) -> bool:
        ox, oy, oz = self.offset
        sx, sy, sz = self.size
        return ox <= pos[0] < ox + sx and oy <= pos[1] < oy + sy and oz <= pos[2] < oz + sz

    def _index(self, pos: Coord) -> Tuple[int, int, int]:
        if not self.in_bounds(pos):
            raise BoundsError(pos, self.offset, self.size)
        return pos[0] - self.offset[0], pos[1] - self.offset[1], pos[2] - self.offset[2]

    def get(self, pos: Coord) -> CellType:
        x, y, z = self._index(pos)
        return self._cells[x][y][z]

    def set(self, pos: Coord, cell: CellType) -> None:
        x, y, z = self._index(pos)
        self._cells[x][y][z] = CellType(cell)

    __getitem__ = get
    __setitem__ = set

    def items(self, include_empty: bool = False) -> Iterator[Tuple[Coord, CellType]]:
        """Yield (coord, cell) pairs in x, y, z order, skipping EMPTY unless asked."""
        ox, oy, oz = self.offset
        for ix, plane in enumerate(self._cells):
            for iy, column in enumerate(plane):
                for iz, cell in enumerate(column):
                    if include_empty or cell is not CellType.EMPTY:
                        yield (ix + ox, iy + oy, iz + oz), cell

    def count(self, cell: CellType) -> int:
        return sum(1 for plane in self._cells for column in plane for c in column if c is cell)

    def counts(self) -> Dict[CellType, int]:
        out = {t: 0 for t in CellType}
        for plane in self._cells:
            for column in plane:
                for c in column:
                    out[c] += 1
        return out

    def layer(self, y: int) -> List[str]:
        """Return one horizontal slice as text rows (one row per z, one char per x)."""
        if not self.offset[1] <= y < self.offset[1] + self.size[1]:
            raise BoundsError((self.offset[0], y, self.offset[2]), self.offset, self.size)
        iy = y - self.offset[1]
        sx, _, sz = self.size
        return ["".join(char_for(self._cells[ix][iy][iz]) for ix in range(sx)) for iz in range(sz)]

    def __repr__(self) -> str:
        return f"SpatialGrid(size={self.size}, offset={self.offset})"
