import pytest

from labyrinth.dungeon import BoundsError, CellType, ConfigurationError, SpatialGrid
from labyrinth.dungeon.tiles import CHARS, char_for


def test_new_grid_is_empty():
    grid = SpatialGrid((4, 2, 3))
    assert grid.size == (4, 2, 3)
    assert grid.count(CellType.EMPTY) == 24
    assert list(grid.items()) == []


def test_set_and_get_round_trip():
    grid = SpatialGrid((4, 2, 3))
    grid[(1, 1, 2)] = CellType.ROOM
    grid.set((0, 0, 0), "hallway")
    assert grid[(1, 1, 2)] is CellType.ROOM
    assert grid.get((0, 0, 0)) is CellType.HALLWAY
    assert dict(grid.items()) == {(0, 0, 0): CellType.HALLWAY, (1, 1, 2): CellType.ROOM}


@pytest.mark.parametrize("pos", [(-1, 0, 0), (4, 0, 0), (0, 2, 0), (0, 0, 3)])
def test_out_of_bounds_access_raises(pos):
    grid = SpatialGrid((4, 2, 3))
    assert not grid.in_bounds(pos)
    with pytest.raises(BoundsError):
        grid[pos]
    with pytest.raises(BoundsError):
        grid[pos] = CellType.ROOM


def test_offset_shifts_extent():
    grid = SpatialGrid((2, 2, 2), offset=(-1, 0, 5))
    assert grid.in_bounds((-1, 0, 5))
    assert grid.in_bounds((0, 1, 6))
    assert not grid.in_bounds((1, 0, 5))
    grid[(-1, 1, 6)] = CellType.STAIRS
    assert list(grid.items()) == [((-1, 1, 6), CellType.STAIRS)]


def test_bounds_error_is_index_error():
    grid = SpatialGrid((1, 1, 1))
    with pytest.raises(IndexError):
        grid[(3, 3, 3)]


@pytest.mark.parametrize("size", [(0, 1, 1), (1, -2, 1)])
def test_invalid_size_rejected(size):
    with pytest.raises(ConfigurationError):
        SpatialGrid(size)


def test_counts_and_layer():
    grid = SpatialGrid((3, 2, 2))
    grid[(0, 0, 0)] = CellType.ROOM
    grid[(1, 0, 0)] = CellType.HALLWAY
    grid[(2, 0, 1)] = CellType.STAIRS
    counts = grid.counts()
    assert counts[CellType.ROOM] == 1
    assert counts[CellType.HALLWAY] == 1
    assert counts[CellType.STAIRS] == 1
    assert counts[CellType.EMPTY] == 9
    assert grid.layer(0) == ["RH.", "..S"]
    assert grid.layer(1) == ["...", "..."]
    with pytest.raises(BoundsError):
        grid.layer(2)


def test_every_cell_type_has_a_distinct_glyph():
    glyphs = [char_for(cell) for cell in CellType]
    assert set(CHARS) == set(CellType)
    assert len(set(glyphs)) == len(glyphs)
    assert all(len(g) == 1 for g in glyphs)
