from enum import Enum

class CellType(str, Enum):
    """Occupancy classification stored per grid coordinate."""

    EMPTY = "empty"
    ROOM = "room"
    HALLWAY = "hallway"
    STAIRS = "stairs"

# Single-character glyphs for text dumps of a grid layer
CHARS = {
    CellType.EMPTY: ".",
    CellType.ROOM: "R",
    CellType.HALLWAY: "H",
    CellType.STAIRS: "S",
}

def char_for(cell: CellType) -> str:
    return CHARS[cell]


__all__ = ["CellType", "CHARS", "char_for"]
