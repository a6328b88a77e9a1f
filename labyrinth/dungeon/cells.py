from typing import Tuple

Coord = Tuple[int, int, int]
Size3D = Tuple[int, int, int]
Vec3 = Tuple[float, float, float]

VERTICAL_AXIS = 1


def add(a: Coord, b: Coord) -> Coord:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Coord, b: Coord) -> Coord:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(a: Coord, k: int) -> Coord:
    return (a[0] * k, a[1] * k, a[2] * k)


def clamp_unit(n: int) -> int:
    return max(-1, min(1, n))


def as_triple(value, field: str = "value") -> Tuple[int, int, int]:
    """Coerce a 3-element sequence (or 'x,y,z' string) to an int triple.

    Raises ValueError on anything else; callers wrap it with their own error type.
    """
    if isinstance(value, str):
        value = [p for p in value.replace("x", ",").split(",") if p.strip()]
    try:
        items = list(value)
    except TypeError:
        raise ValueError(f"{field} must be a sequence of three integers") from None
    if len(items) != 3:
        raise ValueError(f"{field} must have exactly three components")
    out = []
    for item in items:
        if isinstance(item, bool):
            raise ValueError(f"{field} components must be integers")
        if isinstance(item, float) and not item.is_integer():
            raise ValueError(f"{field} components must be integers")
        out.append(int(item))
    return (out[0], out[1], out[2])
