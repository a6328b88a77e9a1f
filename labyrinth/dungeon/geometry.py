"""Graph primitives shared by triangulation and the spanning tree.

Vertices compare by identity (two rooms can share a centre and still be two
vertices). Edges are unordered: ``Edge(u, v) == Edge(v, u)``, which is what
lets "all edges minus tree edges" work as a plain set difference.
"""
from __future__ import annotations

import math
from typing import Any, Optional, Sequence, Tuple

from .cells import Vec3


class Vertex:
    __slots__ = ("position", "item", "index")

    def __init__(self, position: Sequence[float], item: Any = None, index: int = 0):
        self.position: Vec3 = (float(position[0]), float(position[1]), float(position[2]))
        self.item = item
        self.index = index

    def __repr__(self) -> str:
        return f"Vertex(#{self.index} {self.position})"


class Edge:
    __slots__ = ("u", "v", "distance")

    def __init__(self, u: Vertex, v: Vertex):
        self.u = u
        self.v = v
        self.distance = math.dist(u.position, v.position)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return (self.u is other.u and self.v is other.v) or (self.u is other.v and self.v is other.u)

    def __hash__(self) -> int:
        return hash(self.u) ^ hash(self.v)

    def key(self) -> Tuple[int, int]:
        """Index pair, smaller first; used for deterministic ordering."""
        a, b = self.u.index, self.v.index
        return (a, b) if a <= b else (b, a)

    def other(self, vertex: Vertex) -> Optional[Vertex]:
        if vertex is self.u:
            return self.v
        if vertex is self.v:
            return self.u
        return None

    def __repr__(self) -> str:
        return f"Edge({self.u.index}-{self.v.index}, d={self.distance:.2f})"


def vertices_for_rooms(rooms) -> list:
    """One vertex per room, positioned at the room's (float) centre."""
    return [Vertex(room.center, room, i) for i, room in enumerate(rooms)]
