"""Corridor selection: Prim's minimum spanning tree plus random loop edges."""
import random
from typing import List, Sequence, Set

from .geometry import Edge, Vertex


def minimum_spanning_tree(edges: Sequence[Edge], start: Vertex) -> List[Edge]:
    """Prim's algorithm over ``edges`` weighted by Euclidean distance.

    Each round scans every edge for the cheapest one with exactly one endpoint
    in the closed set. Equal distances fall back to the smaller vertex index
    pair so the choice does not depend on edge order. Stops early (partial
    tree) when the graph is disconnected.
    """
    open_set: Set[Vertex] = set()
    for edge in edges:
        open_set.add(edge.u)
        open_set.add(edge.v)
    open_set.discard(start)
    closed: Set[Vertex] = {start}
    results: List[Edge] = []
    while open_set:
        chosen = None
        for edge in edges:
            if (edge.u in closed) == (edge.v in closed):
                continue
            if chosen is None or (edge.distance, edge.key()) < (chosen.distance, chosen.key()):
                chosen = edge
        if chosen is None:
            break
        results.append(chosen)
        reached = chosen.other(chosen.u if chosen.u in closed else chosen.v)
        open_set.discard(reached)
        closed.add(reached)
    return results


def unreached_vertices(edges: Sequence[Edge], tree: Sequence[Edge], start: Vertex) -> List[Vertex]:
    """Vertices touched by ``edges`` that the tree rooted at ``start`` never reached."""
    reached = {start}
    for edge in tree:
        reached.add(edge.u)
        reached.add(edge.v)
    seen = set()
    out = []
    for edge in edges:
        for v in (edge.u, edge.v):
            if v not in reached and v not in seen:
                seen.add(v)
                out.append(v)
    return sorted(out, key=lambda v: v.index)


def add_loop_edges(edges: Sequence[Edge], tree: Sequence[Edge], rng=None, chance: float = 0.125) -> List[Edge]:
    """Tree edges followed by each non-tree edge kept independently with probability ``chance``."""
    if rng is None:
        rng = random
    selected = list(tree)
    in_tree = set(tree)
    for edge in edges:
        if edge in in_tree:
            continue
        if rng.random() < chance:
            selected.append(edge)
    return selected


__all__ = ["minimum_spanning_tree", "unreached_vertices", "add_loop_edges"]
