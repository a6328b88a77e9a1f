"""Delaunay candidate edges over room centres.

The centres are first reduced to their affine span (SVD): a full 3D cloud is
tetrahedralised, a coplanar one (every flat layout) is triangulated in its
plane, and collinear or coincident centres become a simple chain. Qhull runs
with joggled input (``QJ``) because room centres sit on a half-integer
lattice, so co-spherical quadruples are the norm. The result is only a
source of candidate corridors for the spanning tree, never geometry.
"""
from __future__ import annotations

from itertools import combinations
from typing import List, Sequence, Set, Tuple

import numpy as np
from scipy.spatial import Delaunay

from .errors import DegenerateInputError
from .geometry import Edge, Vertex

_SPAN_TOL = 1e-9


def _affine_basis(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Centred coordinates and the orthonormal directions they actually span."""
    centred = points - points.mean(axis=0)
    _, sv, vt = np.linalg.svd(centred, full_matrices=False)
    tol = _SPAN_TOL * max(1.0, float(np.abs(centred).max(initial=0.0)))
    rank = int((sv > tol).sum())
    return centred, vt[:rank]


def _chain(order: Sequence[int]) -> Set[Tuple[int, int]]:
    return {(min(a, b), max(a, b)) for a, b in zip(order, order[1:])}


def _simplex_pairs(local: np.ndarray) -> Set[Tuple[int, int]]:
    tri = Delaunay(local, qhull_options="QJ")
    pairs = set()
    for simplex in tri.simplices:
        for a, b in combinations(sorted(int(i) for i in simplex), 2):
            pairs.add((a, b))
    return pairs


def triangulate(vertices: Sequence[Vertex]) -> List[Edge]:
    """Return the unique undirected edges of a Delaunay triangulation of ``vertices``.

    Raises DegenerateInputError for fewer than two vertices.
    """
    if len(vertices) < 2:
        raise DegenerateInputError(len(vertices))
    points = np.array([v.position for v in vertices], dtype=float)
    centred, basis = _affine_basis(points)
    if len(basis) == 0:
        pairs = _chain(range(len(vertices)))
    elif len(basis) == 1:
        coords = centred @ basis[0]
        pairs = _chain(sorted(range(len(vertices)), key=lambda i: (coords[i], i)))
    else:
        pairs = _simplex_pairs(centred @ basis.T)
    return [Edge(vertices[a], vertices[b]) for a, b in sorted(pairs)]


__all__ = ["triangulate"]
