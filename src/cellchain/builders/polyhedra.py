"""
Generic Polyhedra Construction
==============================

Small closed convex polyhedra in LAR form, for operator and
triangulation checks.

POLYHEDRA INCLUDED:
    - Cube (V=8, E=12, F=6)
    - Tetrahedron (V=4, E=6, F=4)
    - Square pyramid (V=5, E=8, F=5)

All builders return (V, EV, FV, CV):
    V  : (N, 3) float array
    EV : list of edges [i, j] with i < j
    FV : list of faces as vertex SETS (sorted lists, no cyclic order)
    CV : list with the single solid
"""

import numpy as np
from itertools import combinations
from typing import List, Tuple

from ..spec.constants import EPS_CLOSE
from ..spec.structures import Cells


def build_cube(size: float = 1.0) -> Tuple[np.ndarray, Cells, Cells, Cells]:
    """
    Build an axis-aligned cube with a corner at the origin.

    TOPOLOGY:
        V = 8 vertices (corners of cube)
        E = 12 edges
        F = 6 faces (squares)
        χ = V - E + F = 8 - 12 + 6 = 2

    Vertex k sits at size * (bit2(k), bit1(k), bit0(k)), so faces come out
    in the order x=0, x=size, y=0, y=size, z=0, z=size.

    Returns:
        vertices: (8, 3) array
        edges: list of 12 edges
        faces: list of 6 faces
        cells: [[0, ..., 7]]
    """
    if size <= 0:
        raise ValueError(f"Cube size must be positive, got {size}")

    vertices = []
    for x in [0.0, size]:
        for y in [0.0, size]:
            for z in [0.0, size]:
                vertices.append((x, y, z))
    vertices_arr = np.array(vertices, dtype=float)

    # Edges: distance = size (between adjacent corners)
    edges = []
    for i, j in combinations(range(8), 2):
        d2 = np.sum((vertices_arr[i] - vertices_arr[j])**2)
        if abs(d2 - size**2) < EPS_CLOSE:
            edges.append([i, j])

    # 6 faces (squares at 0 or size on each axis)
    faces = []
    for axis in range(3):
        for side in [0.0, size]:
            faces.append([i for i, v in enumerate(vertices) if v[axis] == side])

    if len(vertices) != 8:
        raise ValueError(f"Expected 8 vertices, got {len(vertices)}")
    if len(edges) != 12:
        raise ValueError(f"Expected 12 edges, got {len(edges)}")
    if len(faces) != 6 or any(len(f) != 4 for f in faces):
        raise ValueError(f"Expected 6 square faces, got {faces}")

    return vertices_arr, edges, faces, [list(range(8))]


def build_tetrahedron() -> Tuple[np.ndarray, Cells, Cells, Cells]:
    """
    Build the corner tetrahedron (origin + unit axis points).

    TOPOLOGY:
        V = 4, E = 6, F = 4 (triangles)
        χ = 4 - 6 + 4 = 2

    Returns:
        vertices, edges, faces, cells (LAR form)
    """
    vertices_arr = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ])
    edges = [list(e) for e in combinations(range(4), 2)]
    faces = [list(f) for f in combinations(range(4), 3)]
    return vertices_arr, edges, faces, [list(range(4))]


def build_square_pyramid(height: float = 1.0) -> Tuple[np.ndarray, Cells, Cells, Cells]:
    """
    Build a pyramid over the unit square (mixed quad + triangle faces).

    TOPOLOGY:
        V = 5, E = 8, F = 5 (1 square + 4 triangles)
        χ = 5 - 8 + 5 = 2

    Returns:
        vertices, edges, faces, cells (LAR form)
    """
    if height <= 0:
        raise ValueError(f"Pyramid height must be positive, got {height}")

    vertices_arr = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.5, 0.5, height],
    ])
    base = [[0, 1], [1, 2], [2, 3], [0, 3]]
    sides = [[i, 4] for i in range(4)]
    edges: List[List[int]] = base + sides
    faces = [[0, 1, 2, 3]] + [sorted([a, b, 4]) for a, b in base]

    if len(edges) != 8:
        raise ValueError(f"Expected 8 edges, got {len(edges)}")
    if len(faces) != 5:
        raise ValueError(f"Expected 5 faces, got {len(faces)}")

    return vertices_arr, edges, faces, [list(range(5))]
