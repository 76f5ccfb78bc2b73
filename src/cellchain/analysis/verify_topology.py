"""
Topology Verification Functions
===============================

Verify structural properties of chain operators and solid meshes.

These functions are in analysis/ layer because they depend on operators.
All verify_* functions return a dict; assert_* variants raise ValueError.
"""

from collections import Counter
from typing import Dict

import numpy as np
from scipy import sparse


def verify_boundary_1(b1) -> Dict:
    """
    Verify the signed edge boundary ∂₁ (V, E).

    PROPERTY:
        Every column has exactly one -1 and one +1 and nothing else.

    Returns:
        dict with 'valid', 'n_edges', 'bad_edges'
    """
    coo = sparse.coo_matrix(b1)
    n_edges = coo.shape[1]
    nz = coo.data != 0
    neg = np.bincount(coo.col[coo.data == -1], minlength=n_edges)
    pos = np.bincount(coo.col[coo.data == 1], minlength=n_edges)
    total = np.bincount(coo.col[nz], minlength=n_edges)

    bad = np.flatnonzero((neg != 1) | (pos != 1) | (total != 2))
    return {
        'valid': len(bad) == 0,
        'n_edges': n_edges,
        'bad_edges': bad.tolist(),
    }


def verify_face_cycles(b1, cob2) -> Dict:
    """
    Verify that every row of the signed coboundary δ₁ (F, E) is a cycle.

    PROPERTY:
        ∂₁ δ₁[f]ᵀ = 0 for every face f (closed walk).

    NOTE:
        Row sums are reported too. They vanish when a face has as many
        forward as backward edges (e.g. every square of build_cube), but
        NOT in general: a triangle can be +1, +1, -1.

    Returns:
        dict with 'valid', 'open_faces', 'row_sums'
    """
    cob2 = sparse.csr_matrix(cob2)
    boundary = (sparse.csr_matrix(b1).astype(np.int32) @ cob2.T.astype(np.int32)).tocsc()
    boundary.eliminate_zeros()
    open_faces = np.flatnonzero(np.diff(boundary.indptr) > 0)
    row_sums = np.asarray(cob2.astype(np.int32).sum(axis=1)).ravel()

    return {
        'valid': len(open_faces) == 0,
        'open_faces': open_faces.tolist(),
        'row_sums': row_sums.tolist(),
    }


def verify_exactness(b1, cob2) -> Dict:
    """
    Verify ∂₁ ∂₂ = 0 with ∂₂ = δ₁ᵀ.

    Args:
        b1: (V, E) signed edge boundary
        cob2: (F, E) signed face coboundary

    Returns:
        dict with 'exact', 'nnz', 'norm'
    """
    prod = sparse.csr_matrix(b1).astype(np.int32) @ sparse.csr_matrix(cob2).T.astype(np.int32)
    prod = sparse.csr_matrix(prod)
    prod.eliminate_zeros()
    return {
        'exact': prod.nnz == 0,
        'nnz': int(prod.nnz),
        'norm': float(np.sqrt((prod.data.astype(float)**2).sum())),
    }


def assert_exactness(b1, cob2, context: str = "") -> None:
    """
    Fail-fast version of verify_exactness.

    Raises:
        ValueError: if ∂₁∂₂ != 0
    """
    result = verify_exactness(b1, cob2)
    if not result['exact']:
        ctx = f" [{context}]" if context else ""
        raise ValueError(
            f"Exactness failed{ctx}: ∂₁∂₂ has {result['nnz']} nonzero entries, "
            f"norm = {result['norm']}"
        )


def verify_closed_mesh(triangles) -> Dict:
    """
    Verify that a triangle mesh is closed and consistently wound.

    PROPERTIES:
        closed     : every undirected edge is used by exactly 2 triangles
        consistent : every directed edge (u, v) appears once and (v, u)
                     appears once (neighbours have opposite winding)
        euler      : χ = V - E + F (2 for a sphere-like boundary)

    Returns:
        dict with 'closed', 'consistent', 'n_vertices', 'n_edges',
        'n_faces', 'euler'
    """
    tris = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)

    directed = Counter()
    for a, b, c in tris.tolist():
        for u, v in ((a, b), (b, c), (c, a)):
            directed[(u, v)] += 1

    undirected = Counter()
    for (u, v), count in directed.items():
        undirected[(min(u, v), max(u, v))] += count

    closed = all(count == 2 for count in undirected.values())
    consistent = all(count == 1 and directed.get((v, u), 0) == 1
                     for (u, v), count in directed.items())

    n_v = len(np.unique(tris))
    n_e = len(undirected)
    n_f = len(tris)
    return {
        'closed': closed,
        'consistent': consistent,
        'n_vertices': n_v,
        'n_edges': n_e,
        'n_faces': n_f,
        'euler': n_v - n_e + n_f,
    }
