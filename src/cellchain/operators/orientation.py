"""
Face Cycle Orientation
======================

Recover a signed coboundary δ₁: C₁ → C₂ from UNSIGNED face-edge incidence.

No coordinates are used: every face is oriented by walking its edges.

ALGORITHM (per face):
    1. Seed with the smallest edge id of the face, sign +1,
       tail = first listed vertex, head = second.
    2. From the current head, the next edge is the UNIQUE unplaced face
       edge incident to that vertex. Zero or several candidates means the
       face is not a simple closed polygon (non-manifold, disconnected):
       fail fast.
    3. If the next edge's natural tail is the current head, keep sign +1.
       Otherwise it is listed backwards: swap tail/head, sign -1.
    4. When all face edges are placed, the last head must equal the first
       tail (closed walk).

INVARIANT (closed walk):
    cycle[k].head == cycle[(k+1) % n].tail   for all k

CONSEQUENCES:
    - Every row of δ₁ is a 1-cycle: ∂₁ δ₁ᵀ = 0 (∂∂ = 0).
    - Orientation of each face is arbitrary but internally consistent.
      The seed is deterministic (smallest id), so repeated runs agree.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
from scipy import sparse

from ..spec.constants import INCIDENCE_DTYPE
from ..spec.errors import InconsistentCycleError
from ..spec.structures import Cells, ChainOp
from .incidence import (
    infer_n_vertices,
    build_boundary_1,
    build_unsigned_coboundary_2,
    check_edges,
    incidence_sets,
)


@dataclass(frozen=True)
class OrientedEdge:
    """One step of an oriented face cycle."""
    sign: int
    edge: int
    tail: int
    head: int


def vertex_edge_map(edges: Cells) -> Dict[int, Set[int]]:
    """Map each vertex to the set of edges incident to it."""
    vertex_edges = defaultdict(set)
    for e_idx, edge in enumerate(edges):
        for v in edge:
            vertex_edges[int(v)].add(e_idx)
    return dict(vertex_edges)


def orient_face(face: int,
                face_edges: Sequence[int],
                edges: Cells,
                vertex_edges: Dict[int, Set[int]]) -> List[OrientedEdge]:
    """
    Walk the edges of one face into an oriented closed cycle.

    Args:
        face: face id (only used for error context)
        face_edges: unordered ids of the edges bounding the face
        edges: global edge list, each [tail, head]
        vertex_edges: vertex -> incident edge ids (see vertex_edge_map)

    Returns:
        cycle: list of OrientedEdge, len(cycle) == len(face_edges)

    Raises:
        InconsistentCycleError: if the edges do not form ONE closed walk
    """
    remaining = {int(e) for e in face_edges}
    if not remaining:
        raise InconsistentCycleError(f"Face {face} has no boundary edges", cell=face)

    seed = min(remaining)
    remaining.discard(seed)
    cycle = [OrientedEdge(+1, seed, int(edges[seed][0]), int(edges[seed][1]))]

    while remaining:
        pivot = cycle[-1].head
        candidates = remaining & vertex_edges.get(pivot, set())
        if len(candidates) != 1:
            raise InconsistentCycleError(
                f"Face {face}: {len(candidates)} unplaced edges leave vertex {pivot}, "
                f"expected exactly 1 (face boundary is not a simple closed walk)",
                cell=face,
            )
        nxt = candidates.pop()
        remaining.discard(nxt)

        tail, head = int(edges[nxt][0]), int(edges[nxt][1])
        if tail == pivot:
            cycle.append(OrientedEdge(+1, nxt, tail, head))
        else:
            # Listed backwards relative to the walk
            cycle.append(OrientedEdge(-1, nxt, head, tail))

    if cycle[-1].head != cycle[0].tail:
        raise InconsistentCycleError(
            f"Face {face}: walk ends at vertex {cycle[-1].head} "
            f"but started at {cycle[0].tail} (open boundary)",
            cell=face,
        )
    return cycle


def orient_coboundary_2(fe, edges: Cells) -> ChainOp:
    """
    Sign an unsigned face-edge operator by orienting every face cycle.

    Args:
        fe: (F, E) unsigned face-edge incidence (any scipy.sparse / dense)
        edges: list of E edges, each [tail, head]

    Returns:
        cob2: (F, E) signed CSR matrix, row f = oriented cycle of face f

    Raises:
        IndexError: if fe does not have one column per edge
        MalformedCellError: if an edge is degenerate
        InconsistentCycleError: if a face is not a single closed walk
    """
    check_edges(edges)
    fe = sparse.csr_matrix(fe)
    if fe.shape[1] != len(edges):
        raise IndexError(
            f"Face-edge operator has {fe.shape[1]} columns but {len(edges)} edges were given"
        )

    vertex_edges = vertex_edge_map(edges)
    rows, cols, vals = [], [], []
    for f_idx, face_edges in enumerate(incidence_sets(fe)):
        for step in orient_face(f_idx, face_edges, edges, vertex_edges):
            rows.append(f_idx)
            cols.append(step.edge)
            vals.append(step.sign)

    return sparse.csr_matrix(
        (np.asarray(vals, dtype=INCIDENCE_DTYPE),
         (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))),
        shape=fe.shape,
    )


def build_coboundary_2(faces: Cells, edges: Cells, n_vertices: Optional[int] = None) -> ChainOp:
    """
    Build the signed coboundary δ₁: C₁ → C₂ from face and edge cells.

    Returns:
        cob2: (F, E) CSR matrix, rows are faces as oriented cycles of edges
    """
    u2 = build_unsigned_coboundary_2(faces, edges, n_vertices)
    return orient_coboundary_2(u2, edges)


def build_boundary_2(faces: Cells, edges: Cells, n_vertices: Optional[int] = None) -> ChainOp:
    """Signed ∂₂: C₂ → C₁, the (E, F) transpose of build_coboundary_2."""
    return build_coboundary_2(faces, edges, n_vertices).T.tocsr()


def build_chain_operators(faces: Cells, edges: Cells,
                          n_vertices: Optional[int] = None) -> Tuple[ChainOp, ChainOp]:
    """
    Build both signed boundaries ∂₁ and ∂₂ of a 2-complex.

    EXACTNESS THEOREM:
        ∂₁ ∂₂ = 0

    Proof: (∂₁∂₂)[v, f] sums the endpoint coefficients of the oriented
           cycle of f at v. A closed walk enters and leaves v equally often.

    Returns:
        b1: (V, E) signed edge boundary
        b2: (E, F) signed face boundary

    Raises:
        ValueError: if exactness fails
    """
    if n_vertices is None:
        n_vertices = infer_n_vertices(faces, edges)
    b1 = build_boundary_1(edges, n_vertices)
    b2 = build_boundary_2(faces, edges, n_vertices)

    b1b2 = (b1.astype(np.int32) @ b2.astype(np.int32))
    if b1b2.count_nonzero():
        raise ValueError(f"Exactness failed: ∂₁∂₂ has {b1b2.count_nonzero()} nonzero entries")

    return b1, b2


def cycle_from_row(edge_ids: Sequence[int], signs: Sequence[int],
                   edges: Cells) -> List[Tuple[int, int]]:
    """
    Directed (tail, head) vertex pairs of a signed operator row.

    Edge e with sign +1 runs edges[e][0] → edges[e][1]; sign -1 reverses it.
    """
    directed = []
    for e_idx, sign in zip(edge_ids, signs):
        a, b = int(edges[e_idx][0]), int(edges[e_idx][1])
        directed.append((a, b) if sign > 0 else (b, a))
    return directed


def row_is_cycle(edge_ids: Sequence[int], signs: Sequence[int], edges: Cells) -> bool:
    """
    True if the signed chain Σ sᵢ eᵢ has zero boundary.

    Every vertex must be entered as often as it is left.
    """
    balance = defaultdict(int)
    for tail, head in cycle_from_row(edge_ids, signs, edges):
        balance[tail] -= 1
        balance[head] += 1
    return all(v == 0 for v in balance.values())
