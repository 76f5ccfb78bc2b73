"""
Incidence and Boundary Operators
================================

Pure combinatorics - NO coordinates needed.

DEFINITIONS:
    M_p : (n_p, V)   unsigned cell-vertex incidence ("characteristic matrix")
    ∂₁  : (V, E)     signed edge boundary, -1 at tail, +1 at head
    U₂  : (F, E)     unsigned face-edge coboundary
                     U₂[f, e] = 1  iff  both endpoints of e lie in f

CONSTRUCTION OF U₂:
    (M_F M_Eᵀ)[f, e] = |f ∩ e| ∈ {0, 1, 2}
    The value 2 means the whole edge lies on the face. For simple polygonal
    faces this is necessary and sufficient for "e is on the boundary of f".

STORAGE:
    scipy.sparse CSR, dtype INCIDENCE_DTYPE (int8).
    O(nnz) memory, row queries via indptr/indices.
"""

from typing import List, Optional, Sequence

import numpy as np
from scipy import sparse

from ..spec.constants import INCIDENCE_DTYPE
from ..spec.errors import MalformedCellError
from ..spec.structures import Cells, ChainOp


def infer_n_vertices(*cell_lists: Cells) -> int:
    """Largest referenced vertex index + 1 (isolated trailing vertices are missed)."""
    n = 0
    for cells in cell_lists:
        for cell in cells:
            if len(cell):
                n = max(n, int(max(cell)) + 1)
    return n


def check_edges(edges: Cells) -> None:
    """
    Fail-fast check that every edge lists exactly 2 DISTINCT vertices.

    A degenerate edge such as [3, 3] would otherwise collapse to a single
    incidence entry and silently produce a broken boundary column.

    Raises:
        MalformedCellError: naming the first offending edge
    """
    for e_idx, edge in enumerate(edges):
        if len(edge) != 2 or edge[0] == edge[1]:
            raise MalformedCellError(
                f"Edge {e_idx} must have exactly 2 distinct vertices, got {list(edge)}",
                cell=e_idx,
            )


def build_incidence(cells: Cells, n_vertices: Optional[int] = None) -> ChainOp:
    """
    Build the unsigned cell-vertex incidence operator M.

    DEFINITION:
        M[c, v] = 1 if vertex v is a member of cell c
        M[c, v] = 0 otherwise

    Args:
        cells: list of p-cells, each a non-empty collection of vertex indices
        n_vertices: number of columns; inferred as max index + 1 if None

    Returns:
        M: (len(cells), n_vertices) CSR matrix, rows and columns in input order

    Raises:
        MalformedCellError: if a cell is empty
        IndexError: if a vertex index is negative or >= n_vertices

    NOTE:
        Cells are sets: a vertex listed twice still gives a single 1.
    """
    rows: List[int] = []
    cols: List[int] = []
    for c_idx, cell in enumerate(cells):
        verts = sorted({int(v) for v in cell})
        if not verts:
            raise MalformedCellError(f"Cell {c_idx} is empty", cell=c_idx)
        rows.extend([c_idx] * len(verts))
        cols.extend(verts)

    if n_vertices is None:
        n_vertices = max(cols) + 1 if cols else 0

    rows_arr = np.asarray(rows, dtype=np.int64)
    cols_arr = np.asarray(cols, dtype=np.int64)
    bad = (cols_arr < 0) | (cols_arr >= n_vertices)
    if bad.any():
        k = int(np.argmax(bad))
        raise IndexError(
            f"Cell {rows_arr[k]} references vertex {cols_arr[k]}, "
            f"valid range is [0, {n_vertices})"
        )

    data = np.ones(len(cols_arr), dtype=INCIDENCE_DTYPE)
    return sparse.csr_matrix((data, (rows_arr, cols_arr)),
                             shape=(len(cells), n_vertices))


def cells_from_incidence(op) -> Cells:
    """
    Read back the cells of an incidence operator: the sorted nonzero
    column indices of every row.

    ROUND TRIP:
        cells_from_incidence(build_incidence(cells)) equals cells as sets.
    """
    return [cols.tolist() for cols in incidence_sets(op)]


def build_boundary_1(edges: Cells, n_vertices: Optional[int] = None) -> ChainOp:
    """
    Build the signed boundary operator ∂₁: C₁ → C₀.

    CONSTRUCTION:
        Start from M_Eᵀ (all entries +1), then force the entry of the
        FIRST listed vertex of every edge to -1.

    Args:
        edges: list of E edges, each [tail, head]
        n_vertices: number of vertices (rows); inferred if None

    Returns:
        b1: (V, E) CSR matrix

    PROPERTY:
        Each column has exactly one -1 and one +1, so column sums are 0.

    Raises:
        MalformedCellError: if an edge does not have 2 distinct vertices
    """
    check_edges(edges)
    b1 = build_incidence(edges, n_vertices).T.tolil()
    for e_idx, edge in enumerate(edges):
        b1[int(edge[0]), e_idx] = -1
    return b1.tocsr()


def build_unsigned_coboundary_2(faces: Cells, edges: Cells,
                                n_vertices: Optional[int] = None) -> ChainOp:
    """
    Build the unsigned coboundary U₂: C₁ → C₂.

    DEFINITION:
        U₂[f, e] = 1 iff (M_F M_Eᵀ)[f, e] == 2

    Args:
        faces: list of F faces (vertex sets)
        edges: list of E edges
        n_vertices: shared column count of M_F and M_E; inferred if None

    Returns:
        U2: (F, E) CSR matrix

    NOTE:
        The (E, F) transpose is the unsigned boundary ∂₂ (see
        build_unsigned_boundary_2).
    """
    check_edges(edges)
    if n_vertices is None:
        n_vertices = infer_n_vertices(faces, edges)

    m_f = build_incidence(faces, n_vertices).astype(np.int32)
    m_e = build_incidence(edges, n_vertices).astype(np.int32)
    shared = (m_f @ m_e.T).tocoo()

    mask = shared.data == 2
    data = np.ones(int(mask.sum()), dtype=INCIDENCE_DTYPE)
    return sparse.csr_matrix((data, (shared.row[mask], shared.col[mask])),
                             shape=(len(faces), len(edges)))


def build_unsigned_boundary_2(faces: Cells, edges: Cells,
                              n_vertices: Optional[int] = None) -> ChainOp:
    """Unsigned ∂₂: C₂ → C₁, the (E, F) transpose of U₂."""
    return build_unsigned_coboundary_2(faces, edges, n_vertices).T.tocsr()


def row_indices(op: ChainOp, row: int) -> np.ndarray:
    """Nonzero column indices of one CSR row."""
    return op.indices[op.indptr[row]:op.indptr[row + 1]]


def row_values(op: ChainOp, row: int) -> np.ndarray:
    """Stored values of one CSR row, aligned with row_indices()."""
    return op.data[op.indptr[row]:op.indptr[row + 1]]


def incidence_sets(op: ChainOp) -> List[Sequence[int]]:
    """Nonzero column index arrays of every row (explicit zeros dropped)."""
    csr = sparse.csr_matrix(op, copy=True)
    csr.eliminate_zeros()
    csr.sort_indices()
    return [row_indices(csr, i) for i in range(csr.shape[0])]
