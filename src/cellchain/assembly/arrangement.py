"""
Arrangement Collaborator Contract
=================================

The spatial arrangement (splitting cells at mutual intersections) is an
EXTERNAL collaborator. This module fixes its interface, validates its
output, and ships a pass-through collaborator for input that needs no
splitting.

CONTRACT:
    arrange(V, EV, FE) -> (V', EV', FE', CF')

    V   : (N, 3) vertices               V'  : (N' >= N, 3)
    EV  : (E, N) unsigned               EV' : (E', N') exactly 2 nonzeros per row
    FE  : (F, E) unsigned               FE' : (F', E')
                                        CF' : (C' + 1, F'), row EXTERIOR_CELL is
                                              the unbounded exterior cell

    All returned operators index into the returned vertex/cell sets only.
"""

from typing import Callable, Tuple

import numpy as np
from scipy import sparse

from ..operators.incidence import cells_from_incidence, row_indices, row_values
from ..operators.orientation import cycle_from_row, orient_coboundary_2
from ..spec.constants import EXTERIOR_CELL, INCIDENCE_DTYPE, ORIENTATION_TOL
from ..spec.errors import ArrangementError, CellComplexError
from ..spec.structures import ChainOp

ArrangementResult = Tuple[np.ndarray, ChainOp, ChainOp, ChainOp]
ArrangementFn = Callable[[np.ndarray, ChainOp, ChainOp], ArrangementResult]


def _empty_rows(op: ChainOp) -> np.ndarray:
    nnz = np.diff(abs(op).tocsr().indptr)
    return np.flatnonzero(nnz == 0)


def validate_arrangement(result, n_input_vertices: int) -> ArrangementResult:
    """
    Check an arrangement result against the contract.

    Args:
        result: whatever the collaborator returned
        n_input_vertices: vertex count passed to the collaborator

    Returns:
        (V, EV, FE, CF) with V as float array and operators as CSR

    Raises:
        ArrangementError: empty or inconsistent result
    """
    try:
        verts, ev, fe, cf = result
    except (TypeError, ValueError) as exc:
        raise ArrangementError(
            "Arrangement must return (V, EV, FE, CF)"
        ) from exc

    verts = np.asarray(verts, dtype=float)
    if verts.ndim != 2 or len(verts) == 0:
        raise ArrangementError(f"Arrangement returned no vertices (shape {verts.shape})")
    if len(verts) < n_input_vertices:
        raise ArrangementError(
            f"Arrangement lost vertices: {len(verts)} < {n_input_vertices} input vertices"
        )

    ev, fe, cf = (sparse.csr_matrix(op) for op in (ev, fe, cf))
    for name, op in (("EV", ev), ("FE", fe), ("CF", cf)):
        if op.shape[0] == 0:
            raise ArrangementError(f"Arrangement returned an empty {name} operator")

    if ev.shape[1] != len(verts):
        raise ArrangementError(f"EV has {ev.shape[1]} columns for {len(verts)} vertices")
    if fe.shape[1] != ev.shape[0]:
        raise ArrangementError(f"FE has {fe.shape[1]} columns for {ev.shape[0]} edges")
    if cf.shape[1] != fe.shape[0]:
        raise ArrangementError(f"CF has {cf.shape[1]} columns for {fe.shape[0]} faces")
    if cf.shape[0] < EXTERIOR_CELL + 2:
        raise ArrangementError("Arrangement returned no bounded solid cell")

    ev_abs = abs(ev)
    ev_abs.eliminate_zeros()
    per_edge = np.diff(ev_abs.indptr)
    bad = np.flatnonzero(per_edge != 2)
    if len(bad):
        e = int(bad[0])
        raise ArrangementError(f"Edge {e} has {per_edge[e]} vertices, expected 2", cell=e)

    for name, op in (("Face", fe), ("Solid", cf)):
        empty = _empty_rows(op)
        if len(empty):
            raise ArrangementError(f"{name} {int(empty[0])} has no boundary cells",
                                   cell=int(empty[0]))

    return verts, ev, fe, cf


def shell_arrangement(vertices: np.ndarray, ev: ChainOp, fe: ChainOp,
                      tol: float = ORIENTATION_TOL) -> ArrangementResult:
    """
    Pass-through arrangement for ONE closed convex shell.

    Nothing is split: the input must already be a non-self-intersecting,
    closed, convex polyhedral surface. The result has two 3-cells, the
    exterior (row EXTERIOR_CELL) and the bounded solid.

    ORIENTATION:
        Every face is oriented by its edge cycle (orient_coboundary_2).
        Its sign in the solid row is +1 when the cycle normal
            n_f = Σ p_tail × p_head
        points away from the shell centroid, -1 otherwise. The exterior
        row carries the opposite signs.

    Args:
        vertices: (N, 3) array
        ev: (E, N) unsigned edge-vertex incidence
        fe: (F, E) unsigned face-edge incidence
        tol: minimum |cos| between n_f and c_f - c for a decidable
            face orientation (scale-free)

    Returns:
        (V, EV, FE signed, CF signed)

    Raises:
        ArrangementError: open or non-manifold shell, undecidable face
            orientation, or inconsistent orientation (CF·FE != 0)
    """
    verts = np.asarray(vertices, dtype=float)
    if verts.ndim != 2 or verts.shape[1] != 3:
        raise ArrangementError(f"Shell arrangement needs (N, 3) vertices, got {verts.shape}")

    edges = cells_from_incidence(ev)
    try:
        fe_signed = orient_coboundary_2(fe, edges)
    except CellComplexError as exc:
        raise ArrangementError(f"Shell faces cannot be oriented: {exc}", cell=exc.cell) from exc

    faces_per_edge = np.asarray(abs(fe_signed).sum(axis=0)).ravel()
    bad = np.flatnonzero(faces_per_edge != 2)
    if len(bad):
        e = int(bad[0])
        raise ArrangementError(
            f"Edge {e} bounds {int(faces_per_edge[e])} faces, a closed shell needs 2",
            cell=e,
        )

    used = sorted({v for edge in edges for v in edge})
    center = verts[used].mean(axis=0)

    n_faces = fe_signed.shape[0]
    signs = np.zeros(n_faces, dtype=INCIDENCE_DTYPE)
    for f_idx in range(n_faces):
        directed = cycle_from_row(row_indices(fe_signed, f_idx),
                                  row_values(fe_signed, f_idx), edges)
        normal = np.sum([np.cross(verts[t], verts[h]) for t, h in directed], axis=0)
        face_verts = sorted({v for pair in directed for v in pair})
        outward = verts[face_verts].mean(axis=0) - center
        scale = float(np.linalg.norm(normal) * np.linalg.norm(outward))
        cos = float(normal @ outward) / scale if scale > 0 else 0.0
        if abs(cos) < tol:
            raise ArrangementError(
                f"Face {f_idx} orientation is undecidable (|cos(n, r)| = {abs(cos):.2e}); "
                f"shell is not convex or face is degenerate",
                cell=f_idx,
            )
        signs[f_idx] = 1 if cos > 0 else -1

    face_ids = np.arange(n_faces)
    rows = np.concatenate([np.full(n_faces, EXTERIOR_CELL), np.full(n_faces, EXTERIOR_CELL + 1)])
    cf = sparse.csr_matrix(
        (np.concatenate([-signs, signs]), (rows, np.concatenate([face_ids, face_ids]))),
        shape=(2, n_faces),
    )

    cf_fe = cf.astype(np.int32) @ fe_signed.astype(np.int32)
    if cf_fe.count_nonzero():
        raise ArrangementError("Shell faces are not consistently oriented: CF·FE != 0")

    ev_out = sparse.csr_matrix(abs(sparse.csr_matrix(ev)), dtype=INCIDENCE_DTYPE)
    return verts.copy(), ev_out, fe_signed, cf
