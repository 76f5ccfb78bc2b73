"""
Face Triangulation in a Local Basis
===================================

Each planar face is mapped to 2D, triangulated with its boundary edges as
constraints, and mapped back to global vertex ids.

LOCAL BASIS:
    p₀ = first face vertex, rᵢ = pᵢ - p₀
    v₁ = first rᵢ with |rᵢ| >= tol
    v₂ = first later rⱼ with |v₁ × rⱼ| >= tol    (skips collinear candidates)
    n  = v₁ × v₂
    M  = [v₁ v₂ n]
    2D coordinates = first two rows of M⁻¹ rᵢ

WINDING:
    triangulate_face() returns every triangle counter-clockwise in the
    local (v₁, v₂) frame, i.e. with normal +n.
    face_triangulator() additionally aligns the triangles with the face's
    signed edge cycle when its FE row is a genuine cycle, so the sign of
    the face in a solid (CF) decides the final winding.
"""

from typing import Callable

import numpy as np
from scipy import sparse

from ..operators.incidence import row_indices, row_values
from ..operators.orientation import cycle_from_row, row_is_cycle
from ..spec.constants import BASIS_TOL
from ..spec.errors import DegenerateFaceError, InconsistentCycleError
from ..spec.structures import Cells
from .engine import constrained_triangulation


def _as_3d(points) -> np.ndarray:
    pts = np.asarray(points, dtype=float)
    if pts.ndim != 2 or pts.shape[1] not in (2, 3):
        raise ValueError(f"Face points must be (n, 2) or (n, 3), got {pts.shape}")
    if pts.shape[1] == 2:
        pts = np.hstack([pts, np.zeros((len(pts), 1))])
    return pts


def local_basis(points, tol: float = BASIS_TOL) -> np.ndarray:
    """
    Numerically safe basis of the face plane.

    Args:
        points: (n, 3) face vertex positions (n, 2 is lifted to z = 0)
        tol: minimum |v₁| and |v₁ × v₂|

    Returns:
        M: (3, 3) matrix with columns v₁, v₂, n

    Raises:
        DegenerateFaceError: fewer than 3 vertices, or all candidates
            collinear within tol
    """
    pts = _as_3d(points)
    if len(pts) < 3:
        raise DegenerateFaceError(f"Face has {len(pts)} vertices, needs at least 3")

    rel = pts - pts[0]
    norms = np.linalg.norm(rel, axis=1)
    first = np.flatnonzero(norms >= tol)
    if len(first) == 0:
        raise DegenerateFaceError("All face vertices coincide")

    i = int(first[0])
    v1 = rel[i]
    for j in range(i + 1, len(rel)):
        normal = np.cross(v1, rel[j])
        if np.linalg.norm(normal) >= tol:
            return np.column_stack([v1, rel[j], normal])

    raise DegenerateFaceError(
        f"No in-plane basis with |v1 x v2| >= {tol} among {len(pts)} vertices (collinear face)"
    )


def project_to_plane(points, tol: float = BASIS_TOL) -> np.ndarray:
    """(n, 2) coordinates of the face vertices in the local basis."""
    pts = _as_3d(points)
    basis = local_basis(pts, tol)
    rel = pts - pts[0]
    return np.linalg.solve(basis, rel.T).T[:, :2]


def _signed_areas(coords: np.ndarray, tris: np.ndarray) -> np.ndarray:
    """Twice the signed area of each triangle (positive = CCW)."""
    a, b, c = coords[tris[:, 0]], coords[tris[:, 1]], coords[tris[:, 2]]
    ab, ac = b - a, c - a
    return ab[:, 0] * ac[:, 1] - ab[:, 1] * ac[:, 0]


def _triangulate_coords(coords: np.ndarray, constraints, engine: Callable) -> np.ndarray:
    ids = np.arange(len(coords))
    tris = np.asarray(engine(coords, ids, constraints), dtype=np.int64).reshape(-1, 3)
    if len(tris) == 0:
        raise DegenerateFaceError("Triangulation produced no triangles")
    if tris.min() < 0 or tris.max() >= len(coords):
        raise DegenerateFaceError("Triangulation references points outside the face")

    cw = _signed_areas(coords, tris) < 0
    tris[cw] = tris[cw][:, [1, 0, 2]]
    return tris


def triangulate_face(points, constraints, tol: float = BASIS_TOL,
                     engine: Callable = constrained_triangulation) -> np.ndarray:
    """
    Triangulate one planar face.

    Args:
        points: (n, 3) face vertex positions
        constraints: (m, 2) boundary edges as LOCAL indices into points
        tol: basis tolerance (see local_basis)
        engine: constrained triangulation collaborator

    Returns:
        triangles: (t, 3) local indices, CCW in the local basis

    Raises:
        DegenerateFaceError: see local_basis / engine
    """
    return _triangulate_coords(project_to_plane(points, tol), constraints, engine)


def _cycle_area(coords: np.ndarray, directed) -> float:
    """Twice the signed area enclosed by directed (tail, head) local pairs."""
    return float(sum(coords[t, 0] * coords[h, 1] - coords[h, 0] * coords[t, 1]
                     for t, h in directed))


def face_triangulator(V: np.ndarray, FV: Cells, EV: Cells, FE,
                      tol: float = BASIS_TOL,
                      engine: Callable = constrained_triangulation):
    """
    Build the per-face triangulation function of a 2-skeleton.

    Args:
        V: (N, 3) vertices
        FV: face vertex lists
        EV: edge vertex lists
        FE: (F, E) face-edge operator, unsigned or signed
        tol, engine: see triangulate_face

    Returns:
        facetrias(f) -> (t, 3) array of GLOBAL vertex ids

    NOTE:
        If row f of FE is a signed cycle (zero boundary), the triangles are
        wound like that cycle. Otherwise they keep the local-basis winding.
        facetrias is pure, faces can be processed in any order.
    """
    verts = np.asarray(V, dtype=float)
    fe = sparse.csr_matrix(FE, copy=True)
    fe.eliminate_zeros()
    fe.sort_indices()

    def facetrias(f: int) -> np.ndarray:
        face_verts = [int(v) for v in FV[f]]
        local = {v: k for k, v in enumerate(face_verts)}
        edge_ids = row_indices(fe, f)
        signs = row_values(fe, f)

        directed = cycle_from_row(edge_ids, signs, EV)
        try:
            local_directed = [(local[t], local[h]) for t, h in directed]
        except KeyError as exc:
            raise InconsistentCycleError(
                f"Face {f}: edge vertex {exc.args[0]} is not a vertex of the face",
                cell=f,
            ) from exc

        try:
            coords = project_to_plane(verts[face_verts], tol)
            tris = _triangulate_coords(coords, local_directed, engine)
        except DegenerateFaceError as exc:
            raise DegenerateFaceError(f"Face {f}: {exc}", cell=f) from exc

        if row_is_cycle(edge_ids, signs, EV) and _cycle_area(coords, local_directed) < 0:
            tris = tris[:, [1, 0, 2]]

        return np.asarray(face_verts, dtype=np.int64)[tris]

    return facetrias
