"""
Tests for face triangulation in a local basis
=============================================

Validates:
    - local_basis: first non-collinear pair, degenerate faces
    - project_to_plane round trip
    - triangulate_face: convex and non-convex faces, CCW winding
    - Triangle adapter: id mapping, Steiner point rejection
    - face_triangulator: winding follows the signed face cycle

Run: python -m pytest tests/core/test_triangulation.py -v
"""

import numpy as np
import pytest

from cellchain.assembly import assemble_chain_complex
from cellchain.builders import build_cube
from cellchain.operators import build_unsigned_coboundary_2
from cellchain.operators.incidence import row_indices, row_values
from cellchain.operators.orientation import cycle_from_row
from cellchain.spec import DegenerateFaceError, InconsistentCycleError
from cellchain.triangulation import (
    constrained_triangulation,
    face_triangulator,
    local_basis,
    project_to_plane,
    triangulate_face,
)


def _lift(points):
    pts = np.asarray(points, dtype=float)
    if pts.shape[1] == 2:
        pts = np.hstack([pts, np.zeros((len(pts), 1))])
    return pts


def _area_3d(points, tris):
    pts = _lift(points)
    a, b, c = pts[tris[:, 0]], pts[tris[:, 1]], pts[tris[:, 2]]
    return 0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1).sum()


def _signed_area_2d(points, tris):
    pts = np.asarray(points, dtype=float)
    a, b, c = pts[tris[:, 0]], pts[tris[:, 1]], pts[tris[:, 2]]
    ab, ac = b - a, c - a
    return 0.5 * (ab[:, 0] * ac[:, 1] - ab[:, 1] * ac[:, 0])


L_SHAPE = [[0, 0], [2, 0], [2, 1], [1, 1], [1, 2], [0, 2]]
L_EDGES = [[k, (k + 1) % 6] for k in range(6)]


# =============================================================================
# TEST A: Local basis
# =============================================================================

def test_basis_skips_collinear_candidates():
    """v2 is the first LATER vertex not collinear with v1."""
    pts = [[0, 0, 0], [1, 0, 0], [2, 0, 0], [0, 1, 0]]
    M = local_basis(pts)
    assert np.allclose(M[:, 0], [1, 0, 0])
    assert np.allclose(M[:, 1], [0, 1, 0])
    assert np.allclose(M[:, 2], [0, 0, 1])


def test_basis_skips_coincident_first_vertex():
    pts = [[0, 0, 0], [0, 0, 0], [0, 2, 0], [0, 0, 3]]
    M = local_basis(pts)
    assert np.allclose(M[:, 0], [0, 2, 0])
    assert np.allclose(M[:, 1], [0, 0, 3])


def test_basis_is_invertible():
    V, EV, FV, CV = build_cube()
    for face in FV:
        M = local_basis(V[face])
        assert abs(np.linalg.det(M)) > 0


def test_collinear_face_raises():
    with pytest.raises(DegenerateFaceError, match="collinear"):
        local_basis([[0, 0, 0], [1, 1, 1], [2, 2, 2], [3, 3, 3]])


def test_coincident_face_raises():
    with pytest.raises(DegenerateFaceError, match="coincide"):
        local_basis([[1, 1, 1]] * 3)


def test_two_vertex_face_raises():
    with pytest.raises(DegenerateFaceError):
        local_basis([[0, 0, 0], [1, 0, 0]])


def test_projection_round_trip():
    """p₀ + x v₁ + y v₂ reproduces every (planar) face vertex."""
    pts = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0], [0.5, 0.5, 0.0]])
    pts[3] = pts[0] + 0.3 * (pts[1] - pts[0]) + 0.4 * (pts[2] - pts[0])
    coords = project_to_plane(pts)
    M = local_basis(pts)
    back = pts[0] + coords @ M[:, :2].T
    assert np.allclose(back, pts)


def test_projection_accepts_2d():
    coords = project_to_plane(L_SHAPE)
    assert coords.shape == (6, 2)
    assert np.allclose(coords[0], [0, 0])


# =============================================================================
# TEST B: Face triangulation
# =============================================================================

def test_cube_face_two_triangles():
    V, EV, FV, CV = build_cube()
    face = FV[0]
    local = {v: k for k, v in enumerate(face)}
    constraints = [[local[a], local[b]] for a, b in EV if a in local and b in local]

    tris = triangulate_face(V[face], constraints)
    assert tris.shape == (2, 3)
    assert np.isclose(_area_3d(V[face], tris), 1.0)
    assert sorted(np.unique(tris).tolist()) == [0, 1, 2, 3]


def test_l_shape_respects_boundary():
    """Non-convex hexagon: 4 triangles, none covering the notch."""
    tris = triangulate_face(L_SHAPE, L_EDGES)
    assert tris.shape == (4, 3)
    assert np.isclose(_area_3d(L_SHAPE, tris), 3.0)
    assert np.all(_signed_area_2d(L_SHAPE, tris) > 0), "CCW in the local frame"


def test_clockwise_engine_output_is_normalized():
    """A collaborator returning CW triangles still yields CCW triangles."""
    pts = [[0, 0], [1, 0], [0, 1]]

    def cw_engine(points2d, point_ids, segments):
        return np.array([[point_ids[0], point_ids[2], point_ids[1]]])

    tris = triangulate_face(pts, [[0, 1], [1, 2], [2, 0]], engine=cw_engine)
    assert sorted(tris[0].tolist()) == [0, 1, 2]
    assert np.all(_signed_area_2d(pts, tris) > 0)


def test_engine_without_triangles_raises():
    def empty_engine(points2d, point_ids, segments):
        return np.zeros((0, 3), dtype=int)

    with pytest.raises(DegenerateFaceError):
        triangulate_face([[0, 0], [1, 0], [0, 1]], [[0, 1]], engine=empty_engine)


# =============================================================================
# TEST C: Triangle adapter
# =============================================================================

def test_engine_maps_ids():
    """Triangles are reported in the caller's ids, not positions."""
    pts = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    ids = [10, 20, 30, 40]
    segments = [[10, 20], [20, 30], [30, 40], [40, 10]]
    tris = constrained_triangulation(pts, ids, segments)
    assert tris.shape == (2, 3)
    assert set(np.unique(tris).tolist()) == set(ids)


def test_engine_unknown_id_raises():
    pts = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    with pytest.raises(IndexError, match="99"):
        constrained_triangulation(pts, [0, 1, 2], [[0, 99]])


def test_engine_rejects_steiner_points():
    """Crossing constraints force a new vertex that has no id."""
    pts = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    segments = [[0, 1], [1, 2], [2, 3], [3, 0], [0, 2], [1, 3]]
    with pytest.raises(DegenerateFaceError, match="Steiner"):
        constrained_triangulation(pts, [0, 1, 2, 3], segments)


def test_engine_length_mismatch_raises():
    with pytest.raises(ValueError):
        constrained_triangulation(np.zeros((3, 2)), [0, 1], [])


# =============================================================================
# TEST D: face_triangulator
# =============================================================================

def test_facetrias_follow_face_cycle():
    """Triangle normals agree with the cycle normal Σ p_tail × p_head."""
    V, EV, FV, CV = build_cube()
    verts, (ev, fv, cv), (_, cop_fe, _) = assemble_chain_complex(V, FV, EV)
    facetrias = face_triangulator(verts, fv, ev, cop_fe)

    for f in range(len(fv)):
        tris = facetrias(f)
        assert set(np.unique(tris).tolist()) == set(fv[f]), "global ids"

        directed = cycle_from_row(row_indices(cop_fe, f), row_values(cop_fe, f), ev)
        cycle_normal = np.sum([np.cross(verts[t], verts[h]) for t, h in directed], axis=0)
        for a, b, c in tris:
            tri_normal = np.cross(verts[b] - verts[a], verts[c] - verts[a])
            assert tri_normal @ cycle_normal > 0


def test_facetrias_unsigned_operator():
    """Unsigned rows are not cycles: local-basis winding is kept."""
    V, EV, FV, CV = build_cube()
    fe = build_unsigned_coboundary_2(FV, EV, len(V))
    facetrias = face_triangulator(V, FV, EV, fe)
    tris = facetrias(5)
    assert tris.shape == (2, 3)
    assert set(np.unique(tris).tolist()) == set(FV[5])


def test_facetrias_degenerate_face_names_face():
    V = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
    FV = [[0, 1, 2]]
    EV = [[0, 1], [1, 2], [0, 2]]
    facetrias = face_triangulator(V, FV, EV, np.array([[1, 1, 1]]))
    with pytest.raises(DegenerateFaceError, match="Face 0") as info:
        facetrias(0)
    assert info.value.cell == 0


def test_facetrias_edge_off_face_raises():
    V = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
    FV = [[0, 1, 2]]
    EV = [[0, 1], [1, 2], [0, 3]]
    facetrias = face_triangulator(V, FV, EV, np.array([[1, 1, 1]]))
    with pytest.raises(InconsistentCycleError) as info:
        facetrias(0)
    assert info.value.cell == 0
