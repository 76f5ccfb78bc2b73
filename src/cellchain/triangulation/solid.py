"""
Solid Boundary Meshes
=====================

Collect the triangulated boundary faces of every 3-cell into a local,
self-contained triangle mesh.

WINDING:
    (f, +1) → triangles of f as returned by facetrias
    (f, -1) → first two indices swapped (reversed normal)

    With a consistently signed CF row (e.g. CF · FE = 0) every edge of the
    resulting mesh is used twice with opposite directions.

LOCAL REINDEXING:
    vs = sorted global ids used by the triangles
    local id of v = position of v in vs
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy import sparse

from ..operators.incidence import row_indices, row_values
from ..spec.constants import BASIS_TOL, EXTERIOR_CELL
from ..spec.errors import ArrangementError, CellComplexError, MalformedCellError
from ..spec.structures import Cells
from .engine import constrained_triangulation
from .face import face_triangulator

logger = logging.getLogger(__name__)


def triangulate_solid_boundary(faces_with_signs: Sequence[Tuple[int, int]],
                               facetrias: Callable) -> np.ndarray:
    """
    Oriented triangles of all boundary faces of one solid.

    Args:
        faces_with_signs: (face id, ±1) pairs
        facetrias: per-face triangulation (see face_triangulator)

    Returns:
        (t, 3) array of global vertex ids

    Raises:
        MalformedCellError: if a sign is not ±1
    """
    blocks = []
    for f, sign in faces_with_signs:
        tris = np.asarray(facetrias(int(f)), dtype=np.int64).reshape(-1, 3)
        if sign == 1:
            blocks.append(tris)
        elif sign == -1:
            blocks.append(tris[:, [1, 0, 2]])
        else:
            raise MalformedCellError(f"Face {f} has orientation {sign}, expected ±1", cell=int(f))

    if not blocks:
        return np.zeros((0, 3), dtype=np.int64)
    return np.vstack(blocks)


def assemble_solid(solid: int,
                   faces_with_signs: Sequence[Tuple[int, int]],
                   V: np.ndarray,
                   facetrias: Callable) -> Tuple[np.ndarray, np.ndarray]:
    """
    Local triangle mesh of one solid.

    Args:
        solid: solid id (error context)
        faces_with_signs: (face id, ±1) pairs of the solid boundary
        V: (N, 3) global vertices
        facetrias: per-face triangulation

    Returns:
        local_vertices: (k, 3) positions of the used vertices
        local_triangles: (t, 3) indices into local_vertices

    Raises:
        MalformedCellError: if the solid has no boundary faces
    """
    tv = triangulate_solid_boundary(faces_with_signs, facetrias)
    if len(tv) == 0:
        raise MalformedCellError(f"Solid {solid} has no boundary faces", cell=solid)

    vs = np.unique(tv)
    local_triangles = np.searchsorted(vs, tv)
    return np.asarray(V, dtype=float)[vs], local_triangles


def map_solids_to_local_bases(V: np.ndarray,
                              CV: Cells,
                              FV: Cells,
                              EV: Cells,
                              FE,
                              CF,
                              tol: float = BASIS_TOL,
                              engine: Callable = constrained_triangulation,
                              failures: Optional[Dict[int, Exception]] = None
                              ) -> List[Optional[Tuple[np.ndarray, np.ndarray]]]:
    """
    Map every 3-cell to its local boundary mesh.

    Args:
        V, CV, FV, EV: vertices and bases from assemble_chain_complex
        FE: (F, E) face-edge operator
        CF: (C + 1, F) solid-face operator, exterior at EXTERIOR_CELL
        tol, engine: face triangulation settings
        failures: if a dict is given, a solid that fails is recorded as
            failures[c] = exc and yields None; the other solids continue.
            If None (default), the first failure propagates.

    Returns:
        list with one (local_vertices, local_triangles) per solid of CV

    Raises:
        ArrangementError: if CF rows do not match CV
    """
    cf = sparse.csr_matrix(CF, copy=True)
    cf.eliminate_zeros()
    cf.sort_indices()

    bounded = [r for r in range(cf.shape[0]) if r != EXTERIOR_CELL]
    if len(bounded) != len(CV):
        raise ArrangementError(
            f"CF has {len(bounded)} bounded solids but CV lists {len(CV)}"
        )

    facetrias = face_triangulator(V, FV, EV, FE, tol, engine)

    local_cells = []
    for c, row in enumerate(bounded):
        faces_with_signs = list(zip(row_indices(cf, row).tolist(),
                                    row_values(cf, row).tolist()))
        try:
            local_cells.append(assemble_solid(c, faces_with_signs, V, facetrias))
        except CellComplexError as exc:
            if failures is None:
                raise
            logger.warning("Solid %d skipped: %s", c, exc)
            failures[c] = exc
            local_cells.append(None)

    logger.debug("Mapped %d solids (%d failed)",
                 len(local_cells), 0 if failures is None else len(failures))
    return local_cells
