"""
Chain 3-Complex Construction
============================

Raw (V, FV, EV) input → external arrangement → consistent 3-complex.

PIPELINE:
    1. EV = M_E                  unsigned edge-vertex incidence
    2. FE = U₂(FV, EV)           unsigned face-edge relation
    3. V, EV, FE, CF = arrange(V, EV, FE)
    4. Read cell-vertex bases off the refined operators:
         EV[e] = nonzero columns of row e
         FV[f] = ∪ EV[e] over edges e of f
         CV[c] = ∪ FV[f] over faces f of c   (exterior cell skipped)
    5. Re-sign EV: -1 at the lowest vertex of each edge, +1 at the other.

OUTPUT:
    V, (EV, FV, CV), (cscEV, cscFE, cscCF)

    Bases are sorted, de-duplicated vertex lists.
    cscCF keeps the exterior row at EXTERIOR_CELL, so solid c of CV is
    row c + 1 of cscCF.
"""

import logging
from typing import Tuple

import numpy as np

from ..operators.incidence import (
    build_boundary_1,
    build_incidence,
    build_unsigned_coboundary_2,
    cells_from_incidence,
    incidence_sets,
)
from ..spec.constants import EXTERIOR_CELL
from ..spec.structures import Cells, ChainComplex, Points, canonical_cell
from .arrangement import ArrangementFn, shell_arrangement, validate_arrangement

logger = logging.getLogger(__name__)


def assemble_chain_complex(vertices: Points,
                           faces: Cells,
                           edges: Cells,
                           arrange: ArrangementFn = shell_arrangement
                           ) -> Tuple[Points, Tuple[Cells, Cells, Cells], ChainComplex]:
    """
    Assemble a 3-dimensional chain complex from raw faces and edges.

    Args:
        vertices: (N, 3) vertex array
        faces: raw 2-cells as vertex sets
        edges: raw 1-cells, each [i, j]
        arrange: arrangement collaborator (see assembly.arrangement)

    Returns:
        V: refined (N', 3) vertices
        bases: (EV, FV, CV) sorted vertex lists per cell
        coboundaries: [cscEV (E, N') signed, cscFE (F, E), cscCF (C + 1, F)]

    Raises:
        ArrangementError: if the collaborator result is empty or inconsistent.
            Exceptions raised BY the collaborator propagate unchanged.
    """
    verts = np.asarray(vertices, dtype=float)
    n_vertices = len(verts)

    cop_ev = build_incidence(edges, n_vertices)
    cop_fe = build_unsigned_coboundary_2(faces, edges, n_vertices)

    logger.debug("Arranging %d vertices, %d edges, %d faces",
                 n_vertices, cop_ev.shape[0], cop_fe.shape[0])
    verts, cop_ev, cop_fe, cop_cf = validate_arrangement(
        arrange(verts, cop_ev, cop_fe), n_vertices)

    ev = cells_from_incidence(cop_ev)
    fe = incidence_sets(cop_fe)
    cf = incidence_sets(cop_cf)

    fv = [canonical_cell(v for e in face_edges for v in ev[e]) for face_edges in fe]
    cv = [canonical_cell(v for f in solid_faces for v in fv[f])
          for c, solid_faces in enumerate(cf) if c != EXTERIOR_CELL]

    # cells_from_incidence sorts, so ev[e][0] is the lowest vertex → -1
    cop_ev = build_boundary_1(ev, len(verts)).T.tocsr()

    logger.debug("Chain complex: V=%d E=%d F=%d C=%d",
                 len(verts), len(ev), len(fv), len(cv))
    return verts, (ev, fv, cv), [cop_ev, cop_fe, cop_cf]
