"""
Constrained Triangulation Engine
================================

Adapter over Shewchuk's Triangle (`triangle` package), the external
constrained-triangulation collaborator.

CONTRACT:
    engine(points2d, point_ids, segments) -> (m, 3) array of point ids

    - segments are pairs of point IDS and are never crossed
    - triangles come back as point IDS, never as coordinates, so no
      float-keyed lookup is needed to map them back to vertices

Any callable with this signature can replace the default engine.
"""

import numpy as np
import triangle

from ..spec.constants import TRIANGLE_OPTS
from ..spec.errors import DegenerateFaceError


def constrained_triangulation(points2d: np.ndarray,
                              point_ids,
                              segments,
                              opts: str = TRIANGLE_OPTS) -> np.ndarray:
    """
    Triangulate a planar straight line graph with Triangle.

    Args:
        points2d: (n, 2) coordinates
        point_ids: n ids, point_ids[k] labels points2d[k]
        segments: (m, 2) constraint edges given as point ids
        opts: Triangle switch string (default "pQ")

    Returns:
        triangles: (t, 3) array of point ids

    Raises:
        IndexError: if a segment references an unknown id
        DegenerateFaceError: if the engine returns no triangles, or
            inserts Steiner points that have no vertex id
    """
    pts = np.asarray(points2d, dtype=float)
    ids = np.asarray(point_ids, dtype=np.int64)
    if len(pts) != len(ids):
        raise ValueError(f"{len(pts)} points but {len(ids)} point ids")

    position = {int(pid): k for k, pid in enumerate(ids)}
    try:
        seg = np.array([[position[int(a)], position[int(b)]] for a, b in segments],
                       dtype=np.int32).reshape(-1, 2)
    except KeyError as exc:
        raise IndexError(f"Constraint references unknown point id {exc.args[0]}") from exc

    tri_input = {"vertices": pts}
    if len(seg):
        tri_input["segments"] = seg
    result = triangle.triangulate(tri_input, opts)

    triangles = result.get("triangles")
    if triangles is None or len(triangles) == 0:
        raise DegenerateFaceError("Triangulation engine returned no triangles")

    n_out = len(result.get("vertices", pts))
    if n_out > len(pts):
        raise DegenerateFaceError(
            f"Triangulation engine inserted {n_out - len(pts)} Steiner points "
            f"(crossing constraints?)"
        )

    return ids[np.asarray(triangles, dtype=np.int64)]
