"""
Model Collections
=================

Merge several independent (V, FV, EV) models into ONE model before a
single arrangement call. Pure index bookkeeping: vertex arrays are
stacked, cell indices of every later model are shifted by the number of
vertices already collected.
"""

from typing import Sequence, Tuple

import numpy as np

from ..spec.structures import Cells


def collection_to_model(collection: Sequence[Tuple[np.ndarray, Cells, Cells]]
                        ) -> Tuple[np.ndarray, Cells, Cells]:
    """
    Collect LAR models in a single LAR model.

    Args:
        collection: non-empty sequence of (V, FV, EV), V of shape (n_k, D)

    Returns:
        (V, FV, EV) with all vertices stacked and indices shifted

    Raises:
        ValueError: on an empty collection or mixed embedding dimensions
    """
    if len(collection) == 0:
        raise ValueError("Cannot build a model from an empty collection")

    dims = {np.asarray(model[0]).shape[1] for model in collection}
    if len(dims) != 1:
        raise ValueError(f"Models live in different dimensions: {sorted(dims)}")

    blocks = []
    faces: Cells = []
    edges: Cells = []
    shift = 0
    for verts, fv, ev in collection:
        verts = np.asarray(verts, dtype=float)
        blocks.append(verts)
        faces.extend([[int(v) + shift for v in face] for face in fv])
        edges.extend([[int(v) + shift for v in edge] for edge in ev])
        shift += len(verts)

    return np.vstack(blocks), faces, edges
