"""
Data Contract - LAR (Linear Algebraic Representation)
=====================================================

Geometry and topology are stored separately:

    Points       : np.ndarray (N, D), one ROW per vertex (D = 2 or 3)
    Cells        : list of vertex-index lists, one per p-cell
    ChainOp      : scipy.sparse.csr_matrix, int8, entries in {0,1} or {-1,0,1}
    ChainComplex : list of ChainOp between consecutive dimensions

The position of a cell in its Cells list IS its identity: it is the row
index of the cell in every operator.

Inside a cell the vertex order carries no meaning, EXCEPT for edges:
the first listed vertex is the tail (-1), the second is the head (+1).
"""

from typing import Iterable, List

import numpy as np
from scipy import sparse

Points = np.ndarray
Cells = List[List[int]]
ChainOp = sparse.csr_matrix
ChainComplex = List[ChainOp]


def canonical_cell(cell: Iterable[int]) -> List[int]:
    """
    Return the canonical basis form of a cell: sorted, de-duplicated
    vertex indices as plain ints.

    Example:
        canonical_cell([7, 3, 3, 5]) → [3, 5, 7]
    """
    return sorted({int(v) for v in cell})
