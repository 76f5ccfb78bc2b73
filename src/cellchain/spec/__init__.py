"""Constants, data contract and error taxonomy."""

from .constants import (
    EPS_CLOSE,
    BASIS_TOL,
    ORIENTATION_TOL,
    INCIDENCE_DTYPE,
    EXTERIOR_CELL,
    TRIANGLE_OPTS,
)
from .errors import (
    CellComplexError,
    MalformedCellError,
    InconsistentCycleError,
    ArrangementError,
    DegenerateFaceError,
)
from .structures import (
    Points,
    Cells,
    ChainOp,
    ChainComplex,
    canonical_cell,
)
