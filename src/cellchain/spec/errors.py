"""
Error taxonomy
==============

Every error is raised eagerly at the smallest granularity (edge, face,
solid) and carries the offending cell id in `cell`.

    CellComplexError (ValueError)
      ├── MalformedCellError      wrong arity (edge != 2 vertices, empty cell)
      ├── InconsistentCycleError  face edges are not ONE closed walk
      ├── ArrangementError        arrangement output empty or inconsistent
      └── DegenerateFaceError     no 2D basis / unmappable triangulation

Out-of-range vertex or cell references raise the builtin IndexError.
"""

from typing import Optional


class CellComplexError(ValueError):
    """Base class for malformed cellular complex input."""

    def __init__(self, message: str, cell: Optional[int] = None):
        super().__init__(message)
        self.cell = cell


class MalformedCellError(CellComplexError):
    """A cell has the wrong arity (e.g. an edge without 2 distinct vertices)."""


class InconsistentCycleError(CellComplexError):
    """Face incidence does not form a single closed walk."""


class ArrangementError(CellComplexError):
    """The arrangement collaborator returned empty or inconsistent data."""


class DegenerateFaceError(CellComplexError):
    """No non-degenerate local 2D basis exists for a face."""
