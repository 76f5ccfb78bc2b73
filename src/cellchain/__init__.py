"""
CELLCHAIN - Chain complexes of cellular complexes
=================================================

Oriented incidence operators and boundary triangulation.

Structure:
    spec/           - Constants, LAR data contract, error taxonomy
    operators/      - Incidence, ∂₁, δ₁ and face cycle orientation
    builders/       - Small polyhedra in LAR form
    assembly/       - Chain 3-complex around the external arrangement
    triangulation/  - Local face bases, solid boundary meshes
    analysis/       - Verification (∂∂ = 0, closed meshes)

Requirements:
    Python >= 3.9
    numpy >= 1.20
    scipy >= 1.8
    triangle
"""

import sys

# Python version check
if sys.version_info < (3, 9):
    raise ImportError(f"cellchain requires Python >= 3.9, got {sys.version}")

# scipy version check (sparse matrix API)
import scipy
_scipy_version = tuple(int(p) for p in scipy.__version__.split('.')[:2] if p.isdigit())
if _scipy_version < (1, 8):
    raise ImportError(f"cellchain requires scipy >= 1.8, got {scipy.__version__}")

# numpy version check
import numpy as np
_numpy_version = tuple(int(p) for p in np.__version__.split('.')[:2] if p.isdigit())
if _numpy_version < (1, 20):
    raise ImportError(f"cellchain requires numpy >= 1.20, got {np.__version__}")

from . import spec
from . import operators
from . import builders
from . import assembly
from . import triangulation
from . import analysis

__version__ = "0.1.0"
