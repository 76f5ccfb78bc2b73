"""
Analysis functions - depend on operators layer.

Separated from builders to maintain clean layering:
    builders → spec
    analysis → operators → spec

Includes:
- verify_topology: ∂₁ structure, face cycles, exactness, closed meshes
"""

from .verify_topology import (
    verify_boundary_1,
    verify_face_cycles,
    verify_exactness,
    assert_exactness,
    verify_closed_mesh,
)
