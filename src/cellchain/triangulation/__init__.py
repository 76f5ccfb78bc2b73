"""Boundary triangulation - local face bases, solid meshes."""

from .engine import constrained_triangulation
from .face import (
    local_basis,
    project_to_plane,
    triangulate_face,
    face_triangulator,
)
from .solid import (
    triangulate_solid_boundary,
    assemble_solid,
    map_solids_to_local_bases,
)
