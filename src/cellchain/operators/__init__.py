"""Chain operators - incidence, signed boundaries, face cycle orientation."""

from .incidence import (
    build_incidence,
    cells_from_incidence,
    build_boundary_1,
    build_unsigned_coboundary_2,
    build_unsigned_boundary_2,
)

from .orientation import (
    OrientedEdge,
    vertex_edge_map,
    orient_face,
    orient_coboundary_2,
    build_coboundary_2,
    build_boundary_2,
    build_chain_operators,
)
