"""
Geometry builders - pure geometry construction, no operators dependency.

EXPORTS:
- Polyhedra (LAR form V, EV, FV, CV): build_cube, build_tetrahedron,
  build_square_pyramid
"""

from .polyhedra import build_cube, build_tetrahedron, build_square_pyramid
