"""
Assembly - chain 3-complex construction around the external arrangement.

Layering:
    assembly → operators → spec
"""

from .arrangement import (
    ArrangementFn,
    ArrangementResult,
    validate_arrangement,
    shell_arrangement,
)
from .chain_complex import assemble_chain_complex
from .collection import collection_to_model
