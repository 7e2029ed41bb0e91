"""Local spatial statistics.

Provides local Moran's I (LISA) with conditional permutation inference.
"""

from ._config import LisaConfig
from ._lisa import (
    LISAResult,
    PermutationMethod,
    Quad,
    classify_quadrants,
    lisa,
    standardize,
)

__all__ = [
    "lisa",
    "LISAResult",
    "LisaConfig",
    "PermutationMethod",
    "Quad",
    "classify_quadrants",
    "standardize",
]
