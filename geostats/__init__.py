"""geostats: Spatial weights and local spatial autocorrelation.

geostats provides:
- Contiguity (Queen, Rook) and distance-band weight builders over shapely geometries
- A sparse, index-based WeightMatrix with row-standardized numeric export
- Local Moran's I (LISA) with numba-parallel conditional permutation inference
"""

__version__ = "0.1.0"

# Module-level imports for convenience
from . import core, kernels, metrics, types, utils, weights

# Key types
from .metrics import LISAResult, LisaConfig, PermutationMethod, Quad, lisa
from .types import IdIndex, Transform, WeightMatrix
from .weights import (
    CoordinateQuantizer,
    DistanceWeights,
    QueenWeights,
    RookWeights,
    WeightBuilder,
)

__all__ = [
    # Version
    "__version__",
    # Types
    "WeightMatrix",
    "Transform",
    "IdIndex",
    # Builders
    "WeightBuilder",
    "QueenWeights",
    "RookWeights",
    "DistanceWeights",
    "CoordinateQuantizer",
    # LISA
    "lisa",
    "LISAResult",
    "LisaConfig",
    "PermutationMethod",
    "Quad",
    # Modules
    "core",
    "kernels",
    "metrics",
    "types",
    "utils",
    "weights",
]
