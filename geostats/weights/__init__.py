"""Weight builders computing a WeightMatrix from geometries."""

from ._base import WeightBuilder
from ._contiguity import QueenWeights, RookWeights
from ._distance import DistanceWeights
from ._geometry import centroid_coords, check_geometries, iter_rings
from ._quantize import CoordinateQuantizer, edge_key, quantize, quantize_edge

__all__ = [
    "WeightBuilder",
    "QueenWeights",
    "RookWeights",
    "DistanceWeights",
    "CoordinateQuantizer",
    "edge_key",
    "quantize",
    "quantize_edge",
    "centroid_coords",
    "check_geometries",
    "iter_rings",
]
