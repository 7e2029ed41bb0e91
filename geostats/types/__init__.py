"""Type classes for geostats."""

from ._id_index import IdIndex
from ._weights import Transform, WeightMatrix

__all__ = [
    "IdIndex",
    "Transform",
    "WeightMatrix",
]
