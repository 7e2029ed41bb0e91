"""Compute kernels for geostats.

Submodules:
    - permutation: numba kernels for conditional permutation inference
"""

from . import permutation

__all__ = ["permutation"]
