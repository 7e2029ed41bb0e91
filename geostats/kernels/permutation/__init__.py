"""Conditional permutation kernels (numba)."""

from ._lookup import PermutationLookupTable, task_seeds
from ._numba import build_lookup_table, simulate_full, simulate_lookup

__all__ = [
    "PermutationLookupTable",
    "task_seeds",
    "build_lookup_table",
    "simulate_full",
    "simulate_lookup",
]
