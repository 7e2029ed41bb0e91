"""Shared permutation draws per neighbor count."""

from __future__ import annotations

import operator

import numpy as np

from geostats.core.exceptions import ConfigurationError

from ._numba import build_lookup_table

__all__ = ["PermutationLookupTable", "task_seeds"]

_SEED_BOUND = 2**31 - 1


def task_seeds(rng: np.random.Generator, n_tasks: int) -> np.ndarray:
    """Independent int64 seeds, one per parallel task."""
    return rng.integers(0, _SEED_BOUND, size=n_tasks, dtype=np.int64)


class PermutationLookupTable:
    """Precomputed random draws of k distinct pool positions for k = 0..max_neighbors.

    Bucket k holds ``permutations`` rows of k distinct positions in
    ``[0, n_pool)``. Memory grows as ``permutations * max_neighbors ** 2 / 2``
    int64 entries.

    Use :meth:`build` rather than the constructor.
    """

    def __init__(
        self,
        table: np.ndarray,
        offsets: np.ndarray,
        n_pool: int,
        max_neighbors: int,
        permutations: int,
    ):
        if offsets.shape[0] != max_neighbors + 2 or offsets[-1] != table.shape[0]:
            raise ConfigurationError("Lookup table offsets do not match table layout")
        table.setflags(write=False)
        offsets.setflags(write=False)
        self.table = table
        self.offsets = offsets
        self.n_pool = n_pool
        self.max_neighbors = max_neighbors
        self.permutations = permutations

    @classmethod
    def build(
        cls,
        n_pool: int,
        max_neighbors: int,
        permutations: int,
        rng: np.random.Generator | int | None = None,
    ) -> PermutationLookupTable:
        """Fill every bucket in parallel, each from its own seed.

        Args:
            n_pool: Number of positions to draw from (N - 1).
            max_neighbors: Largest neighbor count to cover, at most n_pool.
            permutations: Rows per bucket.
            rng: Generator or seed the bucket seeds are taken from.
        """
        n_pool = operator.index(n_pool)
        max_neighbors = operator.index(max_neighbors)
        permutations = operator.index(permutations)
        if permutations <= 0:
            raise ConfigurationError(f"permutations must be positive, got {permutations}")
        if not 0 <= max_neighbors <= n_pool:
            raise ConfigurationError(
                f"max_neighbors must lie in [0, {n_pool}], got {max_neighbors}"
            )

        rng = np.random.default_rng(rng)
        seeds = task_seeds(rng, max_neighbors + 1)
        table, offsets = build_lookup_table(n_pool, max_neighbors, permutations, seeds)
        return cls(table, offsets, n_pool, max_neighbors, permutations)

    def draws(self, k: int) -> np.ndarray:
        """Read-only (permutations, k) view of the draws for neighbor count k."""
        if not 0 <= k <= self.max_neighbors:
            raise KeyError(f"No bucket for {k} neighbors (max {self.max_neighbors})")
        start, end = self.offsets[k], self.offsets[k + 1]
        return self.table[start:end].reshape(self.permutations, k)

    @property
    def nbytes(self) -> int:
        return int(self.table.nbytes + self.offsets.nbytes)

    def __repr__(self) -> str:
        return (
            f"PermutationLookupTable(n_pool={self.n_pool}, max_neighbors={self.max_neighbors}, "
            f"permutations={self.permutations}, nbytes={self.nbytes})"
        )
