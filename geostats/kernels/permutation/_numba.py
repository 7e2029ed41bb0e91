"""
Numba kernels for conditional permutation of local statistics.

Observation i is compared against statistics built from random neighbor sets
drawn from the other N - 1 observations. Draws are positions in
``[0, N - 1)`` over the all-but-self list: position p maps to observation p
if p < i, else p + 1.

Every parallel task reseeds the numba generator of its thread with its own
task seed before drawing, so results depend only on the task seeds and not
on thread scheduling.
"""

import numba
import numpy as np


@numba.njit(cache=True)
def _partial_shuffle(pool: np.ndarray, k: int, out: np.ndarray) -> None:
    """Draw k distinct entries of pool into out (partial Fisher-Yates, in-place)."""
    n = pool.shape[0]
    for j in range(k):
        r = j + np.random.randint(0, n - j)
        tmp = pool[j]
        pool[j] = pool[r]
        pool[r] = tmp
        out[j] = pool[j]


@numba.njit(cache=True, parallel=True)
def build_lookup_table(
    n_pool: int,
    max_neighbors: int,
    permutations: int,
    seeds: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """Precompute ``permutations`` draws of k distinct positions for every k.

    Args:
        n_pool: Size of the position pool (N - 1).
        max_neighbors: Largest bucket k to fill.
        permutations: Rows per bucket.
        seeds: One seed per bucket, length ``max_neighbors + 1``.

    Returns:
        (table, offsets): flat int64 table and bucket offsets. Bucket k is
        ``table[offsets[k]:offsets[k + 1]]`` reshaped to (permutations, k).
    """
    n_buckets = max_neighbors + 1
    offsets = np.zeros(n_buckets + 1, dtype=np.int64)
    for k in range(n_buckets):
        offsets[k + 1] = offsets[k] + permutations * k

    table = np.empty(offsets[n_buckets], dtype=np.int64)

    for k in numba.prange(n_buckets):
        if k == 0:
            continue
        np.random.seed(seeds[k])
        pool = np.arange(n_pool)
        draw = np.empty(k, dtype=np.int64)
        base = offsets[k]
        for p in range(permutations):
            _partial_shuffle(pool, k, draw)
            row = base + p * k
            for j in range(k):
                table[row + j] = draw[j]

    return table, offsets


@numba.njit(cache=True, parallel=True)
def simulate_full(
    z: np.ndarray,
    w_data: np.ndarray,
    w_indptr: np.ndarray,
    moran_val: np.ndarray,
    norm: float,
    permutations: int,
    seeds: np.ndarray,
    keep_simulations: bool,
    sims: np.ndarray,
) -> np.ndarray:
    """Conditional permutation with fresh draws for every observation.

    Args:
        z: Standardized values, length N.
        w_data: Row-normalized CSR weights.
        w_indptr: CSR row pointer.
        moran_val: Observed local statistics.
        norm: Scaling factor ``(N - 1) / sum(z ** 2)``.
        permutations: Draws per observation.
        seeds: One seed per observation.
        keep_simulations: Write simulated statistics into ``sims``.
        sims: (N, permutations) output, or a (0, 0) placeholder.

    Returns:
        Number of simulated statistics >= the observed one, per observation.
        Islands are left at 0.
    """
    n = z.shape[0]
    larger = np.zeros(n, dtype=np.int64)

    for i in numba.prange(n):
        start = w_indptr[i]
        k = w_indptr[i + 1] - start
        if k == 0:
            continue

        np.random.seed(seeds[i])
        pool = np.arange(n - 1)
        draw = np.empty(k, dtype=np.int64)
        zi = z[i] * norm
        observed = moran_val[i]
        count = 0

        for p in range(permutations):
            _partial_shuffle(pool, k, draw)
            lag = 0.0
            for j in range(k):
                idx = draw[j]
                if idx >= i:
                    idx += 1
                lag += w_data[start + j] * z[idx]
            sim = zi * lag
            if keep_simulations:
                sims[i, p] = sim
            if sim >= observed:
                count += 1

        larger[i] = count

    return larger


@numba.njit(cache=True, parallel=True)
def simulate_lookup(
    z: np.ndarray,
    w_data: np.ndarray,
    w_indptr: np.ndarray,
    moran_val: np.ndarray,
    norm: float,
    permutations: int,
    table: np.ndarray,
    offsets: np.ndarray,
    keep_simulations: bool,
    sims: np.ndarray,
) -> np.ndarray:
    """Conditional permutation reusing shared draws per neighbor count.

    Observations with the same number of neighbors read the same rows of the
    lookup table. Arguments match :func:`simulate_full`, with ``table`` and
    ``offsets`` from :func:`build_lookup_table` instead of seeds.
    """
    n = z.shape[0]
    larger = np.zeros(n, dtype=np.int64)

    for i in numba.prange(n):
        start = w_indptr[i]
        k = w_indptr[i + 1] - start
        if k == 0:
            continue

        base = offsets[k]
        zi = z[i] * norm
        observed = moran_val[i]
        count = 0

        for p in range(permutations):
            row = base + p * k
            lag = 0.0
            for j in range(k):
                idx = table[row + j]
                if idx >= i:
                    idx += 1
                lag += w_data[start + j] * z[idx]
            sim = zi * lag
            if keep_simulations:
                sims[i, p] = sim
            if sim >= observed:
                count += 1

        larger[i] = count

    return larger
