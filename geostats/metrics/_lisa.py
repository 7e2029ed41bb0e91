"""Local indicators of spatial association (local Moran's I).

For every observation i the local statistic

.. math::

    I_i = \\frac{N - 1}{\\sum_j z_j^2} z_i \\sum_j w_{ij} z_j

is computed on standardized values with a row-normalized weight matrix.
Significance comes from conditional permutation: z_i stays fixed while its
neighbors are replaced by random draws from the other N - 1 observations.
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence

import numba
import numpy as np
import pandas as pd

from geostats.core.exceptions import ConfigurationError, DegenerateInputError
from geostats.kernels.permutation import (
    PermutationLookupTable,
    simulate_full,
    simulate_lookup,
    task_seeds,
)
from geostats.types import Transform, WeightMatrix
from geostats.utils import get_logger

from ._config import LisaConfig

logger = get_logger()

__all__ = [
    "Quad",
    "PermutationMethod",
    "LISAResult",
    "standardize",
    "classify_quadrants",
    "lisa",
]

# Above this estimated size the lookup table triggers a warning
_LOOKUP_WARN_BYTES = 512 * 1024**2


class Quad(str, Enum):
    """Moran scatterplot quadrant: sign of the value, then sign of its lag."""

    HH = "HH"
    HL = "HL"
    LH = "LH"
    LL = "LL"


class PermutationMethod(str, Enum):
    FULL = "full"
    LOOKUP = "lookup"

    @classmethod
    def coerce(cls, value: PermutationMethod | str) -> PermutationMethod:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown permutation method '{value}', expected one of {[m.value for m in cls]}"
            ) from None


@dataclass
class LISAResult:
    """Per-observation output of :func:`lisa`, aligned with the weight matrix.

    Attributes:
        moran_val: Local Moran's I.
        lags: Spatial lag of the standardized values.
        quads: Scatterplot quadrant of each observation.
        p_vals: Pseudo p-values in ``[1 / (permutations + 1), 1]``.
        sims: (N, permutations) simulated statistics, if requested.
        permutations: Number of permutations used.
        method: Permutation method used.
    """

    moran_val: np.ndarray
    lags: np.ndarray
    quads: list[Quad]
    p_vals: np.ndarray
    sims: Optional[np.ndarray]
    permutations: int
    method: PermutationMethod

    def __len__(self) -> int:
        return len(self.moran_val)

    def cluster_labels(self, alpha: float = 0.05) -> list[str]:
        """Quadrant label for significant observations, ``"ns"`` otherwise."""
        return [q.value if p <= alpha else "ns" for q, p in zip(self.quads, self.p_vals)]

    def n_significant(self, alpha: float = 0.05) -> int:
        return int(np.count_nonzero(self.p_vals <= alpha))

    def to_dict(self) -> dict:
        """Plain-python representation (lists and strings)."""
        return {
            "moran_val": self.moran_val.tolist(),
            "quads": [q.value for q in self.quads],
            "lags": self.lags.tolist(),
            "p_vals": self.p_vals.tolist(),
            "sims": None if self.sims is None else self.sims.tolist(),
        }

    def to_dataframe(self, index: Optional[Sequence] = None) -> pd.DataFrame:
        """One row per observation with columns moran_val, lag, quad, p_val."""
        return pd.DataFrame(
            {
                "moran_val": self.moran_val,
                "lag": self.lags,
                "quad": [q.value for q in self.quads],
                "p_val": self.p_vals,
            },
            index=index,
        )


def standardize(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """Center on the mean and divide by the population standard deviation.

    Raises:
        DegenerateInputError: If values contain NaN/inf or have zero variance.
    """
    x = np.asarray(values, dtype=np.float64)
    if x.ndim != 1:
        raise DegenerateInputError(f"values must be 1-dimensional, got shape {x.shape}")
    if not np.isfinite(x).all():
        raise DegenerateInputError("values contain NaN or infinite entries")
    if x.size < 2:
        raise DegenerateInputError(f"Need at least 2 values, got {x.size}")

    std = x.std()
    if np.ptp(x) == 0 or not std > 0:
        raise DegenerateInputError("values have zero variance, local Moran's I is undefined")
    return (x - x.mean()) / std


def classify_quadrants(z: np.ndarray, lags: np.ndarray) -> list[Quad]:
    """Quadrant per observation; zero counts as non-negative on both axes."""
    high = z >= 0
    high_lag = lags >= 0
    quads = []
    for h, hl in zip(high.tolist(), high_lag.tolist()):
        if h:
            quads.append(Quad.HH if hl else Quad.HL)
        else:
            quads.append(Quad.LH if hl else Quad.LL)
    return quads


@contextlib.contextmanager
def _numba_threads(n_threads: int) -> Iterator[None]:
    """Temporarily cap the numba thread pool; 0 leaves it untouched."""
    if n_threads <= 0:
        yield
        return

    available = numba.config.NUMBA_NUM_THREADS
    if n_threads > available:
        logger.warning(f"Requested {n_threads} threads, numba pool has {available}")
        n_threads = available

    previous = numba.get_num_threads()
    numba.set_num_threads(n_threads)
    try:
        yield
    finally:
        numba.set_num_threads(previous)


def lisa(
    weights: WeightMatrix,
    values: Sequence[float] | np.ndarray,
    permutations: int = 999,
    keep_simulations: bool = False,
    permutation_method: PermutationMethod | str = PermutationMethod.LOOKUP,
    seed: Optional[int] = None,
    n_threads: int = 0,
    config: Optional[LisaConfig] = None,
) -> LISAResult:
    """Compute local Moran's I with conditional permutation inference.

    Args:
        weights: Weight matrix over N observations. Rows are normalized
            internally; islands get a zero lag.
        values: One value per observation, aligned with the matrix indices.
        permutations: Number of conditional permutations.
        keep_simulations: Keep the (N, permutations) simulated statistics.
        permutation_method: ``"full"`` or ``"lookup"``. With lookup,
            observations sharing a neighbor count reuse the same random
            draws, which correlates their p-values.
        seed: Seed for reproducible p-values.
        n_threads: Cap on numba threads, 0 uses the current pool.
        config: Full configuration; takes precedence over the keyword
            arguments above when given.

    Returns:
        LISAResult aligned with the weight matrix indices.

    Raises:
        DegenerateInputError: If the number of values differs from N, or
            values are non-finite or constant.
        ConfigurationError: For invalid parameters.

    Examples:
        >>> result = lisa(weights, values, permutations=999, seed=42)
        >>> result.cluster_labels(alpha=0.05)
    """
    if config is None:
        method_value = getattr(permutation_method, "value", permutation_method)
        config = LisaConfig(
            permutations=permutations,
            keep_simulations=keep_simulations,
            permutation_method=method_value,
            seed=seed,
            n_threads=n_threads,
        )
    else:
        # Re-checked in case fields were written around update()
        config.validate()
    method = PermutationMethod.coerce(config.permutation_method)
    perms = config.permutations

    n = weights.n_elements
    x = np.asarray(values, dtype=np.float64)
    if x.ndim != 1 or x.shape[0] != n:
        raise DegenerateInputError(
            f"Got {x.size} values for a weight matrix of {n} observations"
        )

    z = np.ascontiguousarray(standardize(x))

    w = weights.to_sparse_numeric_matrix(Transform.ROW)
    w_data = np.ascontiguousarray(w.data, dtype=np.float64)
    w_indptr = np.ascontiguousarray(w.indptr, dtype=np.int64)
    cardinalities = np.diff(w_indptr)
    islands = cardinalities == 0

    lags = w @ z
    quads = classify_quadrants(z, lags)
    norm = (n - 1) / (z @ z)
    moran_val = z * lags * norm

    n_islands = int(islands.sum())
    if n_islands:
        logger.warning(f"{n_islands} observations have no neighbors, their p-value is set to 1.0")

    logger.debug(f"LISA on {n} observations: {config}")

    rng = np.random.default_rng(config.seed)
    sims = np.zeros((n, perms), dtype=np.float64) if config.keep_simulations else np.empty((0, 0))

    with _numba_threads(config.n_threads):
        if method is PermutationMethod.FULL:
            seeds = task_seeds(rng, n)
            larger = simulate_full(
                z, w_data, w_indptr, moran_val, norm, perms, seeds, config.keep_simulations, sims
            )
        else:
            max_k = int(cardinalities.max())
            estimate = perms * max_k * (max_k + 1) // 2 * 8
            if estimate > _LOOKUP_WARN_BYTES:
                logger.warning(
                    f"Permutation lookup table needs ~{estimate / 1024**2:.0f} MiB "
                    f"({perms} permutations, up to {max_k} neighbors), "
                    f"consider permutation_method='full'"
                )
            table = PermutationLookupTable.build(n - 1, max_k, perms, rng)
            larger = simulate_lookup(
                z,
                w_data,
                w_indptr,
                moran_val,
                norm,
                perms,
                table.table,
                table.offsets,
                config.keep_simulations,
                sims,
            )

    # Fold to the tail the observed value lies in
    larger = np.minimum(larger, perms - larger)
    p_vals = (larger + 1.0) / (perms + 1.0)
    p_vals[islands] = 1.0

    return LISAResult(
        moran_val=moran_val,
        lags=lags,
        quads=quads,
        p_vals=p_vals,
        sims=sims if config.keep_simulations else None,
        permutations=perms,
        method=method,
    )
