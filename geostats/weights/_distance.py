"""Distance-band weights between geometry centroids."""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
from scipy.spatial import KDTree
from scipy.spatial.distance import pdist

from geostats.core.exceptions import ConfigurationError
from geostats.types import WeightMatrix
from geostats.utils import get_logger

from ._base import WeightBuilder
from ._geometry import centroid_coords

__all__ = ["DistanceWeights"]

logger = get_logger()


class DistanceWeights(WeightBuilder):
    """Neighbors by Euclidean distance between centroids.

    Geometries i != j are neighbors when ``d(i, j) < cutoff``. Without a
    cutoff every pair is a neighbor, which only makes sense when the
    distance itself is the weight.

    Args:
        cutoff: Strict upper bound on centroid distance, or None for all pairs.
        use_distance_as_weight: Store the distance instead of 1.0. Pairs
            with coincident centroids are then dropped, since a zero weight
            means "no edge".

    Raises:
        ConfigurationError: If neither a cutoff nor distance weights are
            requested, or the cutoff is not positive.

    Examples:
        >>> from shapely.geometry import Point
        >>> pts = [Point(1, 2), Point(100, 0), Point(2, 2)]
        >>> w = DistanceWeights(cutoff=20).compute_weights(pts)
        >>> sorted(w.neighbors_of(0)), sorted(w.neighbors_of(1))
        ([2], [])
    """

    def __init__(self, cutoff: Optional[float] = None, use_distance_as_weight: bool = False):
        if cutoff is None and not use_distance_as_weight:
            raise ConfigurationError(
                "DistanceWeights without a cutoff connects every pair with weight 1.0; "
                "set a cutoff or use_distance_as_weight=True"
            )
        if cutoff is not None:
            cutoff = float(cutoff)
            if math.isnan(cutoff) or cutoff <= 0:
                raise ConfigurationError(f"cutoff must be positive, got {cutoff}")
        self.cutoff = cutoff
        self.use_distance_as_weight = bool(use_distance_as_weight)

    def compute_weights(self, geometries: Sequence) -> WeightMatrix:
        centroids = centroid_coords(geometries)
        n = len(centroids)

        if self.cutoff is None:
            pairs = np.column_stack(np.triu_indices(n, k=1))
            distances = pdist(centroids)
        else:
            tree = KDTree(centroids)
            pairs = tree.query_pairs(r=self.cutoff, output_type="ndarray").reshape(-1, 2)
            distances = np.linalg.norm(centroids[pairs[:, 0]] - centroids[pairs[:, 1]], axis=1)
            # query_pairs is inclusive of the radius
            keep = distances < self.cutoff
            pairs, distances = pairs[keep], distances[keep]

        neighbors: dict[int, dict[int, float]] = {i: {} for i in range(n)}
        n_coincident = 0
        for (i, j), dist in zip(pairs.tolist(), distances.tolist()):
            if self.use_distance_as_weight:
                if dist == 0.0:
                    n_coincident += 1
                    continue
                weight = dist
            else:
                weight = 1.0
            neighbors[i][j] = weight
            neighbors[j][i] = weight

        if n_coincident:
            logger.warning(
                f"{n_coincident} pairs have coincident centroids and zero distance weight, "
                f"dropping them"
            )

        weights = WeightMatrix(neighbors, n)
        logger.debug(
            f"DistanceWeights: {n} geometries, {weights.n_edges} directed edges, "
            f"{len(weights.islands)} islands"
        )
        return weights

    def _params(self) -> dict:
        return {"cutoff": self.cutoff, "use_distance_as_weight": self.use_distance_as_weight}
