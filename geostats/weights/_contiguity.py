"""Contiguity weights: Queen (shared vertex) and Rook (shared edge).

Both builders hash quantized keys to the geometries that produce them, then
connect every pair of geometries that meet under the same key. Matching is
exact on the quantized grid, so vertices that fall on opposite sides of a
grid line are not matched even when closer than the tolerance.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Hashable, Iterator, Sequence

from geostats.types import WeightMatrix
from geostats.utils import get_logger

from ._base import WeightBuilder
from ._geometry import check_geometries, iter_rings
from ._quantize import CoordinateQuantizer

__all__ = ["QueenWeights", "RookWeights"]

logger = get_logger()


class _ContiguityWeights(WeightBuilder):
    """Shared key-grouping logic of the contiguity builders.

    Args:
        tolerance: Quantization scale; vertices are matched on
            ``floor(coord * tolerance)``.
    """

    def __init__(self, tolerance: float = 1000.0):
        self.quantizer = CoordinateQuantizer(tolerance)

    @property
    def tolerance(self) -> float:
        return self.quantizer.scale

    @abstractmethod
    def _keys(self, geom) -> Iterator[Hashable]:
        """Yield the matching keys produced by one geometry."""

    def compute_weights(self, geometries: Sequence) -> WeightMatrix:
        geometries = check_geometries(geometries)
        n = len(geometries)

        # key -> geometries producing it, insertion ordered and deduplicated
        owners: dict[Hashable, dict[int, None]] = {}
        for i, geom in enumerate(geometries):
            for key in self._keys(geom):
                owners.setdefault(key, {})[i] = None

        neighbors: dict[int, dict[int, float]] = {i: {} for i in range(n)}
        for members in owners.values():
            if len(members) < 2:
                continue
            for a in members:
                row = neighbors[a]
                for b in members:
                    if a != b:
                        row[b] = 1.0

        weights = WeightMatrix(neighbors, n)
        logger.debug(
            f"{self.__class__.__name__}: {n} geometries, {len(owners)} keys, "
            f"{weights.n_edges} directed edges, {len(weights.islands)} islands"
        )
        return weights

    def _params(self) -> dict:
        return {"tolerance": self.tolerance}


class QueenWeights(_ContiguityWeights):
    """Two geometries are neighbors when they share at least one vertex.

    Examples:
        >>> from shapely.geometry import box
        >>> w = QueenWeights(tolerance=1000).compute_weights([box(0, 0, 1, 1), box(1, 1, 2, 2)])
        >>> w.are_neighbors(0, 1)
        True
    """

    def _keys(self, geom) -> Iterator[tuple[int, int]]:
        for ring in iter_rings(geom):
            for x, y in self.quantizer.quantize_array(ring).tolist():
                yield x, y


class RookWeights(_ContiguityWeights):
    """Two geometries are neighbors when they share at least one edge.

    Edges are keyed on their quantized endpoints in canonical order, so
    adjacent polygons with opposite winding still match. Points have no
    edges and always end up as islands.
    """

    def _keys(self, geom) -> Iterator[tuple[int, int, int, int]]:
        for ring in iter_rings(geom):
            yield from self.quantizer.ring_edges(ring)
