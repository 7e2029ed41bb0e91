"""Sparse spatial weight matrix.

The weight matrix is a pure index structure: observations are dense integers
``[0, N)`` and every stored weight is strictly positive. Absence of an entry
means "not neighbors". Application identifiers are translated at the boundary
by :class:`geostats.types.IdIndex`.
"""

from __future__ import annotations

import math
import operator
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Sequence

import numpy as np
import scipy.sparse as sparse

from geostats.core.exceptions import (
    ReferentialError,
    UnsupportedTransformError,
    ValidationError,
)

__all__ = ["Transform", "WeightMatrix"]


class Transform(str, Enum):
    """Transformations applied when converting to a numeric sparse matrix.

    ``NONE`` and ``BINARY`` both pass stored weights through unchanged.
    ``DOUBLY_STANDARDIZED`` is declared for completeness and rejected.
    """

    NONE = "none"
    ROW = "row"
    BINARY = "binary"
    DOUBLY_STANDARDIZED = "doubly_standardized"

    @classmethod
    def coerce(cls, value: "Transform | str | None") -> "Transform":
        if value is None:
            return cls.NONE
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedTransformError(
                f"Unknown transform '{value}', expected one of {[t.value for t in cls]}"
            ) from None


class WeightMatrix:
    """Immutable sparse weight matrix over ``n_elements`` observations.

    Stores a mapping ``origin -> {dest: weight}``. An origin may be missing
    entirely (unknown to the builder) or map to an empty dict (known, with no
    neighbors); :meth:`neighbors_of` keeps the two cases apart.

    Args:
        weights: Nested mapping of origin index to destination weights.
            Zero weights are dropped.
        n_elements: Total number of observations N.

    Raises:
        ReferentialError: If an index lies outside ``[0, n_elements)``.
        ValidationError: If a weight is negative or non-finite, or an
            origin lists itself as neighbor.

    Examples:
        >>> w = WeightMatrix({0: {1: 1.0}, 1: {0: 1.0}, 2: {}}, n_elements=3)
        >>> w.neighbors_of(0)
        frozenset({1})
        >>> w.neighbors_of(2)
        frozenset()
    """

    def __init__(self, weights: Mapping[int, Mapping[int, float]], n_elements: int):
        n_elements = operator.index(n_elements)
        if n_elements < 0:
            raise ValidationError(f"n_elements must be non-negative, got {n_elements}")
        self._n_elements = n_elements

        store: dict[int, Mapping[int, float]] = {}
        for origin, dests in weights.items():
            origin = self._check_index(origin)
            row: dict[int, float] = {}
            for dest, weight in dests.items():
                dest = self._check_index(dest)
                weight = float(weight)
                if dest == origin:
                    raise ValidationError(f"Observation {origin} cannot be its own neighbor")
                if not math.isfinite(weight) or weight < 0:
                    raise ValidationError(
                        f"Weight for ({origin}, {dest}) must be finite and non-negative, got {weight}"
                    )
                if weight == 0.0:
                    continue
                row[dest] = weight
            store[origin] = MappingProxyType(row)
        self._weights = store

    @classmethod
    def from_list_rep(
        cls,
        origins: Sequence[int],
        dests: Sequence[int],
        weights: Sequence[float],
        n_elements: int,
    ) -> WeightMatrix:
        """Build a weight matrix from parallel edge lists.

        Every pair is inserted in both directions. Repeated pairs overwrite
        earlier ones, so an already symmetric list yields the same matrix.

        Args:
            origins: Origin index per edge.
            dests: Destination index per edge.
            weights: Weight per edge.
            n_elements: Total number of observations N.

        Raises:
            ValidationError: If the lists differ in length, contain a self
                pair or a negative weight.
            ReferentialError: If an index lies outside ``[0, n_elements)``.
        """
        if not (len(origins) == len(dests) == len(weights)):
            raise ValidationError(
                f"origins ({len(origins)}), dests ({len(dests)}) and weights "
                f"({len(weights)}) must have the same length"
            )

        nested: dict[int, dict[int, float]] = {}
        for origin, dest, weight in zip(origins, dests, weights):
            origin, dest = operator.index(origin), operator.index(dest)
            nested.setdefault(origin, {})[dest] = weight
            nested.setdefault(dest, {})[origin] = weight

        return cls(nested, n_elements)

    def _check_index(self, index: int) -> int:
        try:
            index = operator.index(index)
        except TypeError:
            raise ReferentialError(f"Identifier {index!r} is not an integer index") from None
        if not 0 <= index < self._n_elements:
            raise ReferentialError(
                f"Identifier {index} outside of [0, {self._n_elements})"
            )
        return index

    @property
    def n_elements(self) -> int:
        """Total number of observations, including islands."""
        return self._n_elements

    def __len__(self) -> int:
        return self._n_elements

    @property
    def weights(self) -> Mapping[int, Mapping[int, float]]:
        """Read-only view of the nested origin -> {dest: weight} mapping."""
        return MappingProxyType(self._weights)

    def neighbors_of(self, index: int) -> Optional[frozenset[int]]:
        """Neighbor ids of ``index``.

        Returns an empty set when the observation is known but has no
        neighbors, and None when the matrix holds no entry for it.
        """
        index = self._check_index(index)
        row = self._weights.get(index)
        if row is None:
            return None
        return frozenset(row)

    def weights_of(self, index: int) -> Optional[Mapping[int, float]]:
        """Read-only ``{dest: weight}`` view for ``index``, or None if unknown."""
        index = self._check_index(index)
        return self._weights.get(index)

    def are_neighbors(self, origin: int, dest: int) -> bool:
        """Whether ``dest`` is a neighbor of ``origin``.

        Raises:
            ReferentialError: If ``origin`` has no entry in the matrix.
        """
        origin = self._check_index(origin)
        dest = self._check_index(dest)
        row = self._weights.get(origin)
        if row is None:
            raise ReferentialError(f"Identifier {origin} has no entry in the weight matrix")
        return dest in row

    @cached_property
    def cardinalities(self) -> np.ndarray:
        """Number of neighbors per observation (0 for missing entries)."""
        counts = np.zeros(self._n_elements, dtype=np.int64)
        for origin, row in self._weights.items():
            counts[origin] = len(row)
        counts.setflags(write=False)
        return counts

    @property
    def max_neighbors(self) -> int:
        if self._n_elements == 0:
            return 0
        return int(self.cardinalities.max())

    @property
    def islands(self) -> frozenset[int]:
        """Observations without any neighbor."""
        return frozenset(np.flatnonzero(self.cardinalities == 0).tolist())

    @property
    def n_edges(self) -> int:
        """Number of directed (origin, dest) pairs."""
        return int(self.cardinalities.sum())

    def edges(self) -> Iterator[tuple[int, int, float]]:
        """Iterate over ``(origin, dest, weight)`` in ascending index order."""
        for origin in sorted(self._weights):
            row = self._weights[origin]
            for dest in sorted(row):
                yield origin, dest, row[dest]

    def is_symmetric(self) -> bool:
        """Whether every edge has a reverse edge with the same weight."""
        for origin, dest, weight in self.edges():
            reverse = self._weights.get(dest)
            if reverse is None or reverse.get(origin) != weight:
                return False
        return True

    def to_sparse_numeric_matrix(
        self, transform: Transform | str | None = Transform.NONE
    ) -> sparse.csr_matrix:
        """Convert to an N x N CSR matrix.

        Args:
            transform: ``NONE``/``BINARY`` keep the stored weights, ``ROW``
                divides every row by its sum. Island rows stay empty.

        Raises:
            UnsupportedTransformError: For ``DOUBLY_STANDARDIZED`` or unknown
                transform names.
        """
        transform = Transform.coerce(transform)
        if transform is Transform.DOUBLY_STANDARDIZED:
            raise UnsupportedTransformError("Doubly standardized transform is not supported")

        n = self._n_elements
        n_edges = self.n_edges
        rows = np.empty(n_edges, dtype=np.int64)
        cols = np.empty(n_edges, dtype=np.int64)
        data = np.empty(n_edges, dtype=np.float64)
        for k, (origin, dest, weight) in enumerate(self.edges()):
            rows[k] = origin
            cols[k] = dest
            data[k] = weight

        if transform is Transform.ROW and n_edges:
            row_sums = np.bincount(rows, weights=data, minlength=n)
            data = data / row_sums[rows]

        mat = sparse.csr_matrix((data, (rows, cols)), shape=(n, n), dtype=np.float64)
        mat.sort_indices()
        return mat

    def link_geometries_as_lines(self, geometries: Sequence, ids: Optional[Sequence] = None) -> dict:
        """Export each directed edge as a GeoJSON LineString between centroids.

        Args:
            geometries: Geometries aligned with the matrix indices.
            ids: Optional external identifiers used for the ``origin`` and
                ``dest`` properties instead of the positional index.

        Returns:
            dict: GeoJSON FeatureCollection.
        """
        # Avoid circular import: geometry helpers live with the builders
        from shapely.geometry import LineString, mapping

        from geostats.weights._geometry import centroid_coords

        if len(geometries) != self._n_elements:
            raise ValidationError(
                f"Got {len(geometries)} geometries for a matrix of {self._n_elements} elements"
            )
        if ids is not None and len(ids) != self._n_elements:
            raise ValidationError(
                f"Got {len(ids)} ids for a matrix of {self._n_elements} elements"
            )

        centroids = centroid_coords(geometries)
        labels = ids if ids is not None else range(self._n_elements)

        features = []
        for origin, dest, _weight in self.edges():
            line = LineString([tuple(centroids[origin]), tuple(centroids[dest])])
            features.append(
                {
                    "type": "Feature",
                    "geometry": mapping(line),
                    "properties": {"origin": str(labels[origin]), "dest": str(labels[dest])},
                }
            )

        return {"type": "FeatureCollection", "features": features}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeightMatrix):
            return NotImplemented
        return self._n_elements == other._n_elements and {
            k: dict(v) for k, v in self._weights.items()
        } == {k: dict(v) for k, v in other._weights.items()}

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"WeightMatrix(n_elements={self._n_elements}, n_edges={self.n_edges}, "
            f"n_islands={len(self.islands)})"
        )
