"""Tests for geostats.types module.

This module tests:
- WeightMatrix construction, queries and validation
- Conversion to numeric sparse matrices
- GeoJSON export of links
- IdIndex
"""

import numpy as np
import pytest
from scipy import sparse
from shapely.geometry import box

from geostats.core.exceptions import (
    ConfigurationError,
    ReferentialError,
    UnsupportedTransformError,
    ValidationError,
)
from geostats.types import IdIndex, Transform, WeightMatrix


@pytest.fixture
def star():
    """Observation 0 linked to 1 (w=1) and 2 (w=3); 3 is an island."""
    return WeightMatrix(
        {0: {1: 1.0, 2: 3.0}, 1: {0: 1.0}, 2: {0: 3.0}, 3: {}},
        n_elements=4,
    )


# =============================================================================
# Test WeightMatrix
# =============================================================================


class TestWeightMatrix:
    """Tests for WeightMatrix queries."""

    def test_neighbors(self, star):
        """Test neighbor sets and membership."""
        assert star.neighbors_of(0) == {1, 2}
        assert star.neighbors_of(3) == frozenset()
        assert star.are_neighbors(0, 2)
        assert not star.are_neighbors(1, 2)

    def test_missing_entry_vs_island(self):
        """Test that a missing origin differs from an island."""
        w = WeightMatrix({0: {1: 1.0}, 1: {0: 1.0}, 2: {}}, n_elements=4)
        assert w.neighbors_of(2) == frozenset()
        assert w.neighbors_of(3) is None
        assert w.weights_of(3) is None
        with pytest.raises(ReferentialError):
            w.are_neighbors(3, 0)

    def test_out_of_range(self, star):
        """Test that indices outside [0, N) are rejected."""
        with pytest.raises(ReferentialError):
            star.neighbors_of(4)
        with pytest.raises(KeyError):
            star.are_neighbors(-1, 0)

    def test_cardinalities_and_islands(self, star):
        """Test derived counts."""
        assert star.cardinalities.tolist() == [2, 1, 1, 0]
        assert star.max_neighbors == 2
        assert star.islands == {3}
        assert star.n_edges == 4
        assert len(star) == 4

    def test_read_only(self, star):
        """Test that the stored weights cannot be mutated."""
        with pytest.raises(TypeError):
            star.weights[0] = {}
        with pytest.raises(TypeError):
            star.weights_of(0)[1] = 5.0
        with pytest.raises(ValueError):
            star.cardinalities[0] = 10

    def test_edges_sorted(self, star):
        """Test deterministic edge iteration."""
        assert list(star.edges()) == [
            (0, 1, 1.0),
            (0, 2, 3.0),
            (1, 0, 1.0),
            (2, 0, 3.0),
        ]

    def test_symmetry(self, star):
        """Test symmetry detection."""
        assert star.is_symmetric()
        assert not WeightMatrix({0: {1: 1.0}}, n_elements=2).is_symmetric()

    def test_zero_weights_dropped(self):
        """Test that a zero weight means no edge."""
        w = WeightMatrix({0: {1: 0.0}, 1: {}}, n_elements=2)
        assert w.neighbors_of(0) == frozenset()
        assert w.n_edges == 0

    def test_invalid_weights(self):
        """Test validation of self pairs and negative weights."""
        with pytest.raises(ValidationError):
            WeightMatrix({0: {0: 1.0}}, n_elements=1)
        with pytest.raises(ValidationError):
            WeightMatrix({0: {1: -1.0}}, n_elements=2)
        with pytest.raises(ValidationError):
            WeightMatrix({0: {1: float("nan")}}, n_elements=2)

    def test_equality(self, star):
        """Test structural equality."""
        same = WeightMatrix({0: {2: 3.0, 1: 1.0}, 1: {0: 1.0}, 2: {0: 3.0}, 3: {}}, 4)
        assert star == same
        assert star != WeightMatrix({}, 4)


class TestFromListRep:
    """Tests for building from edge lists."""

    def test_symmetric_insertion(self):
        """Test that every pair is inserted in both directions."""
        w = WeightMatrix.from_list_rep([0, 1, 3], [1, 2, 4], [1.0, 1.0, 2.0], n_elements=6)
        assert w.neighbors_of(0) == {1}
        assert w.neighbors_of(1) == {0, 2}
        assert w.neighbors_of(2) == {1}
        assert w.weights_of(4)[3] == 2.0
        assert w.neighbors_of(5) is None
        assert w.is_symmetric()

    def test_already_symmetric_list(self):
        """Test that a list holding both directions is accepted."""
        w = WeightMatrix.from_list_rep([0, 1], [1, 0], [1.0, 1.0], n_elements=2)
        assert w.n_edges == 2

    def test_length_mismatch(self):
        """Test that parallel lists must have equal length."""
        with pytest.raises(ValidationError):
            WeightMatrix.from_list_rep([0, 1], [1], [1.0, 1.0], n_elements=2)

    def test_invalid_entries(self):
        """Test self pairs, negative weights and out-of-range ids."""
        with pytest.raises(ValidationError):
            WeightMatrix.from_list_rep([1], [1], [1.0], n_elements=2)
        with pytest.raises(ValidationError):
            WeightMatrix.from_list_rep([0], [1], [-2.0], n_elements=2)
        with pytest.raises(ReferentialError):
            WeightMatrix.from_list_rep([0], [5], [1.0], n_elements=2)


class TestSparseConversion:
    """Tests for to_sparse_numeric_matrix."""

    def test_no_transform(self, star):
        """Test that stored weights pass through."""
        mat = star.to_sparse_numeric_matrix()
        assert isinstance(mat, sparse.csr_matrix)
        assert mat.shape == (4, 4)
        expected = np.array(
            [
                [0.0, 1.0, 3.0, 0.0],
                [1.0, 0.0, 0.0, 0.0],
                [3.0, 0.0, 0.0, 0.0],
                [0.0, 0.0, 0.0, 0.0],
            ]
        )
        np.testing.assert_array_equal(mat.toarray(), expected)
        np.testing.assert_array_equal(
            star.to_sparse_numeric_matrix(Transform.BINARY).toarray(), expected
        )

    def test_row_transform(self, star):
        """Test that rows sum to one, islands stay empty."""
        mat = star.to_sparse_numeric_matrix("row")
        np.testing.assert_allclose(mat.toarray()[0], [0.0, 0.25, 0.75, 0.0])
        np.testing.assert_allclose(np.asarray(mat.sum(axis=1)).ravel(), [1.0, 1.0, 1.0, 0.0])

    def test_unsupported_transforms(self, star):
        """Test that doubly standardized and unknown transforms are rejected."""
        with pytest.raises(UnsupportedTransformError):
            star.to_sparse_numeric_matrix(Transform.DOUBLY_STANDARDIZED)
        with pytest.raises(ConfigurationError):
            star.to_sparse_numeric_matrix("bogus")


class TestLinks:
    """Tests for GeoJSON export of links."""

    @pytest.fixture
    def pair(self):
        geoms = [box(0, 0, 2, 2), box(2, 0, 4, 2)]
        weights = WeightMatrix.from_list_rep([0], [1], [1.0], n_elements=2)
        return geoms, weights

    def test_links(self, pair):
        """Test one LineString feature per directed edge."""
        geoms, weights = pair
        collection = weights.link_geometries_as_lines(geoms)
        assert collection["type"] == "FeatureCollection"
        assert len(collection["features"]) == 2

        first = collection["features"][0]
        assert first["geometry"]["type"] == "LineString"
        np.testing.assert_allclose(first["geometry"]["coordinates"], [[1.0, 1.0], [3.0, 1.0]])
        assert first["properties"] == {"origin": "0", "dest": "1"}

    def test_links_with_ids(self, pair):
        """Test that external ids label the features."""
        geoms, weights = pair
        collection = weights.link_geometries_as_lines(geoms, ids=["a", "b"])
        assert collection["features"][1]["properties"] == {"origin": "b", "dest": "a"}

    def test_links_length_mismatch(self, pair):
        """Test that geometries must align with the matrix."""
        geoms, weights = pair
        with pytest.raises(ValidationError):
            weights.link_geometries_as_lines(geoms[:1])


# =============================================================================
# Test IdIndex
# =============================================================================


class TestIdIndex:
    """Tests for external id mapping."""

    def test_mapping(self):
        """Test index and id lookup in both directions."""
        index = IdIndex(["36061", "36047", "36081"])
        assert len(index) == 3
        assert index.index_of("36047") == 1
        assert index["36081"] == 2
        assert index.id_of(0) == "36061"
        assert index.indices_of(["36081", "36061"]) == [2, 0]
        assert index.ids_of([1, 2]) == ["36047", "36081"]
        assert "36061" in index
        assert "00000" not in index

    def test_unknown(self):
        """Test unknown ids and indices."""
        index = IdIndex(["a", "b"])
        with pytest.raises(ReferentialError):
            index.index_of("c")
        with pytest.raises(ReferentialError):
            index.id_of(2)

    def test_invalid_ids(self):
        """Test empty and duplicate id sequences."""
        with pytest.raises(ValidationError):
            IdIndex([])
        with pytest.raises(ValidationError):
            IdIndex(["a", "b", "a"])

    def test_neighbors_by_id(self, star):
        """Test translating neighbor sets to ids."""
        index = IdIndex(["w", "x", "y", "z"])
        assert index.neighbors_of(star, "w") == {"x", "y"}
        assert index.neighbors_of(star, "z") == set()

    def test_neighbors_size_mismatch(self, star):
        """Test that the index must cover the matrix."""
        with pytest.raises(ValidationError):
            IdIndex(["a", "b"]).neighbors_of(star, "a")


class TestSparseIdempotence:
    """Tests for repeated conversion."""

    @pytest.mark.parametrize("transform", ["none", "row", "binary"])
    def test_repeat_conversion(self, star, transform):
        """Test that converting twice yields identical matrices."""
        a = star.to_sparse_numeric_matrix(transform)
        b = star.to_sparse_numeric_matrix(transform)
        assert (a != b).nnz == 0
        np.testing.assert_array_equal(a.indptr, b.indptr)
