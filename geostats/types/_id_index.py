"""Mapping between application identifiers and dense observation indices."""

from collections import Counter
from typing import Hashable, Iterable, Optional, Sequence

from geostats.core.exceptions import ReferentialError, ValidationError

__all__ = ["IdIndex"]


class IdIndex:
    """Bidirectional id-index mapping for the boundary of the package.

    The numeric core only ever sees indices ``[0, N)``; callers that carry
    their own identifiers (tract codes, county FIPS, ...) keep one IdIndex
    next to the geometries and translate on the way in and out.

    Maintains two core data structures:
    - itos: List mapping index to identifier (ordered)
    - stoi: Dict mapping identifier to index (fast lookup)

    Args:
        ids: Ordered, unique, hashable identifiers aligned with the geometries.

    Examples:
        >>> index = IdIndex(["36061", "36047", "36081"])
        >>> index.index_of("36047")
        1
        >>> index.id_of(2)
        '36081'
    """

    def __init__(self, ids: Sequence[Hashable]):
        ids = list(ids)
        self._check_ids(ids)
        self.itos = ids
        self.stoi = {identifier: i for i, identifier in enumerate(ids)}

    @staticmethod
    def _check_ids(ids: list) -> None:
        if len(ids) == 0:
            raise ValidationError("ids cannot be empty")

        if len(ids) != len(set(ids)):
            counts = Counter(ids)
            duplicates = [identifier for identifier, count in counts.items() if count > 1]
            raise ValidationError(
                f"Duplicate ids found: {duplicates[:5]}... "
                f"(Total {len(duplicates)} duplicates)"
            )

    def __len__(self) -> int:
        return len(self.itos)

    def __contains__(self, identifier: Hashable) -> bool:
        return identifier in self.stoi

    def __getitem__(self, identifier: Hashable) -> int:
        return self.index_of(identifier)

    def index_of(self, identifier: Hashable) -> int:
        """Index of an identifier.

        Raises:
            ReferentialError: If the identifier is unknown.
        """
        try:
            return self.stoi[identifier]
        except KeyError:
            raise ReferentialError(f"Unknown identifier {identifier!r}") from None

    def indices_of(self, identifiers: Iterable[Hashable]) -> list[int]:
        return [self.index_of(identifier) for identifier in identifiers]

    def id_of(self, index: int) -> Hashable:
        """Identifier at an index.

        Raises:
            ReferentialError: If the index is outside ``[0, N)``.
        """
        if not 0 <= index < len(self.itos):
            raise ReferentialError(f"Index {index} outside of [0, {len(self.itos)})")
        return self.itos[index]

    def ids_of(self, indices: Iterable[int]) -> list[Hashable]:
        return [self.id_of(index) for index in indices]

    def neighbors_of(self, weights, identifier: Hashable) -> Optional[set]:
        """Neighbors of an identifier in a weight matrix, as identifiers.

        Args:
            weights: A :class:`WeightMatrix` built over the same ordering.
            identifier: External identifier to query.

        Returns:
            set of identifiers, or None if the matrix has no entry.
        """
        if weights.n_elements != len(self):
            raise ValidationError(
                f"Weight matrix has {weights.n_elements} elements, index has {len(self)}"
            )
        neighbors = weights.neighbors_of(self.index_of(identifier))
        if neighbors is None:
            return None
        return set(self.ids_of(neighbors))

    def __repr__(self) -> str:
        return f"IdIndex(size={len(self)})"
