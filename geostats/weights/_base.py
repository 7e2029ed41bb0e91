"""Common interface of all weight builders."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Hashable, Sequence

from geostats.core.exceptions import ValidationError
from geostats.types import IdIndex, WeightMatrix

__all__ = ["WeightBuilder"]


class WeightBuilder(ABC):
    """Computes a :class:`WeightMatrix` from an ordered geometry sequence.

    Builders are stateless with respect to their input: configuration is
    fixed at construction and every call returns a fresh matrix indexed by
    geometry position.
    """

    @abstractmethod
    def compute_weights(self, geometries: Sequence) -> WeightMatrix:
        """Build weights for geometries indexed ``0..len(geometries)``."""

    def compute_weights_with_ids(
        self, geometries: Sequence, ids: Sequence[Hashable]
    ) -> tuple[WeightMatrix, IdIndex]:
        """Build weights and the id mapping for caller-supplied identifiers.

        The matrix stays positional; the returned :class:`IdIndex` translates
        external identifiers to and from its indices.
        """
        geometries = list(geometries)
        index = IdIndex(ids)
        if len(index) != len(geometries):
            raise ValidationError(
                f"Got {len(index)} ids for {len(geometries)} geometries"
            )
        return self.compute_weights(geometries), index

    def _params(self) -> dict:
        return {}

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self._params().items())
        return f"{self.__class__.__name__}({params})"
