"""Coordinate quantization for tolerance-based vertex and edge matching.

Coordinates are multiplied by a scale factor and floored, so two vertices
exported with floating point noise below ``1 / scale`` hash to the same key.
Floor (not round, not truncation toward zero) keeps negative coordinates
consistent: ``quantize(-20.23423, 0.0, 10000)[0] == -202343``.
"""

from __future__ import annotations

import math
from typing import Iterator

import numpy as np

from geostats.core.exceptions import ConfigurationError

__all__ = [
    "CoordinateQuantizer",
    "edge_key",
    "quantize",
    "quantize_edge",
]


def quantize(x: float, y: float, scale: float) -> tuple[int, int]:
    """Integer key ``(floor(x * scale), floor(y * scale))`` for a coordinate."""
    return math.floor(x * scale), math.floor(y * scale)


def edge_key(a: tuple[int, int], b: tuple[int, int]) -> tuple[int, int, int, int]:
    """Key for the edge between two quantized vertices, ordered so that an
    edge walked clockwise by one polygon and counter-clockwise by its neighbor
    yields the same key."""
    if b < a:
        a, b = b, a
    return a + b


def quantize_edge(
    start: tuple[float, float], end: tuple[float, float], scale: float
) -> tuple[int, int, int, int]:
    """Orientation-independent key for the edge between two coordinates."""
    return edge_key(quantize(start[0], start[1], scale), quantize(end[0], end[1], scale))


class CoordinateQuantizer:
    """Quantizer bound to a fixed tolerance scale.

    Args:
        scale: Multiplier applied before flooring (e.g. 1000 or 10000).
            Larger values distinguish closer vertices.

    Raises:
        ConfigurationError: If scale is not a positive finite number.
    """

    def __init__(self, scale: float = 1000.0):
        scale = float(scale)
        if not math.isfinite(scale) or scale <= 0:
            raise ConfigurationError(f"Tolerance scale must be positive and finite, got {scale}")
        self.scale = scale

    def __call__(self, x: float, y: float) -> tuple[int, int]:
        return quantize(x, y, self.scale)

    def edge(self, start: tuple[float, float], end: tuple[float, float]) -> tuple[int, int, int, int]:
        return quantize_edge(start, end, self.scale)

    def quantize_array(self, coords: np.ndarray) -> np.ndarray:
        """Vectorized quantization of an (n, 2+) coordinate array to int64 keys."""
        coords = np.asarray(coords, dtype=np.float64)
        return np.floor(coords[:, :2] * self.scale).astype(np.int64)

    def ring_edges(self, ring: np.ndarray) -> Iterator[tuple[int, int, int, int]]:
        """Edge keys between consecutive vertices of a ring.

        Edges whose endpoints quantize to the same vertex are skipped.
        """
        vertices = [tuple(v) for v in self.quantize_array(ring).tolist()]
        for a, b in zip(vertices[:-1], vertices[1:]):
            if a != b:
                yield edge_key(a, b)

    def __repr__(self) -> str:
        return f"CoordinateQuantizer(scale={self.scale})"
