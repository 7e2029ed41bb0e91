"""Geometry access shared by the weight builders.

Vertex and centroid primitives come from shapely; this module only
decides which geometry kinds are accepted and how they are walked.
"""

from __future__ import annotations

from typing import Iterator, Sequence

import numpy as np
from shapely.geometry import MultiPolygon, Point, Polygon

from geostats.core.exceptions import DegenerateInputError, UnsupportedGeometryError

__all__ = [
    "SUPPORTED_GEOMETRIES",
    "check_geometries",
    "iter_rings",
    "centroid_coords",
]

SUPPORTED_GEOMETRIES = (Point, Polygon, MultiPolygon)


def check_geometries(geometries: Sequence) -> list:
    """Validate a geometry sequence and return it as a list.

    Raises:
        DegenerateInputError: If the sequence is empty.
        UnsupportedGeometryError: If any geometry is not a Point, Polygon or
            MultiPolygon.
    """
    geometries = list(geometries)
    if not geometries:
        raise DegenerateInputError("Cannot compute weights for an empty geometry set")

    for i, geom in enumerate(geometries):
        if not isinstance(geom, SUPPORTED_GEOMETRIES):
            raise UnsupportedGeometryError(
                f"Geometry at index {i} is {type(geom).__name__}, "
                f"supported kinds are Point, Polygon and MultiPolygon"
            )
    return geometries


def iter_rings(geom) -> Iterator[np.ndarray]:
    """Yield coordinate arrays of shape (n, 2) for every ring of a geometry.

    Polygon rings keep their closing vertex. A point yields a single
    one-vertex array; empty geometries yield nothing.
    """
    if geom.is_empty:
        return
    if isinstance(geom, Point):
        yield np.asarray(geom.coords, dtype=np.float64)[:, :2]
    elif isinstance(geom, Polygon):
        yield np.asarray(geom.exterior.coords, dtype=np.float64)[:, :2]
        for interior in geom.interiors:
            yield np.asarray(interior.coords, dtype=np.float64)[:, :2]
    elif isinstance(geom, MultiPolygon):
        for part in geom.geoms:
            yield from iter_rings(part)
    else:
        raise UnsupportedGeometryError(f"Unsupported geometry kind {type(geom).__name__}")


def centroid_coords(geometries: Sequence) -> np.ndarray:
    """Centroid of every geometry as an (N, 2) array.

    Points represent themselves. Polygon and MultiPolygon centroids are
    computed by shapely.

    Raises:
        DegenerateInputError: If a centroid cannot be computed (empty or
            non-finite geometry).
    """
    geometries = check_geometries(geometries)
    centroids = np.empty((len(geometries), 2), dtype=np.float64)

    for i, geom in enumerate(geometries):
        point = geom if isinstance(geom, Point) else geom.centroid
        if point.is_empty:
            raise DegenerateInputError(
                f"{type(geom).__name__} at index {i} is invalid, could not compute centroid"
            )
        centroids[i] = (point.x, point.y)

    if not np.isfinite(centroids).all():
        bad = int(np.flatnonzero(~np.isfinite(centroids).all(axis=1))[0])
        raise DegenerateInputError(f"Geometry at index {bad} has a non-finite centroid")

    return centroids
