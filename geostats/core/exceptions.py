"""Custom exceptions for geostats.

This module defines all custom exceptions used throughout the package.
Every failure is detected at the boundary of the component responsible for it
and raised as one of these types; nothing is deferred into numeric code.
"""


class GeoStatsError(Exception):
    """Base exception class for all geostats errors."""

    pass


class ConfigurationError(GeoStatsError, ValueError):
    """Raised when there are configuration errors.

    This exception is raised when builder or engine parameters are invalid
    or contradictory.

    Examples
    --------
    >>> from geostats.core.exceptions import ConfigurationError
    >>> raise ConfigurationError("Need to specify either a cutoff or use distance as weight")
    """

    pass


class UnsupportedGeometryError(ConfigurationError, TypeError):
    """Raised when a geometry kind cannot be handled.

    Only Point, Polygon and MultiPolygon geometries are supported.
    """

    pass


class UnsupportedTransformError(ConfigurationError):
    """Raised when a weight transform is declared but not implemented."""

    pass


class DegenerateInputError(GeoStatsError, ValueError):
    """Raised when the input cannot support the computation.

    Examples are a constant observation vector (zero variance), an empty
    geometry set, or a geometry whose centroid cannot be computed.
    """

    pass


class ReferentialError(GeoStatsError, KeyError):
    """Raised when an identifier has no entry or lies outside ``[0, N)``."""

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""


class ValidationError(GeoStatsError, ValueError):
    """Raised when validation fails.

    This exception is raised when a list representation of a weight matrix
    is malformed (length mismatch, negative weights, self pairs).
    """

    pass
