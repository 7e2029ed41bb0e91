"""Core components for geostats.

Provides fundamental abstractions shared by the builders and the engine:
- Config: Base class for serializable, type-checked configurations
- Exception hierarchy rooted at GeoStatsError
"""

from .config import Config
from .exceptions import (
    ConfigurationError,
    DegenerateInputError,
    GeoStatsError,
    ReferentialError,
    UnsupportedGeometryError,
    UnsupportedTransformError,
    ValidationError,
)

__all__ = [
    "Config",
    # Exceptions
    "GeoStatsError",
    "ConfigurationError",
    "UnsupportedGeometryError",
    "UnsupportedTransformError",
    "DegenerateInputError",
    "ReferentialError",
    "ValidationError",
]
