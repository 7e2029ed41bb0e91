"""Test module for verifying geostats imports and package utilities.

This module tests:
1. Core package imports
2. Public re-exports
3. Logging utilities
4. Exception hierarchy
"""

import logging

import pytest


class TestCoreImports:
    """Test core geostats package imports."""

    def test_import_geostats(self):
        """Test that the main package can be imported."""
        import geostats

        assert geostats is not None

    def test_import_version(self):
        """Test that version information is accessible."""
        from geostats import __version__

        assert isinstance(__version__, str)

    def test_public_api(self):
        """Test that the top-level names are exported."""
        import geostats

        for name in (
            "WeightMatrix",
            "IdIndex",
            "QueenWeights",
            "RookWeights",
            "DistanceWeights",
            "CoordinateQuantizer",
            "lisa",
            "LISAResult",
            "LisaConfig",
        ):
            assert name in geostats.__all__
            assert hasattr(geostats, name)

    def test_submodules(self):
        """Test that submodules are reachable from the package."""
        import geostats

        for module in ("core", "kernels", "metrics", "types", "utils", "weights"):
            assert hasattr(geostats, module)


class TestLogging:
    """Test logging utilities."""

    def test_package_logger(self):
        """Test that the default logger is the package logger."""
        from geostats.utils import get_logger

        logger = get_logger()
        assert logger.name == "geostats"
        assert not logger.propagate

    def test_set_log_level(self):
        """Test changing the level of the package logger."""
        from geostats.utils import get_logger, set_log_level

        logger = get_logger()
        previous = logger.level
        try:
            set_log_level("DEBUG")
            assert logger.level == logging.DEBUG
        finally:
            set_log_level(previous)

    def test_disable_enable(self):
        """Test silencing and restoring the package logger."""
        from geostats.utils import disable_logging, enable_logging, get_logger, set_log_level

        logger = get_logger()
        previous = logger.level
        try:
            disable_logging()
            assert logger.level > logging.CRITICAL
            enable_logging(level="INFO")
            assert logger.level == logging.INFO
        finally:
            set_log_level(previous)


class TestExceptions:
    """Test the exception hierarchy."""

    def test_hierarchy(self):
        from geostats.core import (
            ConfigurationError,
            DegenerateInputError,
            GeoStatsError,
            ReferentialError,
            UnsupportedGeometryError,
            UnsupportedTransformError,
            ValidationError,
        )

        for exc in (
            ConfigurationError,
            DegenerateInputError,
            ReferentialError,
            UnsupportedGeometryError,
            UnsupportedTransformError,
            ValidationError,
        ):
            assert issubclass(exc, GeoStatsError)

        assert issubclass(UnsupportedGeometryError, TypeError)
        assert issubclass(ReferentialError, KeyError)
        assert issubclass(ValidationError, ValueError)

    def test_referential_error_message(self):
        """Test that KeyError quoting does not leak into the message."""
        from geostats.core import ReferentialError

        with pytest.raises(ReferentialError) as info:
            raise ReferentialError("Unknown identifier 'x'")
        assert str(info.value) == "Unknown identifier 'x'"
