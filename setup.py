"""Setup script for geostats.

The permutation kernels are numba-compiled at first call (and cached to
``__pycache__``), so no extension modules are built at install time.

Usage:
    # Install package
    pip install -e .

    # Install with test dependencies
    pip install -e ".[test]"
"""

from setuptools import find_packages, setup

# =============================================================================
# Main Setup
# =============================================================================

if __name__ == "__main__":
    setup(
        name="geostats",
        version="0.1.0",
        description="Spatial weight matrices and local Moran's I with conditional permutation",
        packages=find_packages(include=["geostats", "geostats.*"]),
        python_requires=">=3.10",
        install_requires=[
            "numpy>=1.23",
            "scipy>=1.9",
            "numba>=0.57",
            "pandas>=1.5",
            "shapely>=2.0",
            "typing_extensions>=4.4",
        ],
        extras_require={
            "test": ["pytest>=7"],
        },
    )
