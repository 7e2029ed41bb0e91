"""Configuration for the LISA engine."""

from dataclasses import dataclass
from typing import Optional

from geostats.core.config import Config
from geostats.core.exceptions import ConfigurationError

__all__ = ["LisaConfig"]

_METHODS = ("full", "lookup")


@dataclass
class LisaConfig(Config):
    """Parameters of a local Moran's I run.

    Attributes:
        permutations: Number of conditional permutations per observation.
        keep_simulations: Return the (N, permutations) simulated statistics.
        permutation_method: ``"full"`` draws fresh neighbor sets for every
            observation, ``"lookup"`` shares draws between observations with
            the same neighbor count.
        seed: Seed for reproducible inference; None draws from OS entropy.
        n_threads: Cap on numba threads for the run, 0 keeps the current pool.
    """

    permutations: int = 999
    keep_simulations: bool = False
    permutation_method: str = "lookup"
    seed: Optional[int] = None
    n_threads: int = 0

    def validate(self) -> None:
        if isinstance(self.permutations, bool) or not isinstance(self.permutations, int):
            raise ConfigurationError(f"permutations must be an int, got {self.permutations!r}")
        if self.permutations <= 0:
            raise ConfigurationError(f"permutations must be positive, got {self.permutations}")

        method = str(getattr(self.permutation_method, "value", self.permutation_method)).lower()
        if method not in _METHODS:
            raise ConfigurationError(
                f"Unknown permutation_method '{self.permutation_method}', expected one of {_METHODS}"
            )

        if self.seed is not None:
            if isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0:
                raise ConfigurationError(f"seed must be a non-negative int or None, got {self.seed!r}")

        if isinstance(self.n_threads, bool) or not isinstance(self.n_threads, int) or self.n_threads < 0:
            raise ConfigurationError(f"n_threads must be a non-negative int, got {self.n_threads!r}")

        # Normalized in place, bypassing update() to avoid re-validation
        object.__setattr__(self, "permutation_method", method)
        object.__setattr__(self, "keep_simulations", bool(self.keep_simulations))
