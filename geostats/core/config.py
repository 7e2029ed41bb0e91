"""Base configuration class.

Configurations are flat dataclasses of JSON scalars, saved to and loaded
from JSON. Field values are type-checked on assignment and the whole object
is validated after construction and after every later change.
"""

import dataclasses
import json
from pathlib import Path
from typing import Any

import numpy as np
from typing_extensions import Self

from geostats.core.exceptions import ConfigurationError
from geostats.utils.logging import get_logger

logger = get_logger()

__all__ = ["Config", "BASIC_TYPES"]

# Allowed field value types
BASIC_TYPES = (int, float, str, bool, type(None))


@dataclasses.dataclass
class Config:
    """Base class for engine configurations.

    Subclasses declare scalar fields and override :meth:`validate`, raising
    :class:`ConfigurationError` for bad values. A change made through
    :meth:`update` or attribute assignment that fails validation is rolled
    back, so a config object is valid for its whole lifetime.

    Examples
    --------
    >>> @dataclass
    ... class RunConfig(Config):
    ...     permutations: int = 999
    ...
    ...     def validate(self):
    ...         if self.permutations <= 0:
    ...             raise ConfigurationError("permutations must be positive")
    >>>
    >>> config = RunConfig(permutations=99)
    >>> config.save("run.json")
    >>> RunConfig.load("run.json") == config
    True
    """

    def __post_init__(self) -> None:
        self.validate()
        object.__setattr__(self, "_ready", True)

    def validate(self) -> None:
        """Check field values. The base class accepts everything."""

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        elif self.__dict__.get("_ready", False):
            self.update(**{name: value})
        else:
            object.__setattr__(self, name, self._check_value(name, value))

    @staticmethod
    def _check_value(name: str, value: Any) -> Any:
        """Unwrap numpy scalars and reject non-scalar values."""
        if isinstance(value, np.generic):
            value = value.item()
        if not isinstance(value, BASIC_TYPES):
            raise ConfigurationError(
                f"Attribute '{name}' has invalid type {type(value).__name__}. "
                f"Only int, float, str, bool and None are allowed."
            )
        return value

    def update(self, **kwargs) -> None:
        """Change several fields at once.

        Raises:
            ConfigurationError: If a field is unknown or the new values do
                not validate. The config is left unchanged in that case.
        """
        names = {field.name for field in dataclasses.fields(self)}
        unknown = sorted(set(kwargs) - names)
        if unknown:
            raise ConfigurationError(f"Unknown fields for {self.__class__.__name__}: {unknown}")

        checked = {name: self._check_value(name, value) for name, value in kwargs.items()}
        previous = {name: self.__dict__[name] for name in checked}
        self.__dict__.update(checked)
        try:
            self.validate()
        except ConfigurationError:
            self.__dict__.update(previous)
            raise

    def to_dict(self) -> dict[str, Any]:
        return {field.name: getattr(self, field.name) for field in dataclasses.fields(self)}

    def save(self, path: str | Path) -> None:
        """Write the config as JSON, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> Self:
        """Create a config from a dict; missing keys keep their defaults.

        Unknown keys are ignored with a warning.
        """
        names = {field.name for field in dataclasses.fields(cls)}
        unknown = sorted(set(config_dict) - names)
        if unknown:
            logger.warning(f"Ignoring unknown {cls.__name__} keys: {unknown}")
        return cls(**{key: value for key, value in config_dict.items() if key in names})

    @classmethod
    def load(cls, path: str | Path) -> Self:
        """Load a config written by :meth:`save`.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
