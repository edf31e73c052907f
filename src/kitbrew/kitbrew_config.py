"""
Configuration parameters for kitbrew.
"""

import os
import pathlib
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from kitbrew.kitbrew_exceptions import ConfigError
from kitbrew.kitbrew_settings import KitbrewSettings


@dataclass
class KitbrewConfig:
    """
    Configuration parameters
    """

    prefix: Optional[str] = None
    cache_directory: Optional[str] = None
    http_timeout: float = 60.0
    formula_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.prefix is None:
            self.prefix = KitbrewSettings.get_default_prefix()
        if self.cache_directory is None:
            self.cache_directory = KitbrewSettings.get_global_cache_directory()
        if isinstance(self.http_timeout, bool) or not isinstance(self.http_timeout, (int, float)):
            raise ConfigError(f"'http_timeout' must be a number, got {self.http_timeout!r}")
        if self.http_timeout <= 0:
            raise ConfigError(f"'http_timeout' must be positive, got {self.http_timeout}")
        self.http_timeout = float(self.http_timeout)
        self.prefix = os.path.expanduser(self.prefix)
        self.cache_directory = os.path.expanduser(self.cache_directory)
        if self.formula_file is not None:
            self.formula_file = os.path.expanduser(self.formula_file)

    @property
    def bin_directory(self) -> pathlib.Path:
        return pathlib.Path(self.prefix) / "bin"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "KitbrewConfig":
        """
        Create a KitbrewConfig instance from a dictionary

        Raises:
            ConfigError: If the dictionary holds unknown keys or bad values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        for key in ("prefix", "cache_directory", "formula_file"):
            value = d.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"'{key}' must be a string, got {value!r}")

        return cls(**d)

    @classmethod
    def from_toml(cls, path: str) -> "KitbrewConfig":
        """
        Load the [kitbrew] table of a TOML file.

        Args:
            path: Path to the TOML file

        Returns:
            KitbrewConfig instance

        Raises:
            ConfigError: If the file is missing, unparsable, or invalid
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            raise ConfigError(f"Configuration file not found: {path}")
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}")

        section = data.get("kitbrew", {})
        if not isinstance(section, dict):
            raise ConfigError(f"[kitbrew] in {path} must be a table")

        return cls.from_dict(section)
