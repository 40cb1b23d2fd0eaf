"""Refinement settings with YAML file and environment override support.

The tunables of the engine (the Bezier flatness threshold, the pass cap
that guards de Casteljau splitting against non-termination, the size
floor below which a split piece is accepted as flat, the largest
accepted subdivision level, boundary pinning, the degenerate-vector
tolerance) live in a :class:`RefineSettings` dataclass.  Defaults are
usable as-is; a YAML file can override any subset of them.

Search order used by :func:`load_settings` when no explicit path is
given:
    1. The file named by the ``YAPMESH_SETTINGS`` environment variable
    2. The user config file (~/.config/yapmesh/settings.yaml)
    3. Built-in defaults

Example settings file::

    flatness_threshold: 1.01
    max_bezier_passes: 32
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from yapmesh.errors import ConfigurationError

__all__ = [
    "YAPMESH_SETTINGS",
    "RefineSettings",
    "DEFAULT_SETTINGS",
    "settings_from_mapping",
    "load_settings",
]

# Environment variable naming a settings file
YAPMESH_SETTINGS = "YAPMESH_SETTINGS"

_USER_SETTINGS = Path("~/.config/yapmesh/settings.yaml")


@dataclass(frozen=True)
class RefineSettings:
    """Tunables shared by the refinement algorithms."""

    flatness_threshold: float = 1.03
    max_bezier_passes: int = 24
    max_level: int = 10
    pin_boundary: bool = True
    degenerate_tol: float = 1e-12
    split_floor: float = 1e-6

    def __post_init__(self) -> None:
        if not self.flatness_threshold > 1.0:
            raise ConfigurationError(
                f"flatness_threshold must be > 1.0, got {self.flatness_threshold}")
        if self.max_bezier_passes < 1:
            raise ConfigurationError(
                f"max_bezier_passes must be >= 1, got {self.max_bezier_passes}")
        if self.max_level < 0:
            raise ConfigurationError(f"max_level must be >= 0, got {self.max_level}")
        if not 0.0 <= self.split_floor < 1.0:
            raise ConfigurationError(
                f"split_floor must be in [0, 1), got {self.split_floor}")
        if self.degenerate_tol < 0:
            raise ConfigurationError(
                f"degenerate_tol must be >= 0, got {self.degenerate_tol}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> "RefineSettings":
        return settings_from_mapping(overrides, base=self)


DEFAULT_SETTINGS = RefineSettings()


def settings_from_mapping(data: Optional[Mapping[str, Any]],
                          base: RefineSettings = DEFAULT_SETTINGS) -> RefineSettings:
    """Return ``base`` updated with the keys of ``data``.

    Unknown keys raise :class:`ConfigurationError` so that a typo in a
    settings file does not silently fall back to a default.
    """
    if not data:
        return base
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"settings must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(RefineSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"unknown settings keys: {', '.join(unknown)}")

    coerced: Dict[str, Any] = {}
    for key, value in data.items():
        default = getattr(DEFAULT_SETTINGS, key)
        try:
            if isinstance(default, bool):
                if not isinstance(value, bool):
                    raise TypeError(value)
                coerced[key] = value
            elif isinstance(default, int):
                if isinstance(value, bool) or int(value) != value:
                    raise TypeError(value)
                coerced[key] = int(value)
            else:
                if isinstance(value, bool):
                    raise TypeError(value)
                coerced[key] = float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"bad value for setting {key!r}: {value!r}") from exc
    return replace(base, **coerced)


def _settings_path() -> Optional[Path]:
    env_path = os.environ.get(YAPMESH_SETTINGS)
    if env_path:
        path = Path(env_path).expanduser()
        if not path.is_file():
            raise ConfigurationError(
                f"{YAPMESH_SETTINGS} names a missing settings file: {path}")
        return path
    user = _USER_SETTINGS.expanduser()
    if user.is_file():
        return user
    return None


def load_settings(path: Optional[Union[str, Path]] = None) -> RefineSettings:
    """Load refinement settings from YAML.

    Args:
        path: Explicit settings file.  When omitted the environment
              variable and user config file are consulted, and the
              defaults are returned if neither exists.

    Raises:
        ConfigurationError: If the file cannot be parsed or holds bad
                            values.
    """
    if path is None:
        path = _settings_path()
        if path is None:
            return DEFAULT_SETTINGS
    path = Path(path).expanduser()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"settings file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"cannot parse settings file {path}: {exc}") from exc

    return settings_from_mapping(data)
