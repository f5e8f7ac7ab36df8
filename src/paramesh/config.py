"""Process-wide defaults for tessellation and primitive generation.

Drivers and primitive generators fall back to these values whenever the
caller omits a subdivision count or the finite-difference step.  The
defaults can be overridden programmatically with :func:`configure` or
loaded from a YAML mapping with :func:`load_defaults`::

    curve_subdivisions: 48
    normal_epsilon: 1.0e-6
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Union

from paramesh.errors import InvalidConfigurationError


@dataclass(frozen=True)
class Defaults:
    """Immutable bundle of default tessellation settings."""

    curve_subdivisions: int = 24
    surface_subdivisions: int = 24
    normal_epsilon: float = 1e-5
    degree: int = 3
    slices: int = 32
    stacks: int = 1
    sphere_slices: int = 16
    sphere_stacks: int = 16
    torus_segments: int = 16

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


_FIELD_TYPES = {f.name: f.type for f in fields(Defaults)}
_current = Defaults()


def get_defaults() -> Defaults:
    """Return the active :class:`Defaults`."""

    return _current


def _validate(values: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(values) - set(_FIELD_TYPES))
    if unknown:
        raise InvalidConfigurationError(
            f"unknown configuration keys: {', '.join(unknown)}",
            {'unknown': unknown},
        )
    clean: Dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidConfigurationError(
                f"configuration value for {key!r} must be numeric, got {value!r}",
                {'key': key},
            )
        if _FIELD_TYPES[key] == 'int':
            if int(value) != value:
                raise InvalidConfigurationError(
                    f"configuration value for {key!r} must be an integer, got {value!r}",
                    {'key': key},
                )
            value = int(value)
            if value < 1:
                raise InvalidConfigurationError(
                    f"configuration value for {key!r} must be positive, got {value!r}",
                    {'key': key},
                )
        else:
            value = float(value)
            if value <= 0.0:
                raise InvalidConfigurationError(
                    f"configuration value for {key!r} must be positive, got {value!r}",
                    {'key': key},
                )
        clean[key] = value
    return clean


def configure(**overrides: Any) -> Defaults:
    """Replace selected defaults and return the new active set."""

    global _current
    _current = replace(_current, **_validate(overrides))
    return _current


def reset_defaults() -> Defaults:
    """Restore the built-in defaults."""

    global _current
    _current = Defaults()
    return _current


def load_defaults(path: Union[str, Path]) -> Defaults:
    """Load overrides from a YAML file and make them active."""

    import yaml

    path = Path(path)
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(
            f"configuration file must contain a mapping, got {type(data)!r}",
            {'path': str(path)},
        )
    return configure(**data)


__all__ = [
    'Defaults',
    'get_defaults',
    'configure',
    'reset_defaults',
    'load_defaults',
]
