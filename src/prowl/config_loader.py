"""Load ProwlConfig from prowl.yaml / prowl.toml next to the document.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from prowl._errors import ConfigError
from prowl.config import ProwlConfig

_CONFIG_NAMES = ("prowl.yaml", "prowl.yml", "prowl.toml")

# Expected type of each configurable field.  bool is checked separately
# because it is a subclass of int.
_FIELD_TYPES: dict[str, type | tuple[type, ...]] = {
    "host": str,
    "port": int,
    "open_browser": bool,
    "debounce_ms": int,
    "send_timeout": (int, float),
    "fallback_title": str,
}
_KNOWN_KEYS = frozenset(_FIELD_TYPES)


def load_config(target: str | Path, **overrides: object) -> ProwlConfig:
    """Load ProwlConfig for *target*, optionally merging a prowl config file.

    Looks for prowl.yaml, prowl.yml, or prowl.toml in the directory that
    contains the target.  Overrides take precedence; ``None`` overrides are
    ignored so unset CLI flags do not mask file values.

    Raises:
        ConfigError: If a config file exists but cannot be parsed, or a
            value has the wrong type or is out of range.

    """
    target = Path(target)
    file_config = read_config_file(target.absolute().parent)
    given = {k: v for k, v in overrides.items() if v is not None}
    merged = {**file_config, **_check_values(given, "arguments")}
    return ProwlConfig(target=target, **merged)  # type: ignore[arg-type]


def read_config_file(directory: Path) -> dict[str, object]:
    """Read prowl config from yaml/toml if present. Returns empty dict otherwise."""
    for name in _CONFIG_NAMES:
        path = directory / name
        if not path.is_file():
            continue
        if path.suffix == ".toml":
            return _parse_toml(path)
        return _parse_yaml(path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return _check_values(_flatten_prowl_section(data), path.name)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _check_values(_flatten_prowl_section(data), path.name)


def _flatten_prowl_section(data: dict[str, object]) -> dict[str, object]:
    """Extract prowl.* keys into top-level config, dropping unknown keys."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _KNOWN_KEYS:
            result[k] = v
    section = data.get("prowl")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _KNOWN_KEYS:
                result[k] = v
    return result


def _check_values(values: dict[str, object], source: str) -> dict[str, object]:
    """Reject values of the wrong type; int send_timeouts become floats.

    Raises:
        ConfigError: On the first bad value, naming *source*.

    """
    checked: dict[str, object] = {}
    for key, value in values.items():
        expected = _FIELD_TYPES.get(key)
        if expected is None:
            checked[key] = value
            continue
        is_bool = isinstance(value, bool)
        if not isinstance(value, expected) or (is_bool and expected is not bool):
            names = expected.__name__ if isinstance(expected, type) else "number"
            msg = f"{source}: {key} must be {names}, got {type(value).__name__}"
            raise ConfigError(msg)
        checked[key] = value
    _check_ranges(checked, source)
    if "send_timeout" in checked:
        checked["send_timeout"] = float(checked["send_timeout"])  # type: ignore[arg-type]
    return checked


def _check_ranges(values: dict[str, object], source: str) -> None:
    port = values.get("port")
    if isinstance(port, int) and not 0 <= port <= 65535:
        msg = f"{source}: port must be between 0 and 65535, got {port}"
        raise ConfigError(msg)
    for key in ("send_timeout", "debounce_ms"):
        value = values.get(key)
        if isinstance(value, (int, float)) and value <= 0:
            msg = f"{source}: {key} must be greater than 0, got {value}"
            raise ConfigError(msg)
