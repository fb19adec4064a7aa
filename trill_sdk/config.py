"""Flattening of nested client config into ``--config key=value`` overrides.

The trill CLI parses each override value as a TOML literal, so leaves are
serialized here as TOML rather than JSON.

Examples:
    serialize_config_overrides({"model": {"temperature": 0.2}})
        -> ["model.temperature=0.2"]
    serialize_config_overrides({"tools": ["a", "b"]})
        -> ['tools=["a", "b"]']
"""

import json
import math
import re
from collections.abc import Mapping
from typing import Any

from .errors import ConfigError

_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


def serialize_config_overrides(config: Any) -> list[str]:
    """Flatten a nested config mapping into ``key=value`` override strings.

    One entry is produced per leaf key path, in insertion order. An empty
    nested mapping produces ``path={}``; an empty top-level mapping produces
    nothing.

    Raises:
        ConfigError: If the config is not a mapping, has an empty key, or
            holds a value that can't be written as a TOML literal.
    """
    if not isinstance(config, Mapping):
        raise ConfigError(
            f"Config overrides must be a mapping, got {type(config).__name__}"
        )
    overrides: list[str] = []
    _flatten(config, "", overrides)
    return overrides


def to_config_args(config: Any) -> list[str]:
    """Build the ``--config`` argument pairs for a nested config mapping."""
    args: list[str] = []
    for override in serialize_config_overrides(config):
        args.extend(["--config", override])
    return args


def _flatten(value: Mapping[str, Any], prefix: str, overrides: list[str]) -> None:
    if not value:
        if prefix:
            overrides.append(f"{prefix}={{}}")
        return

    for key, child in value.items():
        if not isinstance(key, str) or not key:
            raise ConfigError("Config override keys must be non-empty strings")
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(child, Mapping):
            _flatten(child, path, overrides)
        else:
            overrides.append(f"{path}={to_toml_value(child, path)}")


def to_toml_value(value: Any, path: str) -> str:
    """Serialize a single config value as a TOML literal."""
    if isinstance(value, str):
        return _toml_string(value)
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ConfigError(f"Config override at {path} must be a finite number")
        return repr(value)
    if isinstance(value, (list, tuple)):
        items = [to_toml_value(item, f"{path}[{i}]") for i, item in enumerate(value)]
        return f"[{', '.join(items)}]"
    if isinstance(value, Mapping):
        parts = []
        for key, child in value.items():
            if not isinstance(key, str) or not key:
                raise ConfigError("Config override keys must be non-empty strings")
            parts.append(f"{_toml_key(key)} = {to_toml_value(child, f'{path}.{key}')}")
        return f"{{{', '.join(parts)}}}"
    if value is None:
        raise ConfigError(f"Config override at {path} cannot be None")
    raise ConfigError(
        f"Unsupported config override value at {path}: {type(value).__name__}"
    )


def _toml_string(value: str) -> str:
    # A JSON string is a valid TOML basic string, except that TOML requires DEL escaped
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")


def _toml_key(key: str) -> str:
    if _BARE_KEY.match(key):
        return key
    return _toml_string(key)
