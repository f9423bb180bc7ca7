"""Configuration loading for tagdoc (.tagdoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".tagdoc.yml"

DEFAULT_ACCESS = ("public", "protected", "private")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ResolveConfig:
    """Switches consumed by the graph resolver."""

    access: List[str] = field(default_factory=lambda: list(DEFAULT_ACCESS))
    auto_private: bool = True
    keep_unexported: bool = False
    keep_undocumented: bool = True
    remove_common_path: bool = False
    strict: bool = False


@dataclass
class TagDocConfig:
    """Represents the settings defined in .tagdoc.yml."""

    root: Path
    resolve: ResolveConfig = field(default_factory=ResolveConfig)


def load_config(config_path: Path) -> TagDocConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TagDocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    resolve_data = data.get("resolve")
    if resolve_data is not None and not isinstance(resolve_data, dict):
        raise ConfigError("'resolve' must be a mapping")
    resolve_data = resolve_data or {}

    defaults = ResolveConfig()
    access = _as_str_list(resolve_data.get("access")) if "access" in resolve_data else defaults.access

    resolve = ResolveConfig(
        access=access,
        auto_private=_flag(resolve_data, "auto_private", defaults.auto_private),
        keep_unexported=_flag(resolve_data, "keep_unexported", defaults.keep_unexported),
        keep_undocumented=_flag(resolve_data, "keep_undocumented", defaults.keep_undocumented),
        remove_common_path=_flag(resolve_data, "remove_common_path", defaults.remove_common_path),
        strict=_flag(resolve_data, "strict", defaults.strict),
    )
    return TagDocConfig(root=root, resolve=resolve)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _flag(data: Dict[str, Any], key: str, default: bool) -> bool:
    if key not in data:
        return default
    value = _as_bool(data[key])
    if value is None:
        raise ConfigError(f"'resolve.{key}' must be a boolean")
    return value


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_ACCESS",
    "ResolveConfig",
    "TagDocConfig",
    "load_config",
]
