"""Configuration file discovery and parsing."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from chatrelay.domain.models import PluginFilters

CONFIG_FILENAMES = ("relay.yml", "relay.yaml")
DEFAULT_PLUGIN_TYPE = "docker"


class ConfigError(Exception):
    """Raised when the config file is missing or malformed."""


def debug_enabled() -> bool:
    return os.getenv("DEBUG", "") != ""


@dataclass(frozen=True)
class AdapterConfig:
    name: str
    environment: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PluginConfig:
    type: str = DEFAULT_PLUGIN_TYPE
    image: str = ""
    command: Tuple[str, ...] = ()
    environment: Dict[str, str] = field(default_factory=dict)
    only_channels: Tuple[str, ...] = ()
    only_direct_messages: bool = False
    only_mentions: bool = False
    timeout: Optional[float] = None

    @property
    def label(self) -> str:
        """Human-readable identifier used in logs and errors."""
        if self.image:
            return self.image
        return " ".join(self.command)

    @property
    def filters(self) -> PluginFilters:
        return PluginFilters.build(
            only_channels=self.only_channels,
            only_direct_messages=self.only_direct_messages,
            only_mentions=self.only_mentions,
        )


@dataclass(frozen=True)
class RelayConfig:
    """Typed view over relay.yml."""

    adapters: Tuple[AdapterConfig, ...] = ()
    plugins: Tuple[PluginConfig, ...] = ()
    path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Any, path: Optional[Path] = None) -> "RelayConfig":
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path or 'config'}: top level must be a mapping")
        adapters = tuple(
            _parse_adapter(i, raw) for i, raw in enumerate(_as_list(data, "adapters"))
        )
        plugins = tuple(
            _parse_plugin(i, raw) for i, raw in enumerate(_as_list(data, "plugins"))
        )
        return cls(adapters=adapters, plugins=plugins, path=path)


def _as_list(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list")
    return value


def _parse_environment(where: str, raw: Any) -> Dict[str, str]:
    """Accept a mapping or a list of KEY=VALUE strings; expand ${VAR}."""
    if raw is None:
        return {}
    if isinstance(raw, list):
        pairs = {}
        for item in raw:
            key, sep, value = str(item).partition("=")
            if not sep or not key:
                raise ConfigError(f"{where}: bad environment entry {item!r}")
            pairs[key] = value
        raw = pairs
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: 'environment' must be a mapping or a list")
    return {str(k): os.path.expandvars("" if v is None else str(v)) for k, v in raw.items()}


def _parse_flag(where: str, raw: Dict[str, Any], key: str) -> bool:
    value = raw.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"{where}: '{key}' must be true or false, got {value!r}")
    return value


def _parse_adapter(index: int, raw: Any) -> AdapterConfig:
    where = f"adapters[{index}]"
    if isinstance(raw, str):
        raw = {"name": raw}
    if not isinstance(raw, dict) or not raw.get("name"):
        raise ConfigError(f"{where}: 'name' is required")
    return AdapterConfig(
        name=str(raw["name"]).strip().lower(),
        environment=_parse_environment(where, raw.get("environment")),
    )


def _parse_plugin(index: int, raw: Any) -> PluginConfig:
    where = f"plugins[{index}]"
    if isinstance(raw, str):
        raw = {"image": raw}
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: must be a mapping")

    command = raw.get("command") or ()
    if isinstance(command, str):
        command = command.split()
    plugin_type = str(raw.get("type") or ("command" if command else DEFAULT_PLUGIN_TYPE)).strip().lower()
    image = str(raw.get("image") or "")
    if plugin_type == "docker" and not image:
        raise ConfigError(f"{where}: 'image' is required for docker plugins")
    if plugin_type == "command" and not command:
        raise ConfigError(f"{where}: 'command' is required for command plugins")

    only_channels = raw.get("only_channels") or ()
    if isinstance(only_channels, (str, int)):
        only_channels = [only_channels]

    timeout = raw.get("timeout")
    try:
        timeout = float(timeout) if timeout is not None else None
    except (TypeError, ValueError):
        raise ConfigError(f"{where}: 'timeout' must be a number of seconds")
    if timeout is not None and timeout <= 0:
        raise ConfigError(f"{where}: 'timeout' must be positive")

    return PluginConfig(
        type=plugin_type,
        image=image,
        command=tuple(str(part) for part in command),
        environment=_parse_environment(where, raw.get("environment")),
        only_channels=tuple(str(c) for c in only_channels),
        only_direct_messages=_parse_flag(where, raw, "only_direct_messages"),
        only_mentions=_parse_flag(where, raw, "only_mentions"),
        timeout=timeout,
    )


def infer_config_path(
    directory: Optional[Path] = None,
    names: Sequence[str] = CONFIG_FILENAMES,
) -> Path:
    """Return the first existing config file in ``directory`` (default: cwd)."""
    base = Path(directory) if directory else Path.cwd()
    for name in names:
        candidate = base / name
        if candidate.is_file():
            return candidate
    raise ConfigError(f"No {' or '.join(names)} file found!")


def load_config(path: Optional[Path] = None) -> RelayConfig:
    """Parse the relay config file. ``.env`` is loaded by the caller."""
    config_path = Path(path) if path else infer_config_path()
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as e:
        raise ConfigError(f"{config_path}: invalid YAML: {e}") from e
    return RelayConfig.from_dict(data, path=config_path)
