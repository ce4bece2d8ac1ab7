"""
CLI Configuration

Loads configuration from a YAML file and environment variables.
Values are looked up with dotted keys, e.g. ``config.get("local.web_root")``.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class ConfigurationError(Exception):
    """Raised when configuration or command settings are missing or invalid."""
    pass


# Configuration file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path.home() / ".platformcli" / "config.yaml",
]


DEFAULT_CONFIG: Dict[str, Any] = {
    "application": {
        "name": "Platform CLI",
        "executable": "platformcli",
    },
    "service": {
        "name": "Platform",
    },
    "api": {
        "base_url": "https://api.platform.example/api",
        "token": None,
        "timeout": 30,
    },
    "local": {
        # Web root link created in the project, relative to the source dir
        "web_root": "_www",
        # Data shared between builds, relative to the source dir
        "shared_dir": "shared",
        "build_dir": ".platform/local/builds",
        "copy_on_windows": False,
    },
}


# Environment variable -> dotted config key
ENV_OVERRIDES = {
    "PLATFORMCLI_API_URL": "api.base_url",
    "PLATFORMCLI_TOKEN": "api.token",
    "PLATFORMCLI_WEB_ROOT": "local.web_root",
    "PLATFORMCLI_COPY_ON_WINDOWS": "local.copy_on_windows",
}

_BOOLEAN_KEYS = {"local.copy_on_windows"}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class CliConfig:
    """Configuration for the CLI and local builds."""

    def __init__(self, config_path: Optional[Path] = None, env: Optional[Dict[str, str]] = None):
        self._config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        self._load_config(config_path)
        self._apply_env_overrides(os.environ if env is None else env)

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from a YAML file."""
        if explicit_path is not None and not Path(explicit_path).exists():
            raise ConfigurationError(f"Config file not found: {explicit_path}")
        search_paths = [Path(explicit_path)] if explicit_path else CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if not config_path.exists():
                continue
            with open(config_path, 'r', encoding='utf-8') as f:
                try:
                    user_config = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
            if not isinstance(user_config, dict):
                raise ConfigurationError(f"Config file must contain a mapping: {config_path}")
            self._config = _deep_merge(self._config, user_config)
            self._config_path = config_path
            return

    def _apply_env_overrides(self, env) -> None:
        """Apply environment variable overrides."""
        for env_var, key in ENV_OVERRIDES.items():
            if env_var in env:
                value: Any = env[env_var]
                if key in _BOOLEAN_KEYS:
                    value = _parse_bool(value)
                self.set(key, value)

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted-key lookup, e.g. ``get("local.shared_dir")``."""
        node: Any = self._config
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def has(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def set(self, key: str, value: Any) -> None:
        parts = key.split(".")
        node = self._config
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as dict."""
        return copy.deepcopy(self._config)


# Global config instance (lazy-loaded)
_config: Optional[CliConfig] = None


def get_config(config_path: Optional[Path] = None) -> CliConfig:
    """Get the global config instance, loading if needed."""
    global _config
    if _config is None or config_path is not None:
        _config = CliConfig(config_path)
    return _config
