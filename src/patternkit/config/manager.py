"""Configuration management for the application."""
from __future__ import annotations
import json
import os
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from patternkit.domain.exceptions import ConfigurationError
from patternkit.config.schemas import AppConfig, validate_config
from patternkit.config.utils.env_expansion import expand_env_vars

ENV_PREFIX = "PATTERNKIT_"
CONFIG_FILE_ENV = f"{ENV_PREFIX}CONFIG"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Invalid boolean value: '{value}'")


# Environment variable suffix -> (config path, converter)
ENV_OVERRIDES: Dict[str, Tuple[Tuple[str, ...], Callable[[str], Any]]] = {
    "ENVIRONMENT": (("environment",), str),
    "DEBUG": (("debug",), _parse_bool),
    "OUTPUT_FORMAT": (("output_format",), str),
    "LOG_LEVEL": (("logging", "level"), str),
    "LOG_DESTINATION": (("logging", "destination"), str),
    "LOG_FILE": (("logging", "file_path"), str),
    "REGISTRY_ALLOW_OVERWRITE": (("registry", "allow_overwrite"), _parse_bool),
    "CHAIN_REQUIRE_HANDLER": (("chain", "require_handler"), _parse_bool),
}


class ConfigurationManager:
    """
    Loads, expands and validates application configuration.

    Sources, lowest precedence first:
    - schema defaults
    - a YAML or JSON file (explicit path, or ``PATTERNKIT_CONFIG``)
    - ``PATTERNKIT_*`` environment variables

    The validated AppConfig is built lazily on first access.
    """

    def __init__(self, config_file: Optional[str] = None):
        self._config_file = config_file or os.environ.get(CONFIG_FILE_ENV)
        self._lock = threading.RLock()
        self._app_config: Optional[AppConfig] = None

    @property
    def config_file(self) -> Optional[str]:
        return self._config_file

    @property
    def app_config(self) -> AppConfig:
        """Lazy load application configuration."""
        if self._app_config is None:
            with self._lock:
                if self._app_config is None:
                    self._app_config = self._load_app_config()
        return self._app_config

    def reload(self) -> AppConfig:
        with self._lock:
            self._app_config = None
        return self.app_config

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``logging.level``."""
        current: Any = self.app_config.model_dump()
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def _load_app_config(self) -> AppConfig:
        config_data: Dict[str, Any] = {}
        if self._config_file:
            config_data = self.load_from_file(self._config_file)
        config_data = expand_env_vars(config_data)
        config_data = self.apply_environment_overrides(config_data)
        return validate_config(config_data)

    @staticmethod
    def load_from_file(config_file: str) -> Dict[str, Any]:
        """
        Read a YAML or JSON configuration file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or not a mapping
        """
        path = Path(config_file)
        if not path.is_file():
            raise ConfigurationError(f"Configuration file not found: {config_file}")

        try:
            with path.open("r", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to parse configuration file {config_file}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {config_file} must contain a mapping")
        return data

    @staticmethod
    def apply_environment_overrides(config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply ``PATTERNKIT_*`` environment variables on top of file data."""
        result = dict(config_data)
        for suffix, (path, converter) in ENV_OVERRIDES.items():
            raw = os.environ.get(f"{ENV_PREFIX}{suffix}")
            if raw is None:
                continue
            target = result
            for part in path[:-1]:
                section = target.get(part)
                section = dict(section) if isinstance(section, dict) else {}
                target[part] = section
                target = section
            target[path[-1]] = converter(raw)
        return result


def get_config_manager(config_file: Optional[str] = None) -> ConfigurationManager:
    """Create a configuration manager for a config file path."""
    return ConfigurationManager(config_file)
