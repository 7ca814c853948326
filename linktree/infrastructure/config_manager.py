#!/usr/bin/env python3
"""Layered configuration for the linktree command.

Settings for one run are assembled from up to four layers, later layers
overriding earlier ones key by key:

1. Compiled defaults (DEFAULT_CONFIG)
2. A YAML config file given with --config
3. LINKTREE_* environment variables
4. Command-line options

Every layer is stored under the top-level ``linktree`` section.

Example:
    >>> config = ConfigManager("linktree.yaml")
    >>> config.load_dict({"linktree": {"on_existing": "skip"}}, ConfigSource.CLI_ARGS)
    >>> config.get_section()["on_existing"]
    'skip'
"""

import copy
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from linktree.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode
from linktree.core.errors import ConfigurationError

ENV_PREFIX = "LINKTREE_"
ENV_NESTING = "__"


class ConfigSource(Enum):
    """Configuration layers, lowest precedence first."""

    COMPILED_DEFAULTS = 1
    USER_CONFIG = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4


class ConfigManager:
    """Merges the configuration layers of one run into a single section."""

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional YAML config file to load
            load_environment: Whether to read LINKTREE_* variables

        Raises:
            ConfigurationError: If config_file cannot be loaded
        """
        self._layers: Dict[ConfigSource, Dict[str, Any]] = {
            ConfigSource.COMPILED_DEFAULTS: copy.deepcopy(DEFAULT_CONFIG)
        }

        if config_file:
            self.load_file(config_file)

        if load_environment:
            self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load a YAML config file into a layer.

        The file may hold the ``linktree:`` section or just its contents.

        Args:
            file_path: Path to YAML config file
            source: Layer to load into

        Raises:
            ConfigurationError: If the file is missing, unreadable, malformed,
                or not a mapping
        """
        path = Path(file_path).expanduser()

        if not path.exists():
            raise ConfigurationError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"YAML parse error in {file_path}: {e}")
        except OSError as e:
            raise ConfigurationError(
                f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR
            )

        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid config format in {file_path}")

        if ConfigKey.ROOT not in data:
            data = {ConfigKey.ROOT: data}

        self._layers[source] = data

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource) -> None:
        """Replace a layer with a copy of config_data."""
        self._layers[source] = copy.deepcopy(config_data)

    def _load_environment(self) -> None:
        """Build the environment layer from LINKTREE_* variables.

        A double underscore separates nesting levels, so
        LINKTREE_ON_EXISTING=skip sets ``on_existing`` and
        LINKTREE_LOGGING__LEVEL=DEBUG sets ``logging.level``. Variables with
        an empty level (LINKTREE_LOGGING__) are ignored.
        """
        section: Dict[str, Any] = {}

        for name, raw in os.environ.items():
            if not name.startswith(ENV_PREFIX):
                continue

            keys = name[len(ENV_PREFIX):].lower().split(ENV_NESTING)
            if not all(keys):
                continue

            target = section
            for key in keys[:-1]:
                target = target.setdefault(key, {})
                if not isinstance(target, dict):
                    break
            else:
                target[keys[-1]] = self._parse_env_value(raw)

        if section:
            self._layers[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: section}

    def _parse_env_value(self, value: str) -> Any:
        """Parse an environment value as bool, int, float, or str."""
        lowered = value.lower()
        if lowered in ("true", "yes"):
            return True
        if lowered in ("false", "no"):
            return False

        for convert in (int, float):
            try:
                return convert(value)
            except ValueError:
                pass

        return value

    def get_all(self) -> Dict[str, Any]:
        """Deep-merge all layers, lowest precedence first."""
        merged: Dict[str, Any] = {}
        for source in sorted(self._layers, key=lambda s: s.value):
            merged = self._deep_merge(merged, self._layers[source])
        return copy.deepcopy(merged)

    def get_section(self) -> Dict[str, Any]:
        """Return the merged ``linktree`` section."""
        return self.get_all().get(ConfigKey.ROOT, {})

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = dict(base)

        for key, value in override.items():
            if isinstance(result.get(key), dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
