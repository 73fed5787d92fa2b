"""Simple YAML configuration loader for Meditrack."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "meditrack.yaml"

# Relative values are taken from the config file's directory
PATH_KEYS = (("storage", "data_directory"), ("logging", "file_path"))

DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        "data_directory": "data",
    },
    "timer": {
        "min_session_seconds": 10,
    },
    "statistics": {
        "default_period": "weekly",
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/meditrack.log",
        "console_output": True,
    },
}


class MeditrackConfig:
    """Meditrack configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, uses meditrack.yaml
                        in the current directory when present, else the defaults.
        """
        if config_path is None:
            candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
            self.config_file: Optional[Path] = candidate if candidate.exists() else None
        else:
            self.config_file = Path(config_path)
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        if self.config_file is None:
            logger.info("No configuration file found, using defaults")
            self.config = copy.deepcopy(DEFAULT_CONFIG)
        else:
            logger.info(f"Loading configuration from: {self.config_file}")
            self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file, layered over the defaults."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        config = _merge(copy.deepcopy(DEFAULT_CONFIG), loaded)

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Anchor relative data and log paths at the config file's directory."""
        for section, key in PATH_KEYS:
            values = config.get(section)
            if not isinstance(values, dict):
                continue
            value = values.get(key)
            if value and not os.path.isabs(value):
                config[section][key] = str(self.config_file.parent / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Look up a dotted key such as 'timer.min_session_seconds'.

        Returns default when any segment is missing or lands on a non-mapping.
        """
        node: Any = self.config
        for key in key_path.split('.'):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def set(self, key_path: str, value: Any) -> None:
        """Override a dotted key in memory, creating missing sections."""
        *parents, leaf = key_path.split('.')
        section = self.config
        for key in parents:
            section = section.setdefault(key, {})
        section[leaf] = value
        logger.debug(f"Config override {key_path} = {value!r}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_min_session_seconds(self) -> int:
        """Minimum session length that gets saved."""
        value = int(self.get('timer.min_session_seconds', 10))
        if value < 0:
            raise ValueError(f"timer.min_session_seconds must be >= 0, got {value}")
        return value


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


_config: Optional[MeditrackConfig] = None


def get_config() -> MeditrackConfig:
    """Get the process-level configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = MeditrackConfig()
    return _config


def reload_config(config_path: Optional[str] = None) -> MeditrackConfig:
    """Replace the process-level configuration with one loaded from config_path."""
    global _config
    _config = MeditrackConfig(config_path)
    return _config
