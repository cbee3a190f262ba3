import os
import copy
from typing import Any, Optional, Dict
import yaml
import logging

from .constants import (
    DEFAULT_COST,
    DEFAULT_METER,
    DEFAULT_SEARCH_WORKERS,
    DEFAULT_SEARCH_TIMEOUT,
    DEFAULT_CONFIG_FILE,
)
from .exceptions import ConfigurationError

DEFAULT_CONFIG: Dict[str, Any] = {
    "puzzle": {
        "cost": DEFAULT_COST,
        "meter": DEFAULT_METER,
    },
    "search": {
        "workers": DEFAULT_SEARCH_WORKERS,
        "timeout": DEFAULT_SEARCH_TIMEOUT,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    }
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config:
    """
    Application configuration manager with singleton pattern.

    Loads configuration from YAML file and provides dot-notation access
    to nested configuration values. Merges user configuration with defaults.

    Example:
        >>> config = Config()
        >>> cost = config.get('puzzle.cost')
        >>> workers = config.get('search.workers', default=1)
    """

    _instance: Optional['Config'] = None

    def __new__(cls) -> 'Config':
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance.data = copy.deepcopy(DEFAULT_CONFIG)
            cls._instance.path = None
        return cls._instance

    def load(self, config_path: str = DEFAULT_CONFIG_FILE) -> None:
        """
        Load configuration from YAML file, merging with defaults.

        A missing file leaves the defaults in place.

        Args:
            config_path: Path to YAML configuration file

        Raises:
            ConfigurationError: If config file is malformed or holds invalid values
        """
        self.reset()
        if not os.path.exists(config_path):
            logging.info("No config file found, using defaults")
            return

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(config_path, f"Malformed YAML: {e}")
        except OSError as e:
            raise ConfigurationError(config_path, f"Failed to read: {e}")

        if user_config:
            if not isinstance(user_config, dict):
                raise ConfigurationError(
                    config_path,
                    "Configuration file must contain a dictionary"
                )
            self._merge(self.data, user_config)

        self._validate()
        self.path = config_path
        logging.info(f"Loaded configuration from {config_path}")

    def reset(self) -> None:
        """Drop all loaded values and return to the defaults."""
        self.data = copy.deepcopy(DEFAULT_CONFIG)
        self.path = None

    def _validate(self) -> None:
        """
        Check value types and ranges after a merge.

        Raises:
            ConfigurationError: On the first invalid key
        """
        for key in ('puzzle.cost', 'puzzle.meter', 'search.workers'):
            val = self.get(key)
            if isinstance(val, bool) or not isinstance(val, int) or val < 0:
                raise ConfigurationError(key, f"Expected a non-negative integer, got {val!r}")

        timeout = self.get('search.timeout')
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                raise ConfigurationError('search.timeout', f"Expected a positive number or null, got {timeout!r}")

        level = self.get('logging.level')
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            raise ConfigurationError('logging.level', f"Expected one of {', '.join(LOG_LEVELS)}, got {level!r}")

    def save(self, config_path: str = DEFAULT_CONFIG_FILE) -> None:
        """
        Save current configuration to YAML file.

        Args:
            config_path: Path where configuration should be saved

        Raises:
            ConfigurationError: If unable to write configuration file
        """
        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(self.data, f, default_flow_style=False)
            logging.info(f"Saved configuration to {config_path}")
        except OSError as e:
            raise ConfigurationError(config_path, f"Failed to save: {e}")

    def _merge(self, default: Dict[str, Any], user: Dict[str, Any]) -> None:
        """
        Recursively merge user configuration into default configuration.

        Args:
            default: Default configuration dictionary (modified in place)
            user: User configuration to merge
        """
        for k, v in user.items():
            if isinstance(v, dict) and k in default and isinstance(default[k], dict):
                self._merge(default[k], v)
            else:
                default[k] = v

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            path: Dot-separated path to configuration value (e.g., 'puzzle.cost')
            default: Default value if path not found

        Returns:
            Configuration value at path, or default if not found

        Example:
            >>> config.get('search.timeout', default=30.0)
            30.0
        """
        keys = path.split('.')
        val = self.data
        try:
            for k in keys:
                val = val[k]
            return val
        except (KeyError, TypeError):
            return default

    def set(self, path: str, value: Any) -> None:
        """Set a configuration value using dot notation, creating sections as needed."""
        keys = path.split('.')
        section = self.data
        for k in keys[:-1]:
            section = section.setdefault(k, {})
        section[keys[-1]] = value


# Global instance
config = Config()
