"""
Configuration Module for the Expense Extraction Engine.

This module provides centralized configuration management using YAML files.
Only the batch tooling (input loading, reports, evaluation, CLI) and the
logging setup read configuration; the extraction core never does.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from expense_extraction.utils.exceptions import ConfigurationError


class ConfigurationManager:
    """
    Centralized configuration management for the batch tooling.

    This class handles loading and providing access to the parameters
    defined in settings.yaml.

    Attributes:
        config_path (Path): Path to the configuration file.
        config (Dict): Loaded configuration dictionary.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("input.encoding")
        'utf-8-sig'
        >>> config.get("output.excel.sheet_name")
        'Extracted Data'
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        """
        Singleton pattern to ensure only one configuration instance exists.

        Args:
            config_path: Optional path to configuration file.

        Returns:
            ConfigurationManager instance.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to configuration file.
                        Defaults to config/settings.yaml.
        """
        if self._initialized:
            return

        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If the file doesn't exist, is not valid
                YAML or is not a mapping.
        """
        if not self.config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self.config_path}"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid configuration file: {self.config_path}",
                {'reason': str(e)}
            )

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self.config_path}"
            )

        self._config = loaded

        # Resolve relative paths to absolute paths
        self._resolve_paths()

    def _resolve_paths(self) -> None:
        """
        Resolve relative paths in configuration to absolute paths.
        Uses project root as base directory.
        """
        project_root = Path(__file__).parent.parent

        paths = self._config.get('paths') or {}
        for key, value in paths.items():
            if value and not Path(value).is_absolute():
                paths[key] = str(project_root / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "input.encoding").
            default: Default value if key doesn't exist.

        Returns:
            Configuration value or default.

        Example:
            >>> config.get("evaluation.amount_tolerance")
            0.01
            >>> config.get("nonexistent.key", "default_value")
            'default_value'
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_all(self) -> Dict[str, Any]:
        """Get a copy of the complete configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """
        Reset the singleton instance.
        Useful for testing or switching configuration files.
        """
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get configuration values.

    Args:
        key: Configuration key in dot notation.
        default: Default value if key doesn't exist.

    Returns:
        Configuration value or default.
    """
    return ConfigurationManager().get(key, default)


def load_config(config_path: Optional[str] = None) -> ConfigurationManager:
    """
    Replace the active configuration with the given file.

    Args:
        config_path: YAML file to load; None restores config/settings.yaml.

    Returns:
        The new ConfigurationManager instance.
    """
    ConfigurationManager.reset()
    return ConfigurationManager(config_path)


# Export public API
__all__ = ['ConfigurationManager', 'get_config', 'load_config']
