"""
Configuration Module for the Sales-Order Extraction Engine.

This module provides configuration management using YAML files.
Pipeline components receive a ConfigurationManager instance explicitly;
nothing in the engine reads environment variables on its own. Secrets are
referenced from settings.yaml as ``${VARIABLE}`` placeholders and resolved
once, when the file is loaded.
"""

import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from order_extraction.utils.exceptions import ConfigurationError
from order_extraction.utils.helpers import merge_dicts

_ENV_PLACEHOLDER = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')


class ConfigurationManager:
    """
    Configuration access for the extraction engine.

    Loads settings.yaml (or a custom file), deep-merges optional overrides
    on top of it and exposes values through dot notation.

    Attributes:
        config_path (Path): Path to the configuration file.

    Example:
        >>> config = ConfigurationManager(overrides={"ocr": {"provider": "google_vision"}})
        >>> config.get("ocr.provider")
        'google_vision'
        >>> config.get("extraction.max_items")
        50
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to configuration file.
                        Defaults to config/settings.yaml.
            overrides: Optional nested dictionary merged over the file.
        """
        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._overrides = overrides or {}
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If the file is missing or is not valid YAML.
        """
        if not self.config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self.config_path}"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid configuration file: {self.config_path}",
                {"reason": str(e)}
            )

        self._config = merge_dicts(loaded, self._overrides)
        self._config = self._expand_placeholders(self._config)
        self._resolve_paths()

    def _expand_placeholders(self, value: Any) -> Any:
        """Replace ``${VAR}`` placeholders with environment values (empty if unset)."""
        if isinstance(value, dict):
            return {k: self._expand_placeholders(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._expand_placeholders(v) for v in value]
        if isinstance(value, str):
            return _ENV_PLACEHOLDER.sub(
                lambda m: os.environ.get(m.group(1), ""), value
            )
        return value

    def _resolve_paths(self) -> None:
        """
        Resolve relative paths in configuration to absolute paths.
        Uses project root as base directory.
        """
        project_root = Path(__file__).parent.parent

        if 'paths' in self._config:
            for key, value in self._config['paths'].items():
                if value and not Path(value).is_absolute():
                    self._config['paths'][key] = str(project_root / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "ocr.provider").
            default: Default value if key doesn't exist.

        Returns:
            Configuration value or default.

        Example:
            >>> config.get("ocr.tesseract.lang")
            'por'
            >>> config.get("nonexistent.key", "default_value")
            'default_value'
        """
        keys = key.split('.')
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_all(self) -> Dict[str, Any]:
        """Get a copy of the complete configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file, keeping the overrides."""
        self._load_config()


_default_manager: Optional[ConfigurationManager] = None


def get_default_config() -> ConfigurationManager:
    """Return the lazily created manager over config/settings.yaml."""
    global _default_manager
    if _default_manager is None:
        _default_manager = ConfigurationManager()
    return _default_manager


def reset_default_config() -> None:
    """Drop the default manager so the next access reloads the file."""
    global _default_manager
    _default_manager = None


__all__ = [
    'ConfigurationManager',
    'get_default_config',
    'reset_default_config',
]
