"""Configuration manager for loading and validating .resilience.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from resilience.domain.config import AppConfig, LoggingConfig, RetryConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".resilience.yml"


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .resilience.yml and environment variables

    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .resilience.yml file (searched from current directory)
    3. Environment variables (RESILIENCE_*)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "retry": {
            "attempts": 3,
            "report_failures": True,
        },
        "logging": {
            "level": "INFO",
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .resilience.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .resilience.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic

        Raises:
            ConfigurationError: If the file is not valid YAML
            ValidationError: If configuration is invalid
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    f"Configuration in {self.config_path} must be a mapping"
                )
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)

        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides

        Values are left as strings; pydantic coerces and validates them.

        Raises:
            ConfigurationError: If the overridden section is not a mapping
        """
        if os.getenv("RESILIENCE_ATTEMPTS"):
            self._section(config, "retry")["attempts"] = os.getenv("RESILIENCE_ATTEMPTS")

        if os.getenv("RESILIENCE_LOG_LEVEL"):
            self._section(config, "logging")["level"] = os.getenv("RESILIENCE_LOG_LEVEL").upper()

        return config

    def _section(self, config: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = config.get(name)
        if not isinstance(section, dict):
            raise ConfigurationError(f"Section '{name}' in {self.config_path} must be a mapping")
        return section

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration"""
        return self.config.retry

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration"""
        return self.config.logging

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "retry.attempts" or "retry")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.config.model_dump()
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
