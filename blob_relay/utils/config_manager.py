"""
Configuration file management utilities.

This module loads optional TOML configuration files. Environment variables
take precedence over file values; that merge happens in
:mod:`blob_relay.config`.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional


class ConfigManager:
    """
    Manages configuration loading and access.

    This class provides a centralized way to load and access configuration
    from TOML files with proper error handling and validation.
    """

    def __init__(self, config_path: str) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the TOML configuration file
        """
        self.config_path = Path(config_path).expanduser()
        self._config: Optional[Dict[str, Any]] = None

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Returns:
            Dictionary containing configuration data

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        if self._config is not None:
            return self._config

        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "rb") as f:
                self._config = tomllib.load(f)
            logging.debug("Loaded configuration from %s", self.config_path)
            return self._config
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in configuration file {self.config_path}: {e}") from e
        except OSError as e:
            raise ValueError(f"Failed to load configuration from {self.config_path}: {e}") from e

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Section name (e.g., "relay")

        Returns:
            Dictionary containing section data, or empty dict if section not found
        """
        data = self.load().get(section, {})
        return data if isinstance(data, dict) else {}


__all__ = ["ConfigManager"]
