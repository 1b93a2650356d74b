"""
Configuration management for the Rinkan Monitor.
"""

import json
import os
from typing import Any, Dict, Optional

import yaml

from ..models.config import Configuration, MonitorSettings, WatermarkPolicy


class ConfigurationManager:
    """Manages loading and validation of the monitor configuration."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, uses default paths.
        """
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[Configuration] = None

    def _find_config_file(self) -> str:
        """Find the configuration file in standard locations."""
        possible_paths = [
            "config/config.yaml",
            "config/config.yml",
            "config/config.json",
            "config.yaml",
            "config.yml",
            "config.json",
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        if os.path.exists("config/config.example.yaml"):
            raise ValueError(
                "No configuration file found. Please copy 'config/config.example.yaml' "
                "to 'config/config.yaml' and customize it for your needs."
            )

        raise ValueError(
            "No configuration file found. Please create a configuration file "
            "at one of these locations: " + ", ".join(possible_paths)
        )

    def _read_file(self, config_path: str) -> Dict[str, Any]:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.endswith(".json"):
                raw_config = json.load(f)
            else:
                raw_config = yaml.safe_load(f)

        if not isinstance(raw_config, dict):
            raise ValueError("Configuration file must contain a mapping")
        return raw_config

    def load_config(self) -> Configuration:
        """
        Load configuration from file.

        Returns:
            Configuration object with validated settings.

        Raises:
            ValueError: If configuration is invalid or file cannot be read.
            FileNotFoundError: If configuration file doesn't exist.
        """
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            raw_config = self._expand_env_vars(self._read_file(self.config_path))
            config = self._parse_config(raw_config)
            config.validate()
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}")
        except ValueError:
            raise
        except Exception as e:
            raise ValueError(f"Error loading configuration: {e}")

        self._config = config
        return config

    def _expand_env_vars(self, obj: Any) -> Any:
        """Recursively expand environment variables in configuration."""
        if isinstance(obj, dict):
            return {key: self._expand_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [self._expand_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            # Expand ${VAR_NAME} patterns
            if obj.startswith("${") and obj.endswith("}"):
                var_name = obj[2:-1]
                env_value = os.getenv(var_name)
                if env_value is None:
                    raise ValueError(f"Environment variable '{var_name}' not found")
                return env_value
            return obj
        else:
            return obj

    def _parse_config(self, raw_config: Dict[str, Any]) -> Configuration:
        """Parse raw configuration dictionary into Configuration object."""
        monitor_data = raw_config.get("monitor") or {}
        if not isinstance(monitor_data, dict):
            raise ValueError("'monitor' section must be a mapping")

        policy_value = monitor_data.get("initial_watermark", WatermarkPolicy.NOW.value)
        try:
            initial_watermark = WatermarkPolicy(str(policy_value).lower())
        except ValueError:
            raise ValueError(
                f"initial_watermark must be 'now' or 'unset', got {policy_value!r}"
            )

        defaults = MonitorSettings()
        monitor = MonitorSettings(
            tick_interval=monitor_data.get("tick_interval", defaults.tick_interval),
            pagination_enabled=monitor_data.get(
                "pagination_enabled", defaults.pagination_enabled
            ),
            initial_watermark=initial_watermark,
            notification_delay=monitor_data.get(
                "notification_delay", defaults.notification_delay
            ),
            request_timeout=monitor_data.get(
                "request_timeout", defaults.request_timeout
            ),
            max_pages=monitor_data.get("max_pages", defaults.max_pages),
            api_timezone=monitor_data.get("api_timezone", defaults.api_timezone),
        )

        keywords = raw_config.get("keywords") or []
        categories = raw_config.get("categories") or []
        if not isinstance(keywords, list):
            raise ValueError("Keywords must be a list")
        if not isinstance(categories, list):
            raise ValueError("Categories must be a list")

        return Configuration(
            keywords=tuple(keywords),
            colors=dict(raw_config.get("colors") or {}),
            categories=tuple(categories),
            brand=raw_config.get("brand") or None,
            discord_webhook_url=raw_config.get("discord_webhook_url", ""),
            monitor=monitor,
        )

    def get_config(self) -> Configuration:
        """
        Get current configuration, loading if necessary.

        Returns:
            Current configuration object.
        """
        if self._config is None:
            return self.load_config()
        return self._config

    def validate_config_file(self, config_path: str) -> bool:
        """
        Validate a configuration file without loading it.

        Args:
            config_path: Path to configuration file to validate.

        Returns:
            True if configuration is valid.

        Raises:
            ValueError: If configuration is invalid with detailed error message.
        """
        if not os.path.exists(config_path):
            raise ValueError(f"Configuration file not found: {config_path}")

        try:
            raw_config = self._read_file(config_path)

            # Missing env vars are not a structural problem
            try:
                raw_config = self._expand_env_vars(raw_config)
            except ValueError:
                pass

            self._parse_config(raw_config).validate()
            return True

        except Exception as e:
            raise ValueError(f"Configuration validation failed: {e}")

    def get_config_template(self) -> Dict[str, Any]:
        """
        Get a template configuration dictionary.

        Returns:
            Dictionary with example configuration structure.
        """
        return {
            "keywords": ["Speedmaster"],
            "colors": {"black": True, "blue": False},
            "categories": [],
            "brand": None,
            "discord_webhook_url": "${DISCORD_WEBHOOK_URL}",
            "monitor": {
                "tick_interval": 300,
                "pagination_enabled": True,
                "initial_watermark": "now",
                "notification_delay": 2.0,
                "request_timeout": 30,
                "max_pages": None,
                "api_timezone": "Asia/Tokyo",
            },
        }
