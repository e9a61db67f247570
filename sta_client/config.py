# Copyright 2025 STA Client Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
STA Client Configuration

Configuration management for the SensorThings client.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .exceptions import ConfigurationError

_TRUE_VALUES = ("true", "1", "yes")
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class STAConfig:
    """Configuration for the SensorThings client."""

    # Service Configuration
    endpoint: str | None = None
    version: str = "1.0.0"

    # Request Configuration
    timeout: float = 30.0
    verify_ssl: bool = True
    user_agent: str | None = None

    # Logging Configuration
    log_level: str = "INFO"
    log_requests: bool = False
    log_responses: bool = False

    # Additional Headers
    custom_headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Post-initialization validation and environment variable loading."""
        self._load_from_environment()
        self._validate_config()

    def _load_from_environment(self):
        """Load configuration from environment variables."""
        if not self.endpoint:
            self.endpoint = os.getenv("STA_ENDPOINT")

        if os.getenv("STA_TIMEOUT"):
            try:
                self.timeout = float(os.getenv("STA_TIMEOUT"))
            except ValueError:
                logging.getLogger(__name__).warning("Ignoring invalid STA_TIMEOUT: %s", os.getenv("STA_TIMEOUT"))

        if os.getenv("STA_VERIFY_SSL"):
            self.verify_ssl = os.getenv("STA_VERIFY_SSL").lower() in _TRUE_VALUES

        # Logging Configuration
        if os.getenv("STA_LOG_LEVEL"):
            self.log_level = os.getenv("STA_LOG_LEVEL")

        if os.getenv("STA_LOG_REQUESTS"):
            self.log_requests = os.getenv("STA_LOG_REQUESTS").lower() in _TRUE_VALUES

        if os.getenv("STA_LOG_RESPONSES"):
            self.log_responses = os.getenv("STA_LOG_RESPONSES").lower() in _TRUE_VALUES

    def _validate_config(self):
        """Validate configuration values."""
        if not self.endpoint:
            raise ConfigurationError(
                "Service endpoint is required. Set STA_ENDPOINT environment variable or pass endpoint parameter."
            )

        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive.")

        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"Log level must be one of: {', '.join(_LOG_LEVELS)}")

    @property
    def headers(self) -> dict[str, str]:
        """Default headers sent with every request."""
        headers = {
            "User-Agent": self.user_agent or f"STA-Python-Client/{self.version}",
            "Accept": "application/json",
        }
        headers.update(self.custom_headers)
        return headers

    @classmethod
    def from_file(cls, config_file: str, **overrides) -> "STAConfig":
        """Load configuration from a JSON or YAML file."""
        try:
            with open(config_file, encoding="utf-8") as f:
                if config_file.endswith(".json"):
                    config_data = json.load(f)
                elif config_file.endswith((".yml", ".yaml")):
                    config_data = yaml.safe_load(f)
                else:
                    raise ConfigurationError(f"Unsupported config file format: {config_file}")
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {config_file}", cause=e) from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}", cause=e) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_file}")

        config_data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**config_data)
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration parameter in {config_file}: {e}", cause=e) from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "endpoint": self.endpoint,
            "version": self.version,
            "timeout": self.timeout,
            "verify_ssl": self.verify_ssl,
            "user_agent": self.user_agent,
            "log_level": self.log_level,
            "log_requests": self.log_requests,
            "log_responses": self.log_responses,
            "custom_headers": dict(self.custom_headers),
        }

    def update(self, **kwargs):
        """Update configuration with new values."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ConfigurationError(f"Unknown configuration parameter: {key}")

        self._validate_config()


# Global configuration instance
_global_config: STAConfig | None = None


def get_global_config() -> STAConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = STAConfig()
    return _global_config


def set_global_config(config: STAConfig | None):
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def configure(**kwargs):
    """Configure the global client settings."""
    config = get_global_config()
    config.update(**kwargs)
