"""Configuration management for the provisioning registry client.

This module provides configuration dataclasses that can be overridden from
environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

from ..transport.http_transport import TransportConfig

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class LoggingConfig:
    """Configuration for loguru sinks."""

    level: str = "INFO"
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: Path = field(default_factory=lambda: Path.cwd() / "provisioning_registry.log")
    rotation: str = "10 MB"
    retention: str = "7 days"


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RegistryConfig:
    """Complete registry client configuration."""

    # Service settings
    connection_string: str = ""
    service_url: str = ""  # derived from the connection string when empty
    api_version: str = "2021-10-01"

    # HTTP settings
    timeout_seconds: float = 30
    user_agent: str = "ProvisioningRegistry-Client/1.0.0"

    # Token management
    sas_token_ttl_seconds: int = 3600
    sas_token_refresh_margin: int = 300  # Refresh token 5 minutes before expiry

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        if connection_string := os.getenv("PROVISIONING_CONNECTION_STRING"):
            self.connection_string = connection_string

        if service_url := os.getenv("PROVISIONING_SERVICE_URL"):
            self.service_url = service_url

        if api_version := os.getenv("PROVISIONING_API_VERSION"):
            self.api_version = api_version

        if timeout := os.getenv("PROVISIONING_TIMEOUT_SECONDS"):
            try:
                self.timeout_seconds = float(timeout)
            except ValueError:
                logger.warning(f"Invalid timeout: {timeout}")

        if ttl := os.getenv("PROVISIONING_SAS_TTL_SECONDS"):
            try:
                self.sas_token_ttl_seconds = int(ttl)
            except ValueError:
                logger.warning(f"Invalid SAS token TTL: {ttl}")

        # Logging
        if log_level := os.getenv("PROVISIONING_LOG_LEVEL"):
            self.logging.level = log_level.upper()

        if log_to_file := os.getenv("PROVISIONING_LOG_TO_FILE"):
            self.logging.log_to_file = _env_bool(log_to_file)

        if log_file := os.getenv("PROVISIONING_LOG_FILE"):
            self.logging.log_file_path = Path(log_file)

    def get_transport_config(self, service_url: Optional[str] = None) -> TransportConfig:
        """Get configuration for the HTTP transport."""
        return TransportConfig(
            service_url=service_url or self.service_url,
            api_version=self.api_version,
            timeout_seconds=self.timeout_seconds,
            user_agent=self.user_agent,
        )

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if not self.connection_string and not self.service_url:
            errors.append("Connection string or service URL is required")

        if not self.api_version:
            errors.append("API version is required")

        if self.timeout_seconds <= 0:
            errors.append("Timeout must be positive")

        if self.sas_token_ttl_seconds <= 0:
            errors.append("SAS token TTL must be positive")

        if self.sas_token_refresh_margin < 0 or self.sas_token_refresh_margin >= self.sas_token_ttl_seconds:
            errors.append("SAS token refresh margin must be between 0 and the TTL")

        if self.logging.level not in LOG_LEVELS:
            errors.append(f"Unknown log level: {self.logging.level}")

        return len(errors) == 0, errors


class ConfigManager:
    """Manages registry client configuration."""

    def __init__(self):
        self._config: Optional[RegistryConfig] = None

    def load_config(
        self,
        connection_string: Optional[str] = None,
        service_url: Optional[str] = None,
    ) -> RegistryConfig:
        """Load configuration with optional overrides.

        Args:
            connection_string: Connection string override
            service_url: Service URL override

        Returns:
            Configured RegistryConfig instance
        """
        config = RegistryConfig()

        if connection_string:
            config.connection_string = connection_string

        if service_url:
            config.service_url = service_url

        self._config = config
        return config

    def get_config(self) -> Optional[RegistryConfig]:
        """Get current configuration."""
        return self._config

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration."""
        if not self._config:
            return False, ["No configuration loaded"]

        return self._config.validate()


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager


def get_current_config() -> Optional[RegistryConfig]:
    """Get the current configuration."""
    return _config_manager.get_config()
