"""Configuration module for the provisioning registry client."""

from .logger_config import setup_logging
from .settings import ConfigManager, LoggingConfig, RegistryConfig, get_config_manager, get_current_config

__all__ = ["RegistryConfig", "LoggingConfig", "ConfigManager", "get_config_manager", "get_current_config", "setup_logging"]
