"""Configuration package with clean public API."""

# Main configuration classes
from .schemas import (
    AppConfig, validate_config,
    LoggingConfig, RegistryConfig, ChainConfig,
)

# Configuration management
from .manager import ConfigurationManager, get_config_manager

__all__ = [
    # Main configuration
    'AppConfig',
    'validate_config',

    # Specific configurations
    'LoggingConfig',
    'RegistryConfig',
    'ChainConfig',

    # Configuration management
    'ConfigurationManager',
    'get_config_manager',
]
