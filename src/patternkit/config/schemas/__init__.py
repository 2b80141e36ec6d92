"""Configuration schemas package."""

from .app_schema import OUTPUT_FORMATS, AppConfig, validate_config
from .component_schema import ChainConfig, RegistryConfig
from .logging_schema import LoggingConfig

__all__ = [
    # Main configuration
    "AppConfig",
    "validate_config",
    "OUTPUT_FORMATS",
    # Component configurations
    "RegistryConfig",
    "ChainConfig",
    # Logging configuration
    "LoggingConfig",
]
