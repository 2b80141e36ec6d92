"""Main application configuration schema."""

from typing import Any, Dict

from pydantic import BaseModel, Field, ValidationError, field_validator

from patternkit.domain.exceptions import ConfigurationError

from .component_schema import ChainConfig, RegistryConfig
from .logging_schema import LoggingConfig

OUTPUT_FORMATS = ["json", "yaml", "table"]


class AppConfig(BaseModel):
    """Application configuration."""

    version: str = Field("1.0", description="Configuration version")
    environment: str = Field("development", description="Environment")
    debug: bool = Field(False, description="Debug mode")
    output_format: str = Field("json", description="Default CLI output format")
    logging: LoggingConfig = Field(default_factory=lambda: LoggingConfig())
    registry: RegistryConfig = Field(default_factory=lambda: RegistryConfig())
    chain: ChainConfig = Field(default_factory=lambda: ChainConfig())

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """
        Validate environment.

        Args:
            v: Value to validate

        Returns:
            Validated value

        Raises:
            ValueError: If environment is invalid
        """
        valid_environments = ["development", "testing", "staging", "production"]
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of {valid_environments}")
        return v

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        if v not in OUTPUT_FORMATS:
            raise ValueError(f"Output format must be one of {OUTPUT_FORMATS}")
        return v


def validate_config(data: Dict[str, Any]) -> AppConfig:
    """
    Validate raw configuration data.

    Raises:
        ConfigurationError: If the data does not match the schema
    """
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        fields = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        raise ConfigurationError(f"Invalid configuration: {e}", missing_fields=fields) from e
