"""Component configuration schemas."""

from pydantic import BaseModel, Field


class RegistryConfig(BaseModel):
    """Registry configuration."""

    allow_overwrite: bool = Field(
        False, description="Replace existing keys on register instead of raising DuplicateKey"
    )


class ChainConfig(BaseModel):
    """Chain configuration."""

    require_handler: bool = Field(
        False, description="Report 'unhandled' when no handler short-circuits"
    )
