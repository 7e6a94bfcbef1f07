"""Mapper settings and configuration models."""

from typing import Tuple, Type

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class LoggingConfig(BaseModel):
    """Logging configuration settings."""

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level",
    )
    format: str = Field(
        default="json", pattern="^(json|console)$", description="Log format (json, console)"
    )
    max_value_length: int = Field(
        default=200, ge=20, le=10000, description="Maximum rendered length of a logged value"
    )


class MapperSettings(BaseSettings):
    """
    Object mapper settings.

    Values come from, in decreasing priority: ``OBJECT_MAPPER_*`` environment
    variables, keyword arguments (a loaded YAML file), then the defaults below.
    """

    strict_lists: bool = Field(
        default=True,
        description="Raise on list element failures instead of skipping the element",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="OBJECT_MAPPER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings
