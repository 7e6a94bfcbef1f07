"""Configuration management for the object mapper."""

from .manager import load_settings
from .settings import LoggingConfig, MapperSettings

__all__ = ["LoggingConfig", "MapperSettings", "load_settings"]
