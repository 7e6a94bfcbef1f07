"""
Settings loader for the object mapper.

Reads an optional YAML file and layers ``OBJECT_MAPPER_*`` environment
variables on top of it.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .settings import MapperSettings


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML configuration: {e}", details={"config_path": str(path)}
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration in {path} must be a mapping, got {type(data).__name__}",
            details={"config_path": str(path)},
        )
    return data


def load_settings(config_path: Optional[Union[str, Path]] = None) -> MapperSettings:
    """
    Load mapper settings.

    Args:
        config_path: Optional YAML file; a missing file yields the defaults

    Returns:
        MapperSettings

    Raises:
        ConfigurationError: If the file is not valid YAML or holds invalid values
    """
    data: Dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            data = _read_yaml(path)

    try:
        return MapperSettings(**data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid mapper configuration: {e.error_count()} error(s)",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e
