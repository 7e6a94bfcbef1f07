"""
Object Mapper: copies values between objects by structural matching.

Fields are matched by name, or redirected with ``fromField`` / ``fromMethod``
directives, and nested records, optionals and lists are mapped recursively
from runtime type descriptors.
"""

__version__ = "0.1.0"

from .config import LoggingConfig, MapperSettings, load_settings
from .converters import DEFAULT_CONVERTERS, ConverterTable, TypeConverterFn, canonical_datetime
from .descriptors import (
    FieldDescriptor,
    MapperTag,
    RecordDescriptor,
    Redirection,
    RedirectKind,
    describe,
    mapper_field,
    parse_directive,
    register_record,
)
from .errors import (
    ConfigurationError,
    ConversionError,
    FieldProjectionError,
    IncompatibleAssignmentError,
    MapError,
    MissingConverterError,
    NilArgumentError,
    SourceAccessError,
    TargetNotAddressableError,
    TypeMismatchError,
    UnresolvedAnnotationError,
)
from .logging import get_logger, setup_logging
from .mapper import ObjectMapper, Ref, map_values, map_with_converters
from .shapes import type_key

__all__ = [
    # Mapping
    "ObjectMapper",
    "Ref",
    "map_values",
    "map_with_converters",
    # Descriptors
    "FieldDescriptor",
    "MapperTag",
    "RecordDescriptor",
    "Redirection",
    "RedirectKind",
    "describe",
    "mapper_field",
    "parse_directive",
    "register_record",
    # Converters
    "DEFAULT_CONVERTERS",
    "ConverterTable",
    "TypeConverterFn",
    "canonical_datetime",
    "type_key",
    # Errors
    "MapError",
    "NilArgumentError",
    "TargetNotAddressableError",
    "TypeMismatchError",
    "FieldProjectionError",
    "MissingConverterError",
    "IncompatibleAssignmentError",
    "SourceAccessError",
    "UnresolvedAnnotationError",
    "ConversionError",
    "ConfigurationError",
    # Configuration and logging
    "LoggingConfig",
    "MapperSettings",
    "load_settings",
    "get_logger",
    "setup_logging",
]
