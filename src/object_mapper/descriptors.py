"""
Record descriptors: per-type field tables built once and cached.

A descriptor lists the fields of a record class (dataclass or pydantic model)
with their resolved annotation, shape and redirection directive. Directives
are parsed here, when the descriptor is built, so the mapper never re-reads
field metadata while mapping.

Redirection directives use the grammar ``key1:value1;key2:value2`` with the
keys ``fromField`` and ``fromMethod``. They can be attached as:

- dataclass field metadata: ``field(metadata={"mapper": "fromField:Name"})``
  or the ``mapper_field("fromField:Name")`` helper
- pydantic field extras: ``Field(json_schema_extra={"mapper": "fromField:Name"})``
- annotation metadata: ``Annotated[str, MapperTag("fromMethod:full_name")]``
"""

import dataclasses
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, get_origin, get_type_hints

from pydantic import BaseModel
from pydantic_core import PydanticUndefined

from .errors import UnresolvedAnnotationError
from .shapes import Shape, TypeShape, classify, is_record_type, type_key, unwrap_annotated

MAPPER_TAG = "mapper"

_NO_DEFAULT = object()


class RedirectKind(str, Enum):
    """Kinds of redirection a target field may carry."""

    FROM_FIELD = "fromField"
    FROM_METHOD = "fromMethod"


@dataclass(frozen=True)
class Redirection:
    """Parsed redirection directive."""

    kind: RedirectKind
    name: str


@dataclass(frozen=True)
class MapperTag:
    """Directive marker for use inside ``Annotated``."""

    directive: str


def parse_directive(directive: Optional[str]) -> Optional[Redirection]:
    """
    Parse a ``key:value;key:value`` directive into a Redirection.

    Only ``fromField`` and ``fromMethod`` are recognised; unknown or malformed
    settings are ignored and the first recognised setting wins.

    Args:
        directive: Raw directive string (may be None)

    Returns:
        Redirection, or None when no recognised setting is present
    """
    if not directive:
        return None

    for setting in directive.split(";"):
        key, sep, value = setting.partition(":")
        key, value = key.strip(), value.strip()
        if not sep or not value:
            continue
        if key == RedirectKind.FROM_FIELD.value:
            return Redirection(RedirectKind.FROM_FIELD, value)
        if key == RedirectKind.FROM_METHOD.value:
            return Redirection(RedirectKind.FROM_METHOD, value)

    return None


def mapper_field(directive: str, **kwargs: Any) -> Any:
    """``dataclasses.field`` carrying a mapper directive in its metadata."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[MAPPER_TAG] = directive
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """Metadata of one record field."""

    name: str
    annotation: Any
    shape: TypeShape
    redirection: Optional[Redirection] = None
    default: Any = _NO_DEFAULT
    default_factory: Optional[Callable[[], Any]] = None

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")

    def initial_value(self) -> Any:
        """Declared default of the field, or the zero value of its type."""
        if self.default_factory is not None:
            return self.default_factory()
        if self.default is not _NO_DEFAULT:
            return self.default
        return zero_value(self.shape)


@dataclass(frozen=True)
class RecordDescriptor:
    """Field table of a record class."""

    record_type: type
    fields: Tuple[FieldDescriptor, ...]
    frozen: bool = False

    @property
    def name(self) -> str:
        return type_key(self.record_type)

    def field(self, name: str) -> Optional[FieldDescriptor]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def new_instance(self) -> Any:
        """Allocate a record with declared defaults and zero values for required fields."""
        if issubclass(self.record_type, BaseModel):
            instance = self.record_type.model_construct()
            for field in self.fields:
                if field.name not in instance.__dict__:
                    setattr(instance, field.name, field.initial_value())
            return instance

        instance = object.__new__(self.record_type)
        for field in self.fields:
            object.__setattr__(instance, field.name, field.initial_value())
        return instance


def _directive_from_extras(extras: Tuple[Any, ...]) -> Optional[str]:
    for extra in extras:
        if isinstance(extra, MapperTag):
            return extra.directive
    return None


def _resolve_field_hint(record_type: type, f: dataclasses.Field, localns: Dict[str, Any]) -> Any:
    """Resolve the annotation of a single field when the class-wide lookup fails."""
    holder = type(
        f"_{record_type.__name__}Hint",
        (),
        {"__annotations__": {f.name: f.type}, "__module__": record_type.__module__},
    )
    try:
        return get_type_hints(holder, localns=localns, include_extras=True)[f.name]
    except NameError as e:
        raise UnresolvedAnnotationError(type_key(record_type), f.name, f.type, e) from e


def _describe_dataclass(record_type: type) -> RecordDescriptor:
    # Self-references of locally defined records resolve through the class name
    localns = {record_type.__name__: record_type}
    try:
        hints = get_type_hints(record_type, localns=localns, include_extras=True)
    except NameError:
        hints = None

    fields = []
    for f in dataclasses.fields(record_type):
        if hints is not None:
            annotation = hints.get(f.name, f.type)
        else:
            annotation = _resolve_field_hint(record_type, f, localns)
        base, extras = unwrap_annotated(annotation)
        directive = f.metadata.get(MAPPER_TAG) or _directive_from_extras(extras)
        fields.append(
            FieldDescriptor(
                name=f.name,
                annotation=base,
                shape=classify(base),
                redirection=parse_directive(directive),
                default=f.default if f.default is not dataclasses.MISSING else _NO_DEFAULT,
                default_factory=(
                    f.default_factory if f.default_factory is not dataclasses.MISSING else None
                ),
            )
        )

    return RecordDescriptor(
        record_type=record_type,
        fields=tuple(fields),
        frozen=record_type.__dataclass_params__.frozen,
    )


def _describe_model(record_type: type) -> RecordDescriptor:
    fields = []
    for name, info in record_type.model_fields.items():
        directive = None
        if isinstance(info.json_schema_extra, dict):
            directive = info.json_schema_extra.get(MAPPER_TAG)
        directive = directive or _directive_from_extras(tuple(info.metadata))
        base, _ = unwrap_annotated(info.annotation)
        fields.append(
            FieldDescriptor(
                name=name,
                annotation=base,
                shape=classify(base),
                redirection=parse_directive(directive),
                default=info.default if info.default is not PydanticUndefined else _NO_DEFAULT,
                default_factory=info.default_factory,
            )
        )

    return RecordDescriptor(
        record_type=record_type,
        fields=tuple(fields),
        frozen=bool(record_type.model_config.get("frozen", False)),
    )


class DescriptorRegistry:
    """Thread-safe cache of record descriptors keyed by record class."""

    def __init__(self) -> None:
        self._descriptors: Dict[type, RecordDescriptor] = {}
        self._lock = threading.Lock()

    def describe(self, record_type: type) -> RecordDescriptor:
        """
        Get the descriptor of a record class, building it on first use.

        Args:
            record_type: Dataclass or pydantic model class

        Returns:
            Cached RecordDescriptor

        Raises:
            TypeError: If ``record_type`` is not a record class
        """
        descriptor = self._descriptors.get(record_type)
        if descriptor is not None:
            return descriptor

        with self._lock:
            descriptor = self._descriptors.get(record_type)
            if descriptor is None:
                descriptor = self._build(record_type)
                self._descriptors[record_type] = descriptor
            return descriptor

    def register(self, record_type: type) -> RecordDescriptor:
        """Build (or rebuild) and cache the descriptor of ``record_type``."""
        descriptor = self._build(record_type)
        with self._lock:
            self._descriptors[record_type] = descriptor
        return descriptor

    def clear(self) -> None:
        with self._lock:
            self._descriptors.clear()

    def __contains__(self, record_type: object) -> bool:
        return record_type in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    @staticmethod
    def _build(record_type: type) -> RecordDescriptor:
        if not is_record_type(record_type):
            raise TypeError(f"{type_key(record_type)} is not a dataclass or pydantic model")
        if dataclasses.is_dataclass(record_type):
            return _describe_dataclass(record_type)
        return _describe_model(record_type)


registry = DescriptorRegistry()


def describe(record_type: type) -> RecordDescriptor:
    """Get the cached descriptor of a record class."""
    return registry.describe(record_type)


def register_record(record_type: type) -> type:
    """Class decorator that builds the descriptor eagerly, surfacing annotation errors at import."""
    registry.register(record_type)
    return record_type


def zero_value(shape: TypeShape) -> Any:
    """
    Fresh zero value for a location of the given shape.

    Records are allocated with their declared defaults; classes that cannot be
    built without arguments yield None.
    """
    if shape.kind is Shape.OPTIONAL:
        return None
    if shape.kind is Shape.STRING:
        return ""
    if shape.kind is Shape.LIST:
        return []
    if shape.kind is Shape.RECORD:
        return describe(shape.annotation).new_instance()

    origin = get_origin(shape.annotation) or shape.annotation
    if not isinstance(origin, type) or origin is object:
        return None
    try:
        return origin()
    except (TypeError, ValueError):
        return None
