"""
Recursive reflective mapper.

Copies values from a source value into a target location by structural
matching. Dispatch is driven by the declared shape of the target:

- optional: ``None`` for a ``None`` source, otherwise a freshly mapped value
- record: every public field resolved from the source and mapped recursively
- list: a new list, element ``i`` mapped from source element ``i``
- string: textual rendering of any source value
- scalar: assigned as-is when the source already has the target type

Example::

    @dataclass
    class Person:
        name: str = ""
        age: int = 0

    person = Person()
    map_values({"name": "John", "age": 23}, person)

    regions = Ref(List[Region])
    map_values(countries, regions)
    regions.value
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Callable, Generic, List, Mapping, Optional, TypeVar

from .config.settings import MapperSettings
from .converters import ConverterTable, TypeConverterFn
from .descriptors import FieldDescriptor, RecordDescriptor, describe, zero_value
from .errors import (
    ConversionError,
    FieldProjectionError,
    IncompatibleAssignmentError,
    MapError,
    MissingConverterError,
    NilArgumentError,
    SourceAccessError,
    TargetNotAddressableError,
    TypeMismatchError,
)
from .logging import get_logger
from .resolver import MISSING, resolve_source_field
from .shapes import (
    Shape,
    TypeShape,
    classify,
    is_assignable,
    is_record_source,
    is_record_type,
    needs_converter,
    type_key,
)

T = TypeVar("T")

ElementErrorHook = Callable[[int, MapError], None]


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Produced by a strategy when the target location must be left untouched
UNSET: Any = _Unset()

_NOTHING: Any = object()


class Ref(Generic[T]):
    """
    Typed, settable slot used as a mapping target.

    Records can be mapped into directly; every other shape (lists, optionals,
    scalars) needs a Ref so the mapper knows the declared type of the slot.

    Args:
        tp: Declared type of the slot, e.g. ``List[Region]``
        value: Initial value; defaults to the zero value of ``tp``
    """

    def __init__(self, tp: Any, value: Any = _NOTHING):
        self.type = tp
        self.shape = classify(tp)
        self.value: T = zero_value(self.shape) if value is _NOTHING else value

    def __repr__(self) -> str:
        return f"Ref({type_key(self.type)}, value={self.value!r})"


def render_string(value: Any) -> str:
    """Best-effort textual rendering of a source value for string targets."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return render_string(value.value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class ObjectMapper:
    """
    Maps source values into target locations.

    Args:
        converters: Converters keyed by target type (or its fully-qualified
            name), overlaid on the built-in table
        strict_lists: Raise on the first failing list element (default); when
            False the element keeps its zero value and is reported to
            ``on_element_error``
        on_element_error: Hook receiving ``(index, error)`` for skipped list
            elements; defaults to a structured warning log
    """

    def __init__(
        self,
        converters: Optional[Mapping[Any, TypeConverterFn]] = None,
        strict_lists: bool = True,
        on_element_error: Optional[ElementErrorHook] = None,
    ):
        self.converters = ConverterTable(converters)
        self.strict_lists = strict_lists
        self.on_element_error = on_element_error or self._log_element_error

    @classmethod
    def from_settings(
        cls,
        settings: MapperSettings,
        converters: Optional[Mapping[Any, TypeConverterFn]] = None,
        on_element_error: Optional[ElementErrorHook] = None,
    ) -> "ObjectMapper":
        """Build a mapper from MapperSettings."""
        return cls(
            converters=converters,
            strict_lists=settings.strict_lists,
            on_element_error=on_element_error,
        )

    @property
    def logger(self) -> Any:
        return get_logger(__name__)

    def map(
        self,
        source: Any,
        target: Any,
        converters: Optional[Mapping[Any, TypeConverterFn]] = None,
    ) -> None:
        """
        Map ``source`` into ``target`` in place.

        Args:
            source: Any value; records may be objects, dataclasses, pydantic
                models or mappings
            target: A Ref or a mutable record instance
            converters: Extra converters for this call only

        Raises:
            NilArgumentError: If source or target is None
            TargetNotAddressableError: If target is not a settable location
            MapError: If the source cannot be mapped into the target
        """
        self._validate_parameters(source, target)
        table = self.converters.merged(converters)

        self.logger.debug(
            "mapping started",
            source_type=type_key(type(source)),
            target_type=type_key(target.type if isinstance(target, Ref) else type(target)),
        )

        if isinstance(target, Ref):
            produced = self._project(source, target.shape, target.value, table)
            if produced is not UNSET:
                target.value = produced
        else:
            self._populate_record(source, describe(type(target)), target, table)

        self.logger.debug("mapping completed", source_type=type_key(type(source)))

    @staticmethod
    def _validate_parameters(source: Any, target: Any) -> None:
        if target is None:
            raise NilArgumentError("target")
        if source is None:
            raise NilArgumentError("source")

        if isinstance(target, Ref):
            return
        if isinstance(target, type) or not is_record_type(type(target)):
            raise TargetNotAddressableError(type_key(type(target)))
        if describe(type(target)).frozen:
            raise TargetNotAddressableError(type_key(type(target)))

    def _project(self, source: Any, shape: TypeShape, current: Any, table: ConverterTable) -> Any:
        """Produce the value for a location, through its converter when one is registered."""
        converter = table.lookup(shape.annotation)
        if converter is None or source is None:
            return self._map_value(source, shape, current, table)
        return self._convert(converter, source, shape)

    @staticmethod
    def _convert(converter: TypeConverterFn, source: Any, shape: TypeShape) -> Any:
        try:
            produced = converter(source)
        except MapError:
            raise
        except Exception as e:
            raise ConversionError(type_key(shape.annotation), e) from e

        if produced is None:
            return None if shape.kind is Shape.OPTIONAL else UNSET
        return produced

    def _map_value(self, source: Any, shape: TypeShape, current: Any, table: ConverterTable) -> Any:
        if isinstance(source, Ref):
            source = source.value

        if source is None:
            if shape.kind is Shape.OPTIONAL:
                return None
            if shape.kind is Shape.STRING:
                return ""
            return UNSET

        if shape.kind is Shape.OPTIONAL:
            return self._map_to_optional(source, shape, table)
        if shape.kind is Shape.RECORD:
            return self._map_to_record(source, shape, current, table)
        if shape.kind is Shape.LIST:
            return self._map_to_list(source, shape, table)
        if shape.kind is Shape.STRING:
            return render_string(source)
        return self._assign_scalar(source, shape)

    def _map_to_optional(self, source: Any, shape: TypeShape, table: ConverterTable) -> Any:
        inner = shape.inner
        converter = table.lookup(inner.annotation)
        if converter is not None:
            return self._convert(converter, source, shape)

        produced = self._map_value(source, inner, zero_value(inner), table)
        return None if produced is UNSET else produced

    def _map_to_record(
        self, source: Any, shape: TypeShape, current: Any, table: ConverterTable
    ) -> Any:
        descriptor = describe(shape.annotation)
        if descriptor.frozen:
            raise TargetNotAddressableError(descriptor.name)

        target = current if isinstance(current, descriptor.record_type) else descriptor.new_instance()
        self._populate_record(source, descriptor, target, table)
        return target

    def _populate_record(
        self, source: Any, descriptor: RecordDescriptor, target: Any, table: ConverterTable
    ) -> None:
        """
        Fill the public fields of ``target`` from ``source``.

        Fails fast: the first failing field aborts the record with a
        FieldProjectionError, fields written before it stay written.
        """
        if isinstance(source, Ref):
            source = source.value
        if not is_record_source(source):
            raise TypeMismatchError("record", type_key(type(source)))

        for field in descriptor.fields:
            if not field.is_public:
                continue

            try:
                value = self._resolve(source, field)
                if value is MISSING:
                    continue
                produced = self._project(value, field.shape, getattr(target, field.name, None), table)
            except MapError as e:
                raise FieldProjectionError(field.name, e) from e

            if produced is UNSET:
                continue
            setattr(target, field.name, produced)

    @staticmethod
    def _resolve(source: Any, field: FieldDescriptor) -> Any:
        try:
            return resolve_source_field(source, field)
        except MapError:
            raise
        except Exception as e:
            accessor = field.redirection.name if field.redirection else field.name
            raise SourceAccessError(accessor, e) from e

    def _map_to_list(self, source: Any, shape: TypeShape, table: ConverterTable) -> List[Any]:
        if not isinstance(source, (list, tuple)):
            raise TypeMismatchError("list", type_key(type(source)))

        element = shape.inner
        items = []
        for index, item in enumerate(source):
            slot = zero_value(element)
            try:
                produced = self._project(item, element, slot, table)
            except MapError as e:
                if self.strict_lists:
                    raise FieldProjectionError(f"[{index}]", e) from e
                self.on_element_error(index, e)
                # A failed element may be half filled, start over from zero
                slot, produced = zero_value(element), UNSET
            items.append(slot if produced is UNSET else produced)
        return items

    @staticmethod
    def _assign_scalar(source: Any, shape: TypeShape) -> Any:
        if is_assignable(source, shape.annotation):
            return source
        if needs_converter(source, shape.annotation):
            raise MissingConverterError(type_key(shape.annotation))
        raise IncompatibleAssignmentError(type_key(shape.annotation), type_key(type(source)))

    def _log_element_error(self, index: int, error: MapError) -> None:
        self.logger.warning(
            "list element skipped",
            index=index,
            error_code=error.error_code,
            error=error.message,
        )


_default_mapper = ObjectMapper()


def map_values(source: Any, target: Any) -> None:
    """
    Map ``source`` into ``target`` using the built-in converters.

    Args:
        source: Source value
        target: A Ref or a mutable record instance
    """
    _default_mapper.map(source, target)


def map_with_converters(
    source: Any, target: Any, converters: Mapping[Any, TypeConverterFn]
) -> None:
    """
    Map ``source`` into ``target``, overlaying ``converters`` on the built-ins for this call.

    Args:
        source: Source value
        target: A Ref or a mutable record instance
        converters: Converters keyed by target type or fully-qualified type name
    """
    _default_mapper.map(source, target, converters=converters)
