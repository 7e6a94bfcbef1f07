"""
Type shape classification for the object mapper.

Every target annotation is reduced to one of five shapes (optional, record,
list, string, scalar). The mapper dispatches on the shape of the target, never
on the shape of the source.
"""

import dataclasses
import types
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Tuple, Union, get_args, get_origin

from pydantic import BaseModel

NoneType = type(None)

# Values of these types can never act as a record source
_NON_RECORD_TYPES = (
    str,
    bytes,
    bytearray,
    bool,
    int,
    float,
    complex,
    list,
    tuple,
    set,
    frozenset,
)

# Scalars assigned only on an exact type match (no widening, bool is not an int)
_EXACT_SCALARS = (bool, int, float, complex)


class Shape(str, Enum):
    """Shape of a target location."""

    OPTIONAL = "optional"
    RECORD = "record"
    LIST = "list"
    STRING = "string"
    SCALAR = "scalar"


@dataclass(frozen=True)
class TypeShape:
    """Classified annotation; ``inner`` is the optional payload or list element."""

    kind: Shape
    annotation: Any
    inner: Optional["TypeShape"] = None

    @property
    def accepts_tuple(self) -> bool:
        target = self.inner if self.kind is Shape.OPTIONAL and self.inner else self
        origin = get_origin(target.annotation) or target.annotation
        return origin is tuple


def unwrap_annotated(tp: Any) -> Tuple[Any, Tuple[Any, ...]]:
    """Split ``Annotated[T, x, y]`` into ``(T, (x, y))``."""
    if get_origin(tp) is Annotated:
        base, *extras = get_args(tp)
        return base, tuple(extras)
    return tp, ()


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def is_record_type(tp: Any) -> bool:
    """Check whether ``tp`` is a record class (dataclass or pydantic model)."""
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    if dataclasses.is_dataclass(tp):
        return True
    return issubclass(tp, BaseModel)


def is_record_source(value: Any) -> bool:
    """Check whether fields can be read off ``value``."""
    return not isinstance(value, _NON_RECORD_TYPES) and not isinstance(value, type)


def classify(tp: Any) -> TypeShape:
    """
    Classify a type annotation into a TypeShape.

    Args:
        tp: Type annotation (may be Annotated, Optional, a generic alias or a class)

    Returns:
        TypeShape describing how the mapper fills a location of this type
    """
    tp, _ = unwrap_annotated(tp)

    if is_union(tp):
        args = get_args(tp)
        members = [arg for arg in args if arg is not NoneType]
        if len(members) == len(args):
            return TypeShape(Shape.SCALAR, tp)
        inner = members[0] if len(members) == 1 else Union[tuple(members)]
        return TypeShape(Shape.OPTIONAL, tp, classify(inner))

    if tp is str:
        return TypeShape(Shape.STRING, tp)

    if tp is list or get_origin(tp) is list:
        args = get_args(tp)
        return TypeShape(Shape.LIST, tp, classify(args[0] if args else Any))

    if is_record_type(tp):
        return TypeShape(Shape.RECORD, tp)

    return TypeShape(Shape.SCALAR, tp)


def type_key(tp: Any) -> str:
    """
    Fully-qualified key of a type, used for converter lookup and diagnostics.

    Builtins are keyed by bare name (``str``, ``int``), other classes by
    ``module.QualName`` (``datetime.datetime``). Generic aliases are keyed by
    origin and arguments, so ``List[int]`` and ``list[int]`` share ``list[int]``
    and ``Optional[int]`` and ``int | None`` share ``Union[int, NoneType]``.
    Strings pass through so that callers can register converters by name.
    """
    if isinstance(tp, str):
        return tp
    tp, _ = unwrap_annotated(tp)
    origin = get_origin(tp)
    if origin is not None:
        if is_union(tp):
            name = "Union"
        elif origin is Literal:
            name = "Literal"
        else:
            name = type_key(origin)
        return f"{name}[{', '.join(type_key(arg) for arg in get_args(tp))}]"
    if isinstance(tp, type):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)


def is_assignable(value: Any, tp: Any) -> bool:
    """Check whether ``value`` may be stored as-is into a location of type ``tp``."""
    tp, _ = unwrap_annotated(tp)
    if tp is Any or tp is object:
        return True
    if is_union(tp):
        return any(is_assignable(value, arg) for arg in get_args(tp))

    origin = get_origin(tp) or tp
    if origin is Literal:
        return value in get_args(tp)
    if origin in _EXACT_SCALARS:
        return type(value) is origin
    if hasattr(origin, "__supertype__"):
        return is_assignable(value, origin.__supertype__)
    if isinstance(origin, type):
        return isinstance(value, origin)
    return True


def needs_converter(value: Any, tp: Any) -> bool:
    """Check whether ``tp`` specialises the type of ``value`` (e.g. ``class Tag(str)``)."""
    tp, _ = unwrap_annotated(tp)
    origin = get_origin(tp) or tp
    if not isinstance(origin, type):
        return False
    source_type = type(value)
    return origin is not source_type and issubclass(origin, source_type)
