"""
Field resolver: picks the source value that feeds a target record field.

Resolution rules, in order:

- ``fromField:<Name>`` reads ``<Name>`` off the source
- ``fromMethod:<Name>`` calls the zero-argument method ``<Name>`` on the source
  (a non-callable attribute such as a property is used as is)
- otherwise the same-named field of the source is read

Names starting with an underscore are private and never resolved. A field that
cannot be resolved yields ``MISSING`` and is skipped by the mapper.
"""

from typing import Any, Mapping

from .descriptors import FieldDescriptor, RedirectKind


class _Missing:
    """Sentinel type for unresolved source fields."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def is_private(name: str) -> bool:
    return name.startswith("_")


def read_field(source: Any, name: str) -> Any:
    """Read field ``name`` off a record or mapping source."""
    if is_private(name):
        return MISSING
    if isinstance(source, Mapping):
        return source.get(name, MISSING)
    return getattr(source, name, MISSING)


def call_method(source: Any, name: str, field: FieldDescriptor) -> Any:
    """
    Invoke the zero-argument accessor ``name`` on ``source``.

    A tuple result stands for ``(value, extra...)`` and only its first element
    is used, unless the target field itself holds tuples.
    """
    if is_private(name):
        return MISSING

    member = getattr(source, name, MISSING)
    if member is MISSING and isinstance(source, Mapping):
        member = source.get(name, MISSING)
    if member is MISSING:
        return MISSING

    result = member() if callable(member) else member
    if isinstance(result, tuple) and not field.shape.accepts_tuple:
        return result[0] if result else MISSING
    return result


def resolve_source_field(source: Any, field: FieldDescriptor) -> Any:
    """
    Resolve the source value feeding ``field``.

    Args:
        source: Source record (object, dataclass, pydantic model or mapping)
        field: Descriptor of the target field

    Returns:
        The source value, or MISSING when the field cannot be resolved
    """
    redirection = field.redirection
    if redirection is not None:
        if redirection.kind is RedirectKind.FROM_FIELD:
            return read_field(source, redirection.name)
        if redirection.kind is RedirectKind.FROM_METHOD:
            return call_method(source, redirection.name, field)

    return read_field(source, field.name)
