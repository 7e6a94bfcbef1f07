"""
Converter table for target types the mapper cannot fill structurally.

Converters are keyed by the fully-qualified name of the *target* type. The
built-in table is immutable; caller converters are overlaid on a copy for each
call so concurrent calls never observe each other's overrides.
"""

from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from .shapes import type_key

TypeConverterFn = Callable[[Any], Any]


def canonical_datetime(value: Any) -> datetime:
    """
    Normalise a timestamp by formatting and re-parsing it at second precision.

    Args:
        value: datetime instance or ISO-8601 string

    Returns:
        datetime with sub-second precision dropped and the UTC offset kept
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    if not isinstance(value, datetime):
        raise TypeError(f"expected datetime or ISO-8601 string, got {type(value).__name__}")
    return datetime.fromisoformat(value.isoformat(timespec="seconds"))


DEFAULT_CONVERTERS: Mapping[str, TypeConverterFn] = MappingProxyType(
    {
        "datetime.datetime": canonical_datetime,
    }
)


def normalize_converters(converters: Optional[Mapping[Any, TypeConverterFn]]) -> Dict[str, TypeConverterFn]:
    """Key a caller converter mapping by type key; types and names are both accepted."""
    if not converters:
        return {}
    return {type_key(key): fn for key, fn in converters.items()}


class ConverterTable(Mapping[str, TypeConverterFn]):
    """Read-only converter lookup built from the defaults plus caller overrides."""

    def __init__(
        self,
        overrides: Optional[Mapping[Any, TypeConverterFn]] = None,
        defaults: Mapping[str, TypeConverterFn] = DEFAULT_CONVERTERS,
    ):
        table = dict(defaults)
        table.update(normalize_converters(overrides))
        self._converters: Mapping[str, TypeConverterFn] = MappingProxyType(table)

    def lookup(self, tp: Any) -> Optional[TypeConverterFn]:
        """Return the converter registered for target type ``tp``, if any."""
        return self._converters.get(type_key(tp))

    def merged(self, overrides: Optional[Mapping[Any, TypeConverterFn]]) -> "ConverterTable":
        """Return a new table with ``overrides`` applied on top of this one."""
        if not overrides:
            return self
        return ConverterTable(overrides, defaults=self._converters)

    def __getitem__(self, key: str) -> TypeConverterFn:
        return self._converters[type_key(key)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._converters)

    def __len__(self) -> int:
        return len(self._converters)

    def __repr__(self) -> str:
        return f"ConverterTable({sorted(self._converters)})"
