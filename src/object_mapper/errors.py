"""Exception hierarchy for the object mapper."""

from typing import Any, Dict, Optional


class MapError(Exception):
    """Base exception for all mapping failures."""

    default_code = "MAP_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}'"
            f")"
        )


class NilArgumentError(MapError):
    """Raised when the source or the target argument is None."""

    default_code = "NIL_ARGUMENT"

    def __init__(self, which: str):
        super().__init__(
            f"Invalid parameter: {which} cannot be None",
            details={"parameter": which},
        )
        self.which = which


class TargetNotAddressableError(MapError):
    """Raised when the target is not a settable location."""

    default_code = "TARGET_NOT_ADDRESSABLE"

    def __init__(self, target_type: str):
        super().__init__(
            f"Invalid parameter: target must be a Ref or a mutable record instance, got {target_type}",
            details={"parameter": "target", "target_type": target_type},
        )
        self.target_type = target_type


class TypeMismatchError(MapError):
    """Raised when the source shape cannot feed the target shape."""

    default_code = "TYPE_MISMATCH"

    def __init__(self, expected_kind: str, actual_type: str):
        super().__init__(
            f"cannot map to a {expected_kind} from type: {actual_type}",
            details={"expected_kind": expected_kind, "actual_type": actual_type},
        )
        self.expected_kind = expected_kind
        self.actual_type = actual_type


class FieldProjectionError(MapError):
    """
    Wraps a failure raised while populating one record field or list element.

    Nested projection errors chain through ``cause`` so that ``path`` yields
    the full location of the failure, e.g. ``Child.Items[1].ID``.
    """

    default_code = "FIELD_PROJECTION"

    def __init__(self, field_name: str, cause: BaseException):
        self.field_name = field_name
        self.cause = cause
        path = self._build_path()
        super().__init__(
            f"Invalid field: {path}: invalid field projection: {self.root_cause}",
            details={
                "field": field_name,
                "path": path,
                "cause": type(self.root_cause).__name__,
            },
        )
        self.__cause__ = cause

    @property
    def root_cause(self) -> BaseException:
        """Innermost error that is not itself a projection error."""
        err: BaseException = self
        while isinstance(err, FieldProjectionError):
            err = err.cause
        return err

    @property
    def path(self) -> str:
        return self._build_path()

    def _build_path(self) -> str:
        parts = []
        err: BaseException = self
        while isinstance(err, FieldProjectionError):
            parts.append(err.field_name)
            err = err.cause

        path = ""
        for part in parts:
            if part.startswith("[") or not path:
                path += part
            else:
                path += "." + part
        return path


class MissingConverterError(MapError):
    """Raised when a target type needs a converter and none is registered."""

    default_code = "MISSING_CONVERTER"

    def __init__(self, target_type: str):
        super().__init__(
            f"no converter registered for target type {target_type}",
            details={"target_type": target_type},
        )
        self.target_type = target_type


class ConversionError(MapError):
    """Raised when a registered converter fails."""

    default_code = "CONVERSION_FAILED"

    def __init__(self, target_type: str, cause: BaseException):
        super().__init__(
            f"converter for {target_type} failed: {cause}",
            details={"target_type": target_type, "cause": type(cause).__name__},
        )
        self.target_type = target_type
        self.cause = cause
        self.__cause__ = cause


class SourceAccessError(MapError):
    """Raised when reading a field or calling an accessor on the source fails."""

    default_code = "SOURCE_ACCESS_FAILED"

    def __init__(self, accessor: str, cause: BaseException):
        super().__init__(
            f"reading {accessor} from source failed: {cause}",
            details={"accessor": accessor, "cause": type(cause).__name__},
        )
        self.accessor = accessor
        self.cause = cause
        self.__cause__ = cause


class IncompatibleAssignmentError(MapError):
    """Raised when a scalar source cannot be assigned to the target type."""

    default_code = "INCOMPATIBLE_ASSIGNMENT"

    def __init__(self, target_type: str, source_type: str):
        super().__init__(
            f"cannot assign value of type {source_type} to {target_type}",
            details={"target_type": target_type, "source_type": source_type},
        )
        self.target_type = target_type
        self.source_type = source_type


class UnresolvedAnnotationError(MapError):
    """Raised when a record field annotation cannot be resolved to a type."""

    default_code = "UNRESOLVED_ANNOTATION"

    def __init__(self, record_type: str, field_name: str, annotation: Any, cause: BaseException):
        super().__init__(
            f"cannot resolve annotation {annotation!r} of {record_type}.{field_name}: {cause}",
            details={"record_type": record_type, "field": field_name},
        )
        self.record_type = record_type
        self.field_name = field_name
        self.__cause__ = cause


class ConfigurationError(MapError):
    """Raised when mapper settings cannot be loaded."""

    default_code = "CONFIGURATION_ERROR"
