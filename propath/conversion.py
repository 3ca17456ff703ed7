"""
conversion.py

Type conversion for property writes.

A TypeConverter coerces a raw value (typically text from a form or config
file) to the type a property declares. Conversion never touches the target
object: it either produces a value or a failed ConversionOutcome.
"""

import logging
import re
import types
import typing
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from propath.errors import TypeMismatchError

logger = logging.getLogger(__name__)

_NoneType = type(None)

TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
FALSE_STRINGS = frozenset({"false", "no", "off", "0"})

_COLLECTION_TYPES = (list, tuple, set, frozenset)

_DECIMAL_INTEGER = re.compile(r"[+-]?[0-9]+")


# =============================================================================
# ConversionOutcome
# =============================================================================

@dataclass(frozen=True)
class ConversionOutcome:
    """Result of a conversion: either a value or the reason it failed."""
    ok: bool
    value: Any = None
    raw: Any = None
    target_type: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: Any, raw: Any = None) -> "ConversionOutcome":
        return cls(ok=True, value=value, raw=raw)

    @classmethod
    def failure(cls, raw: Any, target_type: Any, error: BaseException) -> "ConversionOutcome":
        return cls(ok=False, raw=raw, target_type=target_type, error=error)

    def unwrap(self, property_name: Optional[str] = None) -> Any:
        """Return the converted value or raise TypeMismatchError."""
        if self.ok:
            return self.value
        raise TypeMismatchError(self.raw, self.target_type, self.error, property_name) from self.error


# =============================================================================
# Typing helpers
# =============================================================================

def is_unknown_type(target_type: Any) -> bool:
    return target_type is None or target_type is Any or target_type is object


def unwrap_optional(target_type: Any) -> Any:
    """``Optional[X]`` -> ``X``; other types unchanged."""
    if typing.get_origin(target_type) is typing.Union or _is_union_type(target_type):
        args = [a for a in typing.get_args(target_type) if a is not _NoneType]
        if len(args) == 1:
            return args[0]
    return target_type


def _is_union_type(target_type: Any) -> bool:
    union_type = getattr(types, "UnionType", None)
    return union_type is not None and isinstance(target_type, union_type)


def _satisfies(value: Any, target_type: Any) -> bool:
    return isinstance(target_type, type) and isinstance(value, target_type)


# =============================================================================
# Default coercions
# =============================================================================

def _to_bool(value: str, target_type: type) -> bool:
    text = value.strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean value {value!r}")


def _to_int(value: Any, target_type: type) -> int:
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value!r} has a fractional part")
        return int(value)
    if isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError(f"{value!r} has a fractional part")
        return int(value)
    text = value.strip()
    if not _DECIMAL_INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer value {value!r}")
    return int(text)


def _to_float(value: Any, target_type: type) -> float:
    if isinstance(value, str):
        return float(value.strip())
    return float(value)


def _to_decimal(value: Any, target_type: type) -> Decimal:
    if isinstance(value, str):
        return Decimal(value.strip())
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def _to_enum(value: Any, target_type: type) -> Enum:
    if isinstance(value, str):
        text = value.strip()
        try:
            return target_type[text]
        except KeyError:
            pass
    return target_type(value)


def _to_str(value: Any, target_type: type) -> str:
    if isinstance(value, Enum):
        return value.name
    return str(value)


DEFAULT_COERCIONS: Dict[Tuple[type, type], Callable[[Any, type], Any]] = {
    (str, int): _to_int,
    (float, int): _to_int,
    (Decimal, int): _to_int,
    (str, float): _to_float,
    (int, float): _to_float,
    (Decimal, float): _to_float,
    (str, Decimal): _to_decimal,
    (int, Decimal): _to_decimal,
    (float, Decimal): _to_decimal,
    (str, bool): _to_bool,
    (str, Enum): _to_enum,
    (int, Enum): _to_enum,
    (int, str): _to_str,
    (float, str): _to_str,
    (Decimal, str): _to_str,
    (bool, str): _to_str,
    (Enum, str): _to_str,
}


# =============================================================================
# TypeConverter
# =============================================================================

class TypeConverter:
    """
    Coerces raw values to declared property types.

    Lookup walks the MRO of the raw value's type against the MRO of the
    target type, so a coercion registered for ``(str, Enum)`` serves every
    enum class.
    """

    def __init__(self, defaults: bool = True):
        self._coercions: Dict[Tuple[type, type], Callable[[Any, type], Any]] = {}
        if defaults:
            self._coercions.update(DEFAULT_COERCIONS)

    def register(self, source_type: type, target_type: type, func: Callable[[Any], Any]) -> None:
        """
        Register (or override) a coercion.

        Args:
            source_type: Type of raw values the coercion accepts
            target_type: Declared type it produces
            func: ``func(raw_value) -> converted``; raise ValueError or
                  TypeError to reject the value
        """
        self._coercions[(source_type, target_type)] = lambda value, _target: func(value)

    def find(self, source_type: type, target_type: type) -> Optional[Callable[[Any, type], Any]]:
        targets = getattr(target_type, "__mro__", (target_type,))
        if isinstance(target_type, type) and issubclass(target_type, Enum):
            # IntEnum and friends also derive from int or str
            targets = (target_type, Enum) + targets
        for target in targets:
            if target is object:
                continue
            if target is int and target_type is bool:
                # bool is an int subclass; numeric-to-int rules would yield 0 or 1
                continue
            for source in source_type.__mro__:
                func = self._coercions.get((source, target))
                if func is not None:
                    return func
        return None

    def convert(self, raw_value: Any, target_type: Any) -> ConversionOutcome:
        """
        Convert ``raw_value`` to ``target_type``.

        Returns:
            ConversionOutcome carrying the converted value, or the raw value,
            the target type and the underlying error on failure
        """
        try:
            return ConversionOutcome.success(self._convert(raw_value, target_type), raw_value)
        except (ValueError, TypeError, ArithmeticError, KeyError) as e:
            logger.debug("Conversion of %r to %r failed: %s", raw_value, target_type, e)
            return ConversionOutcome.failure(raw_value, target_type, e)

    def _convert(self, value: Any, target_type: Any) -> Any:
        if is_unknown_type(target_type) or value is None:
            return value

        origin = typing.get_origin(target_type)
        if origin is typing.Union or _is_union_type(target_type):
            return self._convert_union(value, target_type)
        if origin is typing.Literal:
            if value in typing.get_args(target_type):
                return value
            raise ValueError(f"{value!r} is not one of {typing.get_args(target_type)}")
        if origin in _COLLECTION_TYPES:
            return self._convert_collection(value, origin, typing.get_args(target_type))
        if origin is not None:
            # parametrized types without element conversion (Dict[K, V], Holder[T])
            if isinstance(origin, type) and isinstance(value, origin):
                return value
            target_type = origin

        if not isinstance(target_type, type):
            return value

        if _satisfies(value, target_type):
            return value

        if target_type in _COLLECTION_TYPES:
            return self._convert_collection(value, target_type, ())

        func = self.find(type(value), target_type)
        if func is None:
            raise TypeError(
                f"no conversion from {type(value).__name__} to {target_type.__name__}"
            )
        return func(value, target_type)

    def _convert_union(self, value: Any, target_type: Any) -> Any:
        args = [a for a in typing.get_args(target_type) if a is not _NoneType]
        for arg in args:
            if _satisfies(value, arg):
                return value

        last_error: Optional[BaseException] = None
        for arg in args:
            try:
                return self._convert(value, arg)
            except (ValueError, TypeError, ArithmeticError, KeyError) as e:
                last_error = e
        raise last_error or TypeError(f"no conversion to {target_type}")

    def _convert_collection(self, value: Any, origin: type, args: Tuple[Any, ...]) -> Any:
        if isinstance(value, str):
            items = [part.strip() for part in value.split(",")] if value.strip() else []
        elif isinstance(value, (list, tuple, set, frozenset)):
            items = list(value)
        else:
            raise TypeError(f"cannot convert {type(value).__name__} to {origin.__name__}")

        if origin is tuple and args and args[-1] is not Ellipsis:
            if len(args) != len(items):
                raise ValueError(f"expected {len(args)} elements, got {len(items)}")
            return tuple(self._convert(item, arg) for item, arg in zip(items, args))

        element_type = args[0] if args else None
        return origin(self._convert(item, element_type) for item in items)
