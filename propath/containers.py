"""
containers.py

Single-value containers: wrapper types holding zero or one value.

The accessor unwraps registered container types transparently while
navigating a path, so ``"object.name"`` reaches the ``name`` of the value a
``Holder`` returned by ``object`` contains.
"""

import weakref
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar, get_args, get_origin

T = TypeVar("T")


class Holder(Generic[T]):
    """
    A container holding zero or one value.

    Holders are immutable; ``Holder.of(None)`` is the empty holder.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Optional[T] = None):
        object.__setattr__(self, "_value", value)

    @classmethod
    def of(cls, value: Optional[T]) -> "Holder[T]":
        return cls(value)

    @classmethod
    def empty(cls) -> "Holder[T]":
        return cls(None)

    def is_present(self) -> bool:
        return self._value is not None

    def get(self) -> T:
        if self._value is None:
            raise ValueError("Holder is empty")
        return self._value

    def or_else(self, default: Optional[T]) -> Optional[T]:
        return self._value if self._value is not None else default

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Holder is immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Holder):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(("Holder", self._value))

    def __repr__(self) -> str:
        if self._value is None:
            return "Holder.empty()"
        return f"Holder.of({self._value!r})"


@dataclass(frozen=True)
class ContainerAdapter:
    """How to unwrap (and optionally wrap) one container type."""
    container_type: type
    unwrap: Callable[[Any], Any]
    wrap: Optional[Callable[[Any], Any]] = None


class ContainerRegistry:
    """Table of single-value container types known to the accessor."""

    def __init__(self, defaults: bool = True):
        self._adapters: Dict[type, ContainerAdapter] = {}
        if defaults:
            self.register(Holder, lambda h: h.or_else(None), Holder.of)
            self.register(weakref.ReferenceType, lambda ref: ref(), weakref.ref)

    def register(
        self,
        container_type: type,
        unwrap: Callable[[Any], Any],
        wrap: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        """Register (or replace) the adapter for ``container_type``."""
        self._adapters[container_type] = ContainerAdapter(container_type, unwrap, wrap)

    def adapter_for(self, value_or_type: Any) -> Optional[ContainerAdapter]:
        origin = get_origin(value_or_type)
        if isinstance(origin, type):
            cls = origin
        elif isinstance(value_or_type, type):
            cls = value_or_type
        else:
            cls = type(value_or_type)
        if not isinstance(cls, type):
            return None
        for klass in cls.__mro__:
            adapter = self._adapters.get(klass)
            if adapter is not None:
                return adapter
        return None

    def is_container(self, value_or_type: Any) -> bool:
        return self.adapter_for(value_or_type) is not None

    def unwrap(self, value: Any) -> Tuple[Any, bool]:
        """
        Unwrap ``value`` if it is a registered container.

        Returns:
            (contained value or value itself, whether it was a container)
        """
        if value is None:
            return None, False
        adapter = self.adapter_for(type(value))
        if adapter is None:
            return value, False
        return adapter.unwrap(value), True

    def contained_type(self, declared: Any) -> Any:
        """``Holder[Person]`` -> ``Person``; anything else is returned as is."""
        origin = get_origin(declared)
        if origin is None or self.adapter_for(origin) is None:
            return declared
        args = get_args(declared)
        return args[0] if args else None
