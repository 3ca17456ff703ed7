"""
meta.py

Reflective meta-properties reachable through paths.

``class`` on any object yields its type. On a type only a fixed set of
synthetic properties is readable (``class.name``, ``class.simple_name``);
sensitive sub-paths such as the defining module or its loader are denied
even when the attribute exists, so path-based access cannot reach runtime
internals.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Optional

CLASS_SEGMENT = "class"


def _full_name(cls: type) -> str:
    module = getattr(cls, "__module__", None)
    if module in (None, "builtins"):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


DEFAULT_EXPOSED: Dict[str, Callable[[type], Any]] = {
    "name": _full_name,
    "simple_name": lambda cls: cls.__name__,
    "qualname": lambda cls: cls.__qualname__,
}

DEFAULT_DENIED: FrozenSet[str] = frozenset({
    "module",
    "loader",
    "package",
    "spec",
    "dict",
    "mro",
    "subclasses",
    "bases",
    "globals",
    "code",
})


@dataclass(frozen=True)
class MetaProperty:
    """A synthetic, read-only property."""
    name: str
    value_type: Any
    read: Callable[[Any], Any]


@dataclass(frozen=True)
class MetaPropertyPolicy:
    """
    Decides which reflective segments are exposed.

    Attributes:
        exposed: Synthetic properties readable on type objects
        denied: Names refused on type objects regardless of existence
        class_segment: Segment name yielding an object's type (None disables it)
    """
    exposed: Dict[str, Callable[[type], Any]] = field(
        default_factory=lambda: dict(DEFAULT_EXPOSED)
    )
    denied: FrozenSet[str] = DEFAULT_DENIED
    class_segment: Optional[str] = CLASS_SEGMENT

    def is_denied(self, owner: Any, name: str) -> bool:
        if not isinstance(owner, type):
            return False
        return name in self.denied or name.startswith("_")

    def resolve(self, owner: Any, name: str) -> Optional[MetaProperty]:
        """
        Synthetic property for ``name`` on ``owner``, if the policy defines one.

        ``owner`` is a live object while navigating, or a type when
        navigating a type object reached through ``class``.
        """
        if isinstance(owner, type):
            if self.is_denied(owner, name):
                return None
            reader = self.exposed.get(name)
            if reader is None:
                return None
            return MetaProperty(name, str, reader)

        if self.class_segment is not None and name == self.class_segment:
            return MetaProperty(name, type, type)
        return None

    def governs(self, owner: Any) -> bool:
        """Whether ``owner`` is only navigable through this policy."""
        return isinstance(owner, type)
