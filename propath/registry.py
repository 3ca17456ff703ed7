"""
registry.py

Capability registry — which members of a type can be read or written.

A CapabilityDescriptor is an immutable record describing one member:
- Whether it can be read
- Whether it can be written
- Which type it declares

Design Invariants:
- Descriptors are immutable after creation
- Discovery is per type, never per call site
- The cache belongs to the registry instance; callers control its lifetime
- Private names (leading underscore) are never exposed
"""

import inspect
import logging
import sys
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from propath.errors import ConstructionError

logger = logging.getLogger(__name__)


# =============================================================================
# CapabilityDescriptor
# =============================================================================

@dataclass(frozen=True)
class CapabilityDescriptor:
    """
    Read/write capability of one named member of a type.

    Attributes:
        owner: The type the member belongs to
        name: Canonical member name
        readable: Whether a read accessor exists
        writable: Whether a write accessor exists
        read_type: Type declared by the read accessor (None if unknown)
        write_type: Type declared by the write accessor (None if unknown)
    """
    owner: type
    name: str
    readable: bool
    writable: bool
    read_type: Any = None
    write_type: Any = None
    getter: Optional[Callable[[Any], Any]] = field(default=None, compare=False, repr=False)
    setter: Optional[Callable[[Any, Any], None]] = field(default=None, compare=False, repr=False)

    @property
    def value_type(self) -> Any:
        """The declared type values are converted to before a write."""
        return self.write_type if self.write_type is not None else self.read_type

    def read(self, target: Any) -> Any:
        return self.getter(target)

    def write(self, target: Any, value: Any) -> None:
        self.setter(target, value)


# =============================================================================
# Registry Protocol
# =============================================================================

class CapabilityRegistry:
    """
    Interface consumed by the accessor.

    Subclasses decide how members are discovered (static tables,
    introspection, generated schemas).
    """

    def describe(self, cls: type, name: str) -> Optional[CapabilityDescriptor]:
        raise NotImplementedError

    def describe_member(self, target: Any, name: str) -> Optional[CapabilityDescriptor]:
        """Describe ``name`` on a live object; defaults to its type."""
        return self.describe(type(target), name)

    def names(self, cls: type, *, writable: Optional[bool] = None) -> List[str]:
        raise NotImplementedError

    def member_names(self, target: Any, *, writable: Optional[bool] = None) -> List[str]:
        return self.names(type(target), writable=writable)

    def resolve_alias(self, cls: type, name: str) -> str:
        return name

    def can_construct(self, cls: Any) -> bool:
        raise NotImplementedError

    def construct(self, cls: type) -> Any:
        raise NotImplementedError


# =============================================================================
# Helper Functions
# =============================================================================

def _safe_type_hints(obj: Any) -> Dict[str, Any]:
    """
    Resolve annotations, tolerating unresolvable forward references.

    When the annotations of a class cannot all be resolved together, each
    one is resolved on its own so that a single ``TYPE_CHECKING`` import
    does not hide the types of every other member.
    """
    try:
        return typing.get_type_hints(obj)
    except (NameError, TypeError, AttributeError) as e:
        logger.debug("Could not resolve type hints of %r: %s", obj, e)
    if isinstance(obj, type):
        return _type_hints_per_name(obj)
    return {}


def _type_hints_per_name(cls: type) -> Dict[str, Any]:
    hints: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        module = sys.modules.get(klass.__module__)
        globalns = dict(getattr(module, "__dict__", {}))
        localns = dict(vars(klass))
        for name, raw in _own_annotations(klass).items():
            hints[name] = _resolve_annotation(klass, name, raw, globalns, localns)
    return hints


def _own_annotations(klass: type) -> Dict[str, Any]:
    try:
        annotations = klass.__dict__.get("__annotations__")
        if annotations is None:
            annotations = getattr(klass, "__annotations__", {})
    except NameError as e:
        logger.debug("Could not read annotations of %s: %s", klass.__qualname__, e)
        return {}
    return dict(annotations or {})


def _resolve_annotation(
    klass: type,
    name: str,
    raw: Any,
    globalns: Dict[str, Any],
    localns: Dict[str, Any],
) -> Any:
    # a one-annotation class keeps ClassVar and forward-reference rules intact
    single = type(klass.__name__, (), {"__annotations__": {name: raw},
                                       "__module__": klass.__module__})
    try:
        return typing.get_type_hints(single, globalns, localns)[name]
    except (NameError, TypeError, AttributeError, KeyError) as e:
        logger.debug("Could not resolve %s.%s: %s", klass.__qualname__, name, e)
        return None if isinstance(raw, str) else raw


def _setter_type(func: Callable) -> Any:
    """Type of the value parameter of ``func(self, value)``."""
    hints = _safe_type_hints(func)
    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return None
    if len(params) < 2:
        return None
    return hints.get(params[1].name)


def _accessor_method_name(name: str) -> Optional[tuple]:
    for prefix in ("get_", "is_", "set_"):
        if name.startswith(prefix) and len(name) > len(prefix):
            return prefix, name[len(prefix):]
    return None


# =============================================================================
# IntrospectingRegistry
# =============================================================================

class IntrospectingRegistry(CapabilityRegistry):
    """
    Discovers capabilities of plain Python classes.

    Recognized members, most specific first:
    - ``property`` objects (readable if fget, writable if fset)
    - ``get_x()`` / ``is_x()`` / ``set_x(value)`` accessor methods
    - annotated class attributes and dataclass fields
    - non-callable class attributes and ``__slots__`` members
    - instance attributes present in ``__dict__`` (per object)

    Aliases map one name onto another (``aliased_name -> name``); they come
    from ``register_alias`` or a ``__property_aliases__`` class attribute.
    """

    def __init__(self):
        self._cache: Dict[type, Dict[str, CapabilityDescriptor]] = {}
        self._aliases: Dict[type, Dict[str, str]] = {}

    # -------------------------------------------------------------------------
    # Cache lifecycle
    # -------------------------------------------------------------------------

    def invalidate(self, cls: Optional[type] = None) -> None:
        """Forget discovered descriptors for ``cls``, or for every type."""
        if cls is None:
            self._cache.clear()
        else:
            self._cache.pop(cls, None)

    # -------------------------------------------------------------------------
    # Aliases
    # -------------------------------------------------------------------------

    def register_alias(self, cls: type, alias: str, canonical: str) -> None:
        self._aliases.setdefault(cls, {})[alias] = canonical
        self.invalidate(cls)

    def _alias_table(self, cls: type) -> Dict[str, str]:
        table: Dict[str, str] = {}
        for klass in reversed(cls.__mro__):
            table.update(getattr(klass, "__dict__", {}).get("__property_aliases__", {}))
            table.update(self._aliases.get(klass, {}))
        return table

    def resolve_alias(self, cls: type, name: str) -> str:
        seen = set()
        table = self._alias_table(cls)
        while name in table and name not in seen:
            seen.add(name)
            name = table[name]
        return name

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def describe(self, cls: type, name: str) -> Optional[CapabilityDescriptor]:
        if not name or name.startswith("_"):
            return None
        table = self._descriptors(cls)
        return table.get(self.resolve_alias(cls, name))

    def describe_member(self, target: Any, name: str) -> Optional[CapabilityDescriptor]:
        descriptor = self.describe(type(target), name)
        if descriptor is not None or not name or name.startswith("_"):
            return descriptor

        instance_dict = getattr(target, "__dict__", None)
        if isinstance(instance_dict, dict) and name in instance_dict:
            return self._attribute_descriptor(type(target), name, None)
        return None

    def names(self, cls: type, *, writable: Optional[bool] = None) -> List[str]:
        table = self._descriptors(cls)
        result = [
            name for name, d in table.items()
            if writable is None or d.writable == writable
        ]
        for alias, canonical in self._alias_table(cls).items():
            target = table.get(self.resolve_alias(cls, canonical))
            if target is not None and (writable is None or target.writable == writable):
                result.append(alias)
        return sorted(set(result))

    def member_names(self, target: Any, *, writable: Optional[bool] = None) -> List[str]:
        """Names of ``target``'s type plus its public instance attributes."""
        names = set(self.names(type(target), writable=writable))
        instance_dict = getattr(target, "__dict__", None)
        if isinstance(instance_dict, dict) and writable is not False:
            names.update(k for k in instance_dict if isinstance(k, str) and not k.startswith("_"))
        return sorted(names)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def can_construct(self, cls: Any) -> bool:
        if not isinstance(cls, type) or inspect.isabstract(cls):
            return False
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            # builtins without signature metadata (dict, list, ...) construct fine
            return cls.__module__ == "builtins"
        return all(
            p.default is not inspect.Parameter.empty
            or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
            for p in signature.parameters.values()
        )

    def construct(self, cls: type) -> Any:
        if not self.can_construct(cls):
            raise ConstructionError(cls)
        try:
            return cls()
        except Exception as e:
            raise ConstructionError(cls, e) from e

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    def _descriptors(self, cls: type) -> Dict[str, CapabilityDescriptor]:
        cached = self._cache.get(cls)
        if cached is None:
            cached = self._discover(cls)
            self._cache[cls] = cached
            logger.debug("Discovered %d properties on %s", len(cached), cls.__qualname__)
        return cached

    def _discover(self, cls: type) -> Dict[str, CapabilityDescriptor]:
        found: Dict[str, CapabilityDescriptor] = {}
        hints = _safe_type_hints(cls) if isinstance(cls, type) else {}

        class_vars = {n for n, h in hints.items() if typing.get_origin(h) is typing.ClassVar}

        # plain attributes first so accessors defined later take precedence
        for name, hint in hints.items():
            if not name.startswith("_") and name not in class_vars:
                found[name] = self._attribute_descriptor(cls, name, hint)

        mro = [k for k in reversed(getattr(cls, "__mro__", ())) if k is not object]
        for klass in mro:
            for name in getattr(klass, "__slots__", ()):
                if isinstance(name, str) and not name.startswith("_") and name not in found:
                    found[name] = self._attribute_descriptor(cls, name, hints.get(name))

            for name, member in vars(klass).items():
                if name.startswith("_") or name in class_vars:
                    continue
                if isinstance(member, property):
                    found[name] = self._property_descriptor(cls, name, member)
                elif isinstance(member, (staticmethod, classmethod)):
                    continue
                elif not callable(member) and not inspect.isdatadescriptor(member):
                    if name not in found:
                        found[name] = self._attribute_descriptor(cls, name, hints.get(name))

        self._add_accessor_methods(cls, found)
        return found

    def _add_accessor_methods(self, cls: type, found: Dict[str, CapabilityDescriptor]) -> None:
        getters: Dict[str, Callable] = {}
        setters: Dict[str, Callable] = {}

        for attr in dir(cls):
            split = _accessor_method_name(attr)
            if split is None:
                continue
            member = inspect.getattr_static(cls, attr, None)
            if not inspect.isfunction(member):
                continue
            prefix, name = split
            if name.startswith("_") or name in found:
                continue
            arity = len(inspect.signature(member).parameters)
            if prefix == "set_" and arity == 2:
                setters[name] = member
            elif prefix in ("get_", "is_") and arity == 1:
                getters.setdefault(name, member)

        for name in set(getters) | set(setters):
            fget = getters.get(name)
            fset = setters.get(name)
            found[name] = CapabilityDescriptor(
                owner=cls,
                name=name,
                readable=fget is not None,
                writable=fset is not None,
                read_type=_safe_type_hints(fget).get("return") if fget else None,
                write_type=_setter_type(fset) if fset else None,
                getter=(lambda obj, f=fget: f(obj)) if fget else None,
                setter=(lambda obj, value, f=fset: f(obj, value)) if fset else None,
            )

    @staticmethod
    def _property_descriptor(cls: type, name: str, prop: property) -> CapabilityDescriptor:
        read_type = _safe_type_hints(prop.fget).get("return") if prop.fget else None
        write_type = _setter_type(prop.fset) if prop.fset else None
        return CapabilityDescriptor(
            owner=cls,
            name=name,
            readable=prop.fget is not None,
            writable=prop.fset is not None,
            read_type=read_type,
            write_type=write_type,
            getter=(lambda obj: getattr(obj, name)) if prop.fget else None,
            setter=(lambda obj, value: setattr(obj, name, value)) if prop.fset else None,
        )

    @staticmethod
    def _attribute_descriptor(cls: type, name: str, hint: Any) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            owner=cls,
            name=name,
            readable=True,
            writable=True,
            read_type=hint,
            write_type=hint,
            getter=lambda obj: getattr(obj, name, None),
            setter=lambda obj, value: setattr(obj, name, value),
        )
