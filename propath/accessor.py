"""
accessor.py

PropertyAccessor — reads and writes values through property paths.

The accessor is a coordinator that:
- Parses the path
- Resolves each segment against the current object
- Unwraps single-value containers while navigating
- Grows absent intermediate objects when asked to
- Converts the final value to the declared type and writes it

Design Invariants:
- No per-call state survives a call
- Single-property operations fail on the first error along the path
- Nothing is written until the final segment is resolved and converted
- Failed best-effort reads of the old value never abort a write
"""

import dataclasses
import logging
import typing
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

from propath.containers import ContainerRegistry
from propath.conversion import TypeConverter, is_unknown_type, unwrap_optional
from propath.errors import (
    AutoGrowFailedError,
    ConstructionError,
    InvalidPropertyError,
    MalformedPathError,
    NotReadablePropertyError,
    NotWritablePropertyError,
    NullValueInNestedPathError,
    PropertyAccessError,
    PropertyInvocationError,
)
from propath.meta import MetaPropertyPolicy
from propath.path import KeySegment, PropertyPath, Segment, parse_path
from propath.registry import CapabilityRegistry, IntrospectingRegistry
from propath.suggestions import suggest

logger = logging.getLogger(__name__)

PathLike = Union[str, PropertyPath]


# =============================================================================
# Options and results
# =============================================================================

@dataclass(frozen=True)
class AccessOptions:
    """
    Behaviour switches for property writes.

    Attributes:
        auto_grow: Create absent intermediate objects on write
        extract_old_value: Read the current value before writing it
        auto_grow_collection_limit: Largest list index auto-grow may pad to
    """
    auto_grow: bool = False
    extract_old_value: bool = False
    auto_grow_collection_limit: int = 2 ** 31 - 1

    def replace(self, **changes: Any) -> "AccessOptions":
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class PropertyDescriptor:
    """Declared type and capabilities of a path's final segment."""
    path: str
    name: str
    owner: Any
    property_type: Any
    readable: bool
    writable: bool


@dataclass(frozen=True)
class PropertyChange:
    """A successful write. ``old_value`` is None unless it was extracted."""
    path: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class PropertyResult:
    """Outcome of one assignment, recorded rather than raised."""
    path: str
    value: Any
    change: Optional[PropertyChange] = None
    error: Optional[PropertyAccessError] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class _Slot:
    """One resolved segment: how to read and write it on its owner."""
    name: str
    readable: bool
    writable: bool
    read_type: Any = None
    write_type: Any = None
    read: Optional[Callable[[], Any]] = None
    write: Optional[Callable[[Any], None]] = None

    @property
    def value_type(self) -> Any:
        return self.write_type if self.write_type is not None else self.read_type


def _mapping_key_type(declared: Any) -> Any:
    args = typing.get_args(unwrap_optional(declared))
    return args[0] if len(args) == 2 else None


def _mapping_value_type(declared: Any) -> Any:
    args = typing.get_args(unwrap_optional(declared))
    return args[1] if len(args) == 2 else None


def _sequence_element_type(declared: Any) -> Any:
    args = typing.get_args(unwrap_optional(declared))
    return args[0] if args else None


def _path_text(path: PathLike) -> str:
    return path.text if isinstance(path, PropertyPath) else str(path)


# =============================================================================
# PropertyAccessor
# =============================================================================

class PropertyAccessor:
    """
    Property-path access over arbitrary object graphs.

    Example::

        accessor = PropertyAccessor()
        accessor.set_value(person, "spouse.name", "Kerry")
        accessor.get_value(person, "spouse.name")            # "Kerry"
        accessor.set_value(person, "address.city", "Oslo",
                           AccessOptions(auto_grow=True))
    """

    def __init__(
        self,
        registry: Optional[CapabilityRegistry] = None,
        converter: Optional[TypeConverter] = None,
        meta_policy: Optional[MetaPropertyPolicy] = None,
        containers: Optional[ContainerRegistry] = None,
        options: Optional[AccessOptions] = None,
    ):
        self.registry = registry or IntrospectingRegistry()
        self.converter = converter or TypeConverter()
        self.meta_policy = meta_policy or MetaPropertyPolicy()
        self.containers = containers or ContainerRegistry()
        self.options = options or AccessOptions()

    # -------------------------------------------------------------------------
    # Capability checks
    # -------------------------------------------------------------------------

    def is_readable(self, root: Any, path: PathLike) -> bool:
        """Whether ``path`` can be read; never raises for unknown paths."""
        resolved = self._inspect(root, path)
        return resolved is not None and resolved[1].readable

    def is_writable(self, root: Any, path: PathLike) -> bool:
        """Whether ``path`` can be written; never raises for unknown paths."""
        resolved = self._inspect(root, path)
        return resolved is not None and resolved[1].writable

    def describe(self, root: Any, path: PathLike) -> PropertyDescriptor:
        """
        Describe the final segment of ``path``.

        Raises:
            MalformedPathError: If the path does not parse
            InvalidPropertyError: If any segment does not resolve
        """
        parsed = parse_path(path)
        resolved = self._inspect(root, parsed)
        if resolved is None:
            raise InvalidPropertyError(str(parsed), root, "no such property")
        owner, slot = resolved
        return PropertyDescriptor(
            path=str(parsed),
            name=slot.name,
            owner=owner if isinstance(owner, type) else type(owner),
            property_type=slot.value_type,
            readable=slot.readable,
            writable=slot.writable,
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_value(self, root: Any, path: PathLike) -> Any:
        """
        Read the value at ``path``; containers are unwrapped transparently.

        Raises:
            MalformedPathError: If the path does not parse
            NotReadablePropertyError: If a segment cannot be read
            NullValueInNestedPathError: If an intermediate value is absent
            PropertyInvocationError: If a getter raised
        """
        parsed = parse_path(path)
        current = root
        declared = None

        for i, segment in enumerate(parsed):
            name = parsed.prefix(i + 1)
            if current is None:
                raise NullValueInNestedPathError(parsed.prefix(i), root)

            slot = self._resolve(current, segment, declared, self.options, name)
            if slot is None or not slot.readable:
                raise NotReadablePropertyError(name, current)

            current, _ = self.containers.unwrap(self._read(slot, name))
            declared = self._bare_type(slot.read_type) or self._bare_type(slot.write_type)

        return current

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def set_value(
        self,
        root: Any,
        path: PathLike,
        value: Any,
        options: Optional[AccessOptions] = None,
    ) -> PropertyChange:
        """
        Convert ``value`` to the declared type of ``path`` and write it.

        Args:
            root: Object the path starts from
            path: Property path
            value: Raw value; converted before the write
            options: Overrides the accessor's default AccessOptions

        Returns:
            PropertyChange describing the write

        Raises:
            NotWritablePropertyError: Unknown or read-only final segment, or
                a path that does not parse (without suggestions)
            NotReadablePropertyError: An intermediate segment cannot be read
            AutoGrowFailedError: An intermediate value is absent and cannot
                be created
            TypeMismatchError: The value cannot be converted
            PropertyInvocationError: A getter or setter raised
        """
        opts = options or self.options
        try:
            parsed = parse_path(path)
        except MalformedPathError as e:
            raise NotWritablePropertyError(
                str(path), root, e.reason, possible_matches=None
            ) from e

        owner, declared = self._navigate_for_write(root, parsed, opts)
        full_name = str(parsed)
        slot = self._resolve(owner, parsed.last, declared, opts, full_name)
        if slot is None or not slot.writable:
            raise self._not_writable(owner, parsed.last, full_name, slot)

        old_value = None
        if opts.extract_old_value and slot.readable:
            old_value = self._extract_old_value(slot, full_name)

        converted = self._convert_for_write(slot, value, full_name)
        self._write(slot, converted, full_name)
        return PropertyChange(path=full_name, old_value=old_value, new_value=converted)

    def try_set_value(
        self,
        root: Any,
        path: PathLike,
        value: Any,
        options: Optional[AccessOptions] = None,
    ) -> PropertyResult:
        """Like ``set_value`` but returns failures as a PropertyResult."""
        try:
            change = self.set_value(root, path, value, options)
        except PropertyAccessError as e:
            return PropertyResult(path=_path_text(path), value=value, error=e)
        return PropertyResult(path=_path_text(path), value=value, change=change)

    def _navigate_for_write(
        self,
        root: Any,
        parsed: PropertyPath,
        opts: AccessOptions,
    ) -> Tuple[Any, Any]:
        """Walk every segment but the last; return (owner, declared type)."""
        current = root
        declared = None

        for i, segment in enumerate(parsed.segments[:-1]):
            name = parsed.prefix(i + 1)
            slot = self._resolve(current, segment, declared, opts, name)
            if slot is None or not slot.readable:
                raise NotReadablePropertyError(name, current)

            value, _ = self.containers.unwrap(self._read(slot, name))
            if value is None:
                value = self._grow(current, slot, name, opts)

            current = value
            declared = self._bare_type(slot.read_type) or self._bare_type(slot.write_type)

        return current, declared

    def _grow(self, owner: Any, slot: _Slot, name: str, opts: AccessOptions) -> Any:
        if not opts.auto_grow:
            raise AutoGrowFailedError(name, owner, "auto-grow is disabled")
        if not slot.writable:
            raise AutoGrowFailedError(name, owner, "property is not writable")

        target_type = self._growth_type(slot)
        if target_type is None or not self.registry.can_construct(target_type):
            label = getattr(target_type, "__name__", None) or "declared type"
            raise AutoGrowFailedError(
                name, owner, f"{label} has no zero-argument constructor"
            )

        try:
            instance = self.registry.construct(target_type)
        except ConstructionError as e:
            raise AutoGrowFailedError(name, owner, str(e.cause or e)) from e

        self._write(slot, self._wrap_if_needed(slot, instance), name)
        logger.debug("Auto-grew %s with new %s", name, type(instance).__name__)
        return instance

    def _growth_type(self, slot: _Slot) -> Any:
        target = self._bare_type(slot.write_type) or self._bare_type(slot.read_type)
        origin = typing.get_origin(target)
        if isinstance(origin, type):
            return origin
        return target

    def _extract_old_value(self, slot: _Slot, name: str) -> Any:
        try:
            value, _ = self.containers.unwrap(self._read(slot, name))
            return value
        except PropertyAccessError as e:
            logger.debug("Could not extract old value of %s: %s", name, e)
            return None

    def _convert_for_write(self, slot: _Slot, value: Any, name: str) -> Any:
        target = unwrap_optional(slot.value_type)
        adapter = self.containers.adapter_for(target) if target is not None else None

        if adapter is not None:
            if self.containers.is_container(value):
                return value
            contained = self.containers.contained_type(target)
            converted = self.converter.convert(value, contained).unwrap(name)
            return adapter.wrap(converted) if adapter.wrap is not None else converted

        if not is_unknown_type(target):
            value, _ = self.containers.unwrap(value)
        return self.converter.convert(value, target).unwrap(name)

    def _wrap_if_needed(self, slot: _Slot, value: Any) -> Any:
        adapter = self.containers.adapter_for(unwrap_optional(slot.value_type)) \
            if slot.value_type is not None else None
        if adapter is not None and adapter.wrap is not None:
            return adapter.wrap(value)
        return value

    def _not_writable(
        self,
        owner: Any,
        segment: Segment,
        name: str,
        slot: Optional[_Slot],
    ) -> NotWritablePropertyError:
        if isinstance(segment, KeySegment):
            if (slot is not None and isinstance(owner, MutableSequence)
                    and segment.index is not None and segment.index >= len(owner)):
                message = f"index {segment.index} out of bounds (size {len(owner)})"
            else:
                message = f"no writable element at {segment}"
            return NotWritablePropertyError(name, owner, message, possible_matches=())

        matches = suggest(segment.name, self._candidate_names(owner))
        if slot is None:
            message = "property does not exist or has no setter"
        else:
            message = "property is read-only"
        return NotWritablePropertyError(name, owner, message, possible_matches=matches)

    def _candidate_names(self, owner: Any) -> List[str]:
        if isinstance(owner, type):
            return []
        if isinstance(owner, Mapping):
            return [k for k in owner if isinstance(k, str)]
        return self.registry.member_names(owner, writable=True)

    # -------------------------------------------------------------------------
    # Invocation
    # -------------------------------------------------------------------------

    @staticmethod
    def _read(slot: _Slot, name: str) -> Any:
        try:
            return slot.read()
        except PropertyAccessError:
            raise
        except Exception as e:
            raise PropertyInvocationError(name, None, e) from e

    @staticmethod
    def _write(slot: _Slot, value: Any, name: str) -> None:
        try:
            slot.write(value)
        except PropertyAccessError:
            raise
        except Exception as e:
            raise PropertyInvocationError(name, value, e) from e

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _bare_type(self, declared: Any) -> Any:
        """Strip Optional and container wrappers from a declared type."""
        if declared is None:
            return None
        return unwrap_optional(self.containers.contained_type(unwrap_optional(declared)))

    def _resolve(
        self,
        owner: Any,
        segment: Segment,
        declared: Any,
        opts: AccessOptions,
        display: str,
    ) -> Optional[_Slot]:
        if isinstance(segment, KeySegment):
            return self._resolve_key(owner, segment, declared, opts, display)

        name = segment.name
        if isinstance(owner, Mapping) and name in owner:
            return self._mapping_slot(owner, name, declared)

        meta = self.meta_policy.resolve(owner, name)
        if meta is not None:
            return _Slot(name, True, False, read_type=meta.value_type,
                         read=lambda: meta.read(owner))
        if self.meta_policy.governs(owner):
            return None

        if isinstance(owner, Mapping):
            return self._mapping_slot(owner, name, declared)

        descriptor = self.registry.describe_member(owner, name)
        if descriptor is None:
            return None
        return _Slot(
            name=descriptor.name,
            readable=descriptor.readable,
            writable=descriptor.writable,
            read_type=descriptor.read_type,
            write_type=descriptor.write_type,
            read=(lambda: descriptor.read(owner)) if descriptor.readable else None,
            write=(lambda v: descriptor.write(owner, v)) if descriptor.writable else None,
        )

    @staticmethod
    def _mapping_slot(owner: Mapping, key: Any, declared: Any) -> _Slot:
        element = _mapping_value_type(declared)
        writable = isinstance(owner, MutableMapping)
        return _Slot(
            name=str(key),
            readable=True,
            writable=writable,
            read_type=element,
            write_type=element,
            read=lambda: owner.get(key),
            write=(lambda v: owner.__setitem__(key, v)) if writable else None,
        )

    def _resolve_key(
        self,
        owner: Any,
        segment: KeySegment,
        declared: Any,
        opts: AccessOptions,
        display: str,
    ) -> Optional[_Slot]:
        if isinstance(owner, Mapping):
            key_type = unwrap_optional(_mapping_key_type(declared))
            if not is_unknown_type(key_type) and key_type is not str:
                outcome = self.converter.convert(segment.key, key_type)
                if not outcome.ok:
                    logger.debug("Key %r of %s is not a %r", segment.key, display, key_type)
                    return None
                return self._mapping_slot(owner, outcome.value, declared)

            key: Any = segment.key
            if key not in owner and segment.index is not None and segment.index in owner:
                key = segment.index
            return self._mapping_slot(owner, key, declared)

        if isinstance(owner, Sequence) and not isinstance(owner, (str, bytes)):
            index = segment.index
            if index is None or index < 0:
                return None
            element = _sequence_element_type(declared)
            in_bounds = index < len(owner) or (
                opts.auto_grow and index < opts.auto_grow_collection_limit
            )
            writable = isinstance(owner, MutableSequence) and in_bounds

            def write(value: Any) -> None:
                if index >= len(owner):
                    owner.extend([None] * (index + 1 - len(owner)))
                owner[index] = value

            return _Slot(
                name=str(segment),
                readable=True,
                writable=writable,
                read_type=element,
                write_type=element,
                read=lambda: owner[index] if index < len(owner) else None,
                write=write if writable else None,
            )

        return None

    def _resolve_type(self, cls: Any, segment: Segment) -> Optional[_Slot]:
        """Resolve a segment against a declared type when no value exists."""
        if isinstance(segment, KeySegment):
            origin = typing.get_origin(cls) or cls
            if not isinstance(origin, type):
                return None
            if issubclass(origin, Mapping):
                element = _mapping_value_type(cls)
                return _Slot(str(segment), True, issubclass(origin, MutableMapping),
                             element, element)
            if issubclass(origin, Sequence) and segment.index is not None:
                element = _sequence_element_type(cls)
                return _Slot(str(segment), True, issubclass(origin, MutableSequence),
                             element, element)
            return None

        if not isinstance(cls, type):
            return None
        if self.meta_policy.class_segment == segment.name:
            return _Slot(segment.name, True, False, read_type=type, read=lambda: cls)
        if issubclass(cls, Mapping):
            return _Slot(segment.name, True, issubclass(cls, MutableMapping))

        descriptor = self.registry.describe(cls, segment.name)
        if descriptor is None:
            return None
        return _Slot(descriptor.name, descriptor.readable, descriptor.writable,
                     descriptor.read_type, descriptor.write_type)

    def _inspect(self, root: Any, path: PathLike) -> Optional[Tuple[Any, _Slot]]:
        """
        Resolve every segment without writing; (owner, final slot) or None.

        Where an intermediate value is absent, resolution continues on the
        declared type of the segment that produced it.
        """
        try:
            parsed = parse_path(path)
        except MalformedPathError:
            return None

        owner: Any = root
        have_value = True
        slot: Optional[_Slot] = None
        declared = None

        for i, segment in enumerate(parsed):
            if slot is not None:
                if not slot.readable:
                    return None
                value = None
                if have_value and slot.read is not None:
                    try:
                        value, _ = self.containers.unwrap(self._read(slot, parsed.prefix(i)))
                    except PropertyAccessError:
                        return None
                declared = self._bare_type(slot.read_type) or self._bare_type(slot.write_type)
                if value is not None:
                    owner, have_value = value, True
                elif declared is not None:
                    owner, have_value = declared, False
                else:
                    return None

            if have_value:
                slot = self._resolve(owner, segment, declared, self.options, parsed.prefix(i + 1))
            else:
                slot = self._resolve_type(owner, segment)
                if slot is not None and slot.read is not None:
                    # "class" on a declared type yields the type itself
                    have_value = True
            if slot is None:
                return None

        return owner, slot
