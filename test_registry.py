"""
test_registry.py

Tests for the introspecting capability registry.

Validates:
- Attributes, properties and accessor methods are discovered
- Declared types are captured for reads and writes
- Aliases resolve to canonical names
- Discovery is cached per registry and can be invalidated
- Zero-argument construction checks
"""

import dataclasses
from typing import ClassVar, List, Optional

import pytest

from propath import CapabilityDescriptor, ConstructionError, IntrospectingRegistry
from sample_beans import (
    Account,
    Address,
    Circle,
    Customer,
    Exploding,
    GetterBean,
    IntelliBean,
    Person,
    Shape,
)


@pytest.fixture
def registry():
    return IntrospectingRegistry()


class Slotted:
    __slots__ = ("label", "_hidden")

    def __init__(self):
        self.label = "x"
        self._hidden = 1


class WithClassVar:
    kind: ClassVar[str] = "static"
    size: int = 0


class PartlyResolvable:
    age: int = 0
    owner: Optional["Unresolved"] = None
    label: "UnknownLabel" = ""


class PartlyResolvableChild(PartlyResolvable):
    spouse: Optional["Person"] = None


class Plain:
    def __init__(self):
        self.color = "red"


class TestDiscovery:
    """What the registry finds on a class."""

    def test_annotated_attribute(self, registry):
        descriptor = registry.describe(Person, "age")
        assert descriptor.readable and descriptor.writable
        assert descriptor.read_type is int
        assert descriptor.value_type is int

    def test_forward_reference_resolves(self, registry):
        assert registry.describe(Person, "spouse").read_type == Optional[Person]

    def test_property_types(self, registry):
        descriptor = registry.describe(Person, "touchy")
        assert descriptor.read_type == Optional[str]
        assert descriptor.write_type is str
        assert descriptor.value_type is str

    def test_read_only_property(self, registry):
        descriptor = registry.describe(Circle, "area")
        assert descriptor.readable
        assert not descriptor.writable

    def test_accessor_methods(self, registry):
        descriptor = registry.describe(GetterBean, "name")
        assert descriptor.readable and descriptor.writable
        assert descriptor.read_type is str
        assert descriptor.write_type is str

    def test_setter_only_methods(self, registry):
        descriptor = registry.describe(IntelliBean, "myString")
        assert descriptor.writable
        assert not descriptor.readable

    def test_dataclass_fields(self, registry):
        assert registry.describe(Customer, "addresses").read_type == List[Address]

    def test_slots(self, registry):
        assert registry.describe(Slotted, "label").writable
        assert registry.describe(Slotted, "_hidden") is None

    def test_class_var_is_not_a_property(self, registry):
        assert registry.describe(WithClassVar, "kind") is None
        assert registry.describe(WithClassVar, "size") is not None

    def test_unresolvable_annotation_keeps_other_types(self, registry):
        assert registry.describe(PartlyResolvable, "age").read_type is int
        assert registry.describe(PartlyResolvable, "label").read_type is None
        assert registry.describe(PartlyResolvable, "owner").writable

    def test_unresolvable_annotation_in_base_class(self, registry):
        assert registry.describe(PartlyResolvableChild, "age").read_type is int
        assert registry.describe(PartlyResolvableChild, "spouse").read_type == Optional[Person]

    def test_methods_are_not_properties(self, registry):
        assert registry.describe(GetterBean, "get_name") is None

    def test_unknown_and_private(self, registry):
        assert registry.describe(Person, "nope") is None
        assert registry.describe(GetterBean, "_name") is None
        assert registry.describe(Person, "") is None


class TestDescriptorAccess:
    """Reading and writing through descriptors."""

    def test_read_and_write(self, registry):
        person = Person("tony")
        descriptor = registry.describe(Person, "name")
        descriptor.write(person, "kerry")
        assert descriptor.read(person) == "kerry"

    def test_descriptors_are_immutable(self, registry):
        descriptor = registry.describe(Person, "name")
        with pytest.raises(dataclasses.FrozenInstanceError):
            descriptor.name = "other"
        assert isinstance(descriptor, CapabilityDescriptor)


class TestInstanceMembers:
    """Attributes that only exist on instances."""

    def test_instance_attribute(self, registry):
        assert registry.describe(Circle, "radius") is None
        descriptor = registry.describe_member(Circle(), "radius")
        assert descriptor.readable and descriptor.writable

    def test_private_instance_attribute(self, registry):
        assert registry.describe_member(GetterBean(), "_name") is None

    def test_member_names_include_instance_attributes(self, registry):
        plain = Plain()
        plain.extra = 1
        assert registry.member_names(plain, writable=True) == ["color", "extra"]


class TestNames:
    """Name listings."""

    def test_writable_names(self, registry):
        names = registry.names(Person, writable=True)
        assert names == ["age", "name", "nicknames", "scores", "spouse", "touchy"]

    def test_read_only_names(self, registry):
        assert registry.names(Circle, writable=False) == ["area", "center"]

    def test_aliases_are_listed(self, registry):
        assert registry.names(GetterBean) == ["aliased_name", "name"]


class TestAliases:
    """Alias resolution."""

    def test_class_declared_alias(self, registry):
        assert registry.describe(GetterBean, "aliased_name").name == "name"
        assert registry.resolve_alias(GetterBean, "aliased_name") == "name"

    def test_registered_alias(self, registry):
        registry.register_alias(Person, "years", "age")
        assert registry.describe(Person, "years").name == "age"

    def test_alias_cycle_terminates(self, registry):
        registry.register_alias(Person, "a", "b")
        registry.register_alias(Person, "b", "a")
        assert registry.describe(Person, "a") is None

    def test_aliases_are_per_registry(self, registry):
        registry.register_alias(Person, "years", "age")
        assert IntrospectingRegistry().describe(Person, "years") is None


class TestCache:
    """Per-registry discovery cache."""

    def test_descriptor_is_reused(self, registry):
        assert registry.describe(Person, "age") is registry.describe(Person, "age")

    def test_invalidate_type(self, registry):
        first = registry.describe(Person, "age")
        registry.invalidate(Person)
        second = registry.describe(Person, "age")
        assert first is not second
        assert first == second

    def test_invalidate_all(self, registry):
        first = registry.describe(Circle, "area")
        registry.invalidate()
        assert registry.describe(Circle, "area") is not first


class TestConstruction:
    """Zero-argument construction."""

    @pytest.mark.parametrize("cls", [Person, Customer, Plain, list])
    def test_constructible(self, registry, cls):
        assert registry.can_construct(cls)

    @pytest.mark.parametrize("cls", [Account, Shape, Optional[int], "Person"])
    def test_not_constructible(self, registry, cls):
        assert not registry.can_construct(cls)

    def test_construct(self, registry):
        assert isinstance(registry.construct(Customer), Customer)

    def test_construct_without_default_constructor(self, registry):
        with pytest.raises(ConstructionError) as exc_info:
            registry.construct(Account)
        assert exc_info.value.target_type is Account
        assert exc_info.value.cause is None

    def test_constructor_failure_keeps_cause(self, registry):
        with pytest.raises(ConstructionError) as exc_info:
            registry.construct(Exploding)
        assert isinstance(exc_info.value.cause, RuntimeError)
