"""
sample_beans.py

Sample object graphs shared by the test modules.
"""

import abc
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Tuple

from propath import Holder


class Person:
    """Plain class with annotated attributes and one guarded property."""

    name: str = ""
    age: int = 0
    spouse: Optional["Person"] = None
    nicknames: List[str]
    scores: Dict[str, int]

    def __init__(self, name: str = "", age: int = 0):
        self.name = name
        self.age = age
        self.spouse = None
        self.nicknames = []
        self.scores = {}
        self._touchy = None

    @property
    def touchy(self) -> Optional[str]:
        return self._touchy

    @touchy.setter
    def touchy(self, value: str):
        if "." in value:
            raise ValueError("Can't contain a .")
        self._touchy = value


class GetterBean:
    """Accessor methods; the getter fails until a name is set."""

    __property_aliases__ = {"aliased_name": "name"}

    def __init__(self):
        self._name = None

    def set_name(self, name: str):
        self._name = name

    def get_name(self) -> str:
        if self._name is None:
            raise RuntimeError("name property must be set")
        return self._name


class IntelliBean:
    """Setter-only properties with deliberately similar names."""

    def set_name(self, name: str):
        pass

    def set_myString(self, string: str):
        pass

    def set_myStrings(self, string: str):
        pass

    def set_myStriNg(self, string: str):
        pass

    def set_myStringss(self, string: str):
        pass


class CloseNamesBean:
    """Like IntelliBean but without ``myStrings``."""

    def set_myString(self, string: str):
        pass

    def set_myStriNg(self, string: str):
        pass

    def set_myStringss(self, string: str):
        pass


class PropertyTypeMismatch:
    """Setter accepts text, getter reports its length."""

    def __init__(self):
        self.value = None

    @property
    def object(self) -> Optional[int]:
        return len(self.value) if self.value is not None else None

    @object.setter
    def object(self, obj: str):
        self.value = obj


class GetterWithHolder:
    """Getter wraps the value in a Holder; setter takes it bare."""

    def __init__(self):
        self.value = None

    @property
    def object(self) -> Holder[Person]:
        return Holder.of(self.value)

    @object.setter
    def object(self, obj: Person):
        self.value = obj


class Parcel:
    box: Optional[Holder[int]] = None


class Circle:
    def __init__(self, radius: float = 1.0):
        self.radius = radius

    @property
    def area(self) -> float:
        return 3.14159 * self.radius ** 2

    @property
    def center(self) -> Optional[Person]:
        return None


@dataclass
class Address:
    city: str = ""
    zip_code: int = 0


@dataclass
class Customer:
    name: str = ""
    address: Optional[Address] = None
    addresses: List[Address] = field(default_factory=list)
    contacts: Dict[str, Address] = field(default_factory=dict)
    settings: Dict[str, str] = field(default_factory=dict)
    coords: Tuple[int, int] = (0, 0)


class Account:
    def __init__(self, number: str):
        self.number = number


class Bank:
    account: Optional[Account] = None


class Exploding:
    def __init__(self):
        raise RuntimeError("boom")


class Shape(abc.ABC):
    @abc.abstractmethod
    def area(self) -> float:
        ...


class Color(Enum):
    RED = "red"
    GREEN = "green"


class Priority(IntEnum):
    LOW = 1
    HIGH = 2


@dataclass(frozen=True)
class Point:
    x: int = 0
    y: int = 0
