"""Immutable model types shared by the tests."""
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple, Tuple, overload


# =============================================================================
# Read-only property classes
# =============================================================================

class Employee:
    """Read-only properties backed by private attributes."""

    def __init__(self, id: uuid.UUID, first_name: str, last_name: str):
        self._id = id
        self._first_name = first_name
        self._last_name = last_name

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def first_name(self) -> str:
        return self._first_name

    @property
    def last_name(self) -> str:
        return self._last_name

    def full_name(self) -> str:
        return f"{self._first_name} {self._last_name}"


class Department:
    def __init__(self, title, manager, employees):
        self._title = title
        self._manager = manager
        self._employees = employees

    @property
    def title(self):
        return self._title

    @property
    def manager(self):
        return self._manager

    @property
    def employees(self):
        return self._employees


class Organization:
    def __init__(self, name, dept):
        self._name = name
        self._dept = dept

    @property
    def name(self):
        return self._name

    @property
    def dept(self):
        return self._dept


class EmployeePoco:
    """Mutable plain object with public attributes."""

    def __init__(self):
        self.id = None
        self.first_name = None
        self.last_name = None


# =============================================================================
# Constructor selection
# =============================================================================

class User:
    @overload
    def __init__(self, id: int, first_name: str, last_name: str): ...

    @overload
    def __init__(self, first_name_not_matching_property_name: str, last_name: str): ...

    def __init__(self, *args):
        if len(args) == 3:
            self._id, self._first_name, self._last_name = args
        else:
            self._id = 0
            self._first_name, self._last_name = args

    @classmethod
    def from_login(cls, login: str) -> 'User':
        first_name, _, last_name = login.partition('.')
        return cls(0, first_name, last_name)

    @property
    def id(self):
        return self._id

    @property
    def first_name(self):
        return self._first_name

    @property
    def last_name(self):
        return self._last_name


class InvalidMultipleConstructor:
    @overload
    def __init__(self): ...

    @overload
    def __init__(self, property1: str): ...

    def __init__(self, property1: str = None):
        self._property1 = property1

    @property
    def property1(self):
        return self._property1


class InvalidProperty:
    """Constructor parameter does not match the property name."""
    field1 = 'field'

    def __init__(self, property: str):
        self._property1 = property

    @property
    def property1(self):
        return self._property1


class PropertyMismatch:
    def __init__(self, user_name: str):
        self._user_name = user_name

    @property
    def user_name(self):
        return self._user_name

    @property
    def nick_name(self):
        return f"~{self._user_name}~"


class PropertyMismatchContainer:
    def __init__(self, property_mismatch: PropertyMismatch):
        self._property_mismatch = property_mismatch

    @property
    def property_mismatch(self):
        return self._property_mismatch


class StaticFieldInit:
    def __init__(self, property1: str):
        self._property1 = property1

    @property
    def property1(self):
        return self._property1


StaticFieldInit.DEFAULT = StaticFieldInit('Default')


class Shape(ABC):
    @abstractmethod
    def area(self) -> float: ...


class Tagged:
    """Keyword-only and variadic parameters."""

    def __init__(self, name, *args, tag, **kwargs):
        self._name = name
        self._tag = tag

    @property
    def name(self):
        return self._name

    @property
    def tag(self):
        return self._tag


class Temperature:
    """Parameter and property names differ only by case."""

    def __init__(self, celsius):
        self._celsius = celsius

    @property
    def Celsius(self):
        return self._celsius


# =============================================================================
# Inheritance
# =============================================================================

class InheritedType1(ABC):
    def __init__(self, prop1):
        self._prop1 = prop1

    @property
    def prop1(self):
        return self._prop1


class InheritedType2(InheritedType1):
    def __init__(self, prop1, prop2):
        super().__init__(prop1)
        self._prop2 = prop2

    @property
    def prop2(self):
        return self._prop2


class InheritedType3(InheritedType2):
    def __init__(self, prop1, prop2, prop3):
        super().__init__(prop1, prop2)
        self._prop3 = prop3

    @property
    def prop3(self):
        return self._prop3


class InheritedType4(InheritedType3):
    def __init__(self, prop1, prop2, prop3, prop4):
        super().__init__(prop1, prop2, prop3)
        self._prop4 = prop4

    @property
    def prop4(self):
        return self._prop4


# =============================================================================
# Value types and records
# =============================================================================

class StructA(NamedTuple):
    value: bool = False


class StructB(NamedTuple):
    id: str
    struct_a: StructA


@dataclass(frozen=True)
class Record1:
    id: uuid.UUID
    title: str


@dataclass(frozen=True)
class Record2:
    record1: Record1
    enabled: bool


@dataclass(frozen=True)
class AuditedRecord(Record1):
    author: str


class Point:
    __slots__ = ('x', 'y')

    def __init__(self, x, y):
        self.x = x
        self.y = y


@dataclass(frozen=True)
class Board:
    cells: Tuple[Tuple[str, ...], ...]


@dataclass(frozen=True)
class Ledger:
    """Rejects negative entries on construction."""
    entries: list

    def __post_init__(self):
        if any(entry < 0 for entry in self.entries):
            raise ValueError("Ledger entries must not be negative")


# =============================================================================
# Collections
# =============================================================================

class Level3:
    def __init__(self, employees):
        self._employees = employees

    @property
    def employees(self):
        return self._employees


class Level2:
    def __init__(self, level3):
        self._level3 = level3

    @property
    def level3(self):
        return self._level3


class Level1:
    def __init__(self, level2):
        self._level2 = level2

    @property
    def level2(self):
        return self._level2


class Level4:
    def __init__(self, level3s):
        self._level3s = level3s

    @property
    def level3s(self):
        return self._level3s


def make_employee(first_name='Joe', last_name='Doe'):
    return Employee(uuid.uuid4(), first_name, last_name)
