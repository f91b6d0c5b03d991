"""
Type introspection for reconstruction.

A TypeDescriptor answers three questions about a class using pure stdlib
introspection:

- which constructors can build it (``inspect.signature``, ``typing.get_overloads``)
- which readable properties an instance exposes (dataclass fields, namedtuple
  fields, properties, slots and plain instance attributes, walking the MRO)
- how to invoke a constructor from an ordered argument list

Readable properties never include methods or class-level data attributes.
Static state on a class (class attributes, singletons assigned after class
creation) is never touched.
"""

import dataclasses
import functools
import inspect
import logging
import typing
from collections.abc import Mapping
from dataclasses import dataclass, is_dataclass
from enum import Enum
from types import MemberDescriptorType
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple, Type

from remute.errors import ConstructorAmbiguityError

logger = logging.getLogger(__name__)

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class PropertyKind(Enum):
    FIELD = 'field'          # dataclass or namedtuple field
    PROPERTY = 'property'    # property / cached_property
    SLOT = 'slot'            # __slots__ member
    ATTRIBUTE = 'attribute'  # plain instance attribute
    KEY = 'key'              # mapping key (conversion sources only)


@dataclass(frozen=True)
class PropertyInfo:
    """A readable property of a shape."""
    name: str
    kind: PropertyKind
    declaring_type: type

    def read(self, instance: Any) -> Any:
        if self.kind is PropertyKind.KEY:
            return instance[self.name]
        return getattr(instance, self.name)


@dataclass(frozen=True)
class Shape:
    """Runtime set of readable properties of a value.

    ``key`` equals the source type for classes with a declared schema and
    additionally carries the attribute names for dynamic objects
    (SimpleNamespace, plain instance-dict classes, mappings).
    """
    key: Hashable
    source_type: type
    properties: Dict[str, PropertyInfo]


@dataclass(frozen=True)
class Constructor:
    """A callable that builds an instance, with the signature used to bind it."""
    factory: Callable[..., Any]
    signature: inspect.Signature
    declaring_type: type

    @property
    def parameters(self) -> Tuple[inspect.Parameter, ...]:
        """Bindable parameters in declaration order (variadics excluded)."""
        return tuple(p for p in self.signature.parameters.values() if p.kind not in _VARIADIC)

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    def invoke(self, arguments: Sequence[Any]) -> Any:
        """Call the factory with one argument per bindable parameter."""
        args = []
        kwargs = {}
        for parameter, value in zip(self.parameters, arguments):
            if parameter.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return self.factory(*args, **kwargs)

    @classmethod
    def from_callable(cls, factory: Callable[..., Any], declaring_type: type) -> 'Constructor':
        """Wrap an explicit factory (the class itself, a classmethod, a function)."""
        if isinstance(factory, Constructor):
            return factory
        return cls(factory=factory, signature=inspect.signature(factory), declaring_type=declaring_type)

    def __repr__(self) -> str:
        name = getattr(self.factory, '__qualname__', repr(self.factory))
        return f"Constructor({name}{self.signature})"


def _is_public(name: str) -> bool:
    return not name.startswith('_')


def _own_annotations(cls: type) -> Dict[str, Any]:
    try:
        return inspect.get_annotations(cls)
    except (TypeError, NameError):
        return {}


def _drop_first_parameter(signature: inspect.Signature) -> inspect.Signature:
    parameters = list(signature.parameters.values())[1:]
    return signature.replace(parameters=parameters)


class TypeDescriptor:
    """Cached introspection of a single class."""

    def __init__(self, cls: type):
        self.cls = cls
        self.name = getattr(cls, '__name__', repr(cls))
        self._declared = self._collect_declared_properties()
        self._constructors: Optional[List[Constructor]] = None
        # Classes with a fixed schema and no per-instance attribute dict
        self.has_declared_shape = (
            is_dataclass(cls)
            or hasattr(cls, '_fields')
            or '__dict__' not in dir(cls)
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def _declaring_type(self, name: str) -> type:
        for base in self.cls.__mro__:
            if name in base.__dict__ or name in _own_annotations(base):
                return base
        return self.cls

    def _collect_declared_properties(self) -> Dict[str, PropertyInfo]:
        found: Dict[str, PropertyInfo] = {}
        cls = self.cls

        if is_dataclass(cls):
            for f in dataclasses.fields(cls):
                if _is_public(f.name):
                    found[f.name] = PropertyInfo(f.name, PropertyKind.FIELD, self._declaring_type(f.name))

        namedtuple_fields = getattr(cls, '_fields', None)
        if isinstance(namedtuple_fields, tuple) and issubclass(cls, tuple):
            for name in namedtuple_fields:
                if _is_public(name):
                    found[name] = PropertyInfo(name, PropertyKind.FIELD, cls)

        # Walk the MRO so members declared on base classes are included
        for base in cls.__mro__:
            for name, member in base.__dict__.items():
                if not _is_public(name) or name in found:
                    continue
                if isinstance(member, (property, functools.cached_property)):
                    found[name] = PropertyInfo(name, PropertyKind.PROPERTY, base)
                elif isinstance(member, MemberDescriptorType):
                    found[name] = PropertyInfo(name, PropertyKind.SLOT, base)

        return found

    def properties(self, instance: Any = None) -> Dict[str, PropertyInfo]:
        """Readable properties, including instance attributes of ``instance``."""
        if instance is None or self.has_declared_shape:
            return self._declared
        instance_dict = getattr(instance, '__dict__', None)
        if not instance_dict:
            return self._declared
        merged = dict(self._declared)
        for name in instance_dict:
            if _is_public(name) and name not in merged:
                merged[name] = PropertyInfo(name, PropertyKind.ATTRIBUTE, self.cls)
        return merged

    def readable_property(self, name: str, instance: Any = None) -> Optional[PropertyInfo]:
        """Return the property called ``name`` or None for methods, class attributes and unknowns."""
        declared = self._declared.get(name)
        if declared is not None:
            return declared
        if instance is None or not _is_public(name):
            return None
        instance_dict = getattr(instance, '__dict__', None)
        if instance_dict is not None and name in instance_dict:
            return PropertyInfo(name, PropertyKind.ATTRIBUTE, self.cls)
        return None

    def shape_of(self, instance: Any) -> Shape:
        """Shape of an instance of this class."""
        if self.has_declared_shape:
            return Shape(self.cls, self.cls, self._declared)
        props = self.properties(instance)
        return Shape((self.cls, frozenset(props)), self.cls, props)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    def constructors(self) -> List[Constructor]:
        """Eligible public constructors.

        Abstract classes have none. A class with ``typing.overload`` variants of
        ``__init__`` has one candidate per overload.
        """
        if self._constructors is None:
            self._constructors = self._find_constructors()
        return self._constructors

    def _find_constructors(self) -> List[Constructor]:
        cls = self.cls
        if inspect.isabstract(cls):
            return []

        init = cls.__init__
        # Only Python-level __init__ functions can carry typing.overload variants
        if inspect.isfunction(init):
            overloads = typing.get_overloads(init)
            if overloads:
                return [
                    Constructor(cls, _drop_first_parameter(inspect.signature(f)), cls)
                    for f in overloads
                ]

        try:
            signature = inspect.signature(cls)
        except (ValueError, TypeError) as e:
            logger.debug(f"No introspectable constructor for {self.name}: {e}")
            return []
        return [Constructor(cls, signature, cls)]

    def find_constructor(self, *parameter_names: str) -> Constructor:
        """Pick the constructor whose parameters are exactly ``parameter_names``."""
        for constructor in self.constructors():
            if constructor.parameter_names == parameter_names:
                return constructor
        raise ConstructorAmbiguityError(self.name)

    def __repr__(self) -> str:
        return f"TypeDescriptor({self.name})"


# Introspection depends only on the class, so one descriptor per class is shared
_descriptor_cache: Dict[type, TypeDescriptor] = {}


def describe(cls: Type) -> TypeDescriptor:
    """Get (or build) the descriptor for ``cls``."""
    descriptor = _descriptor_cache.get(cls)
    if descriptor is None:
        descriptor = _descriptor_cache.setdefault(cls, TypeDescriptor(cls))
    return descriptor


def shape_of(instance: Any) -> Shape:
    """Shape of any value. Mappings expose their string keys."""
    if isinstance(instance, Mapping):
        cls = type(instance)
        props = {
            name: PropertyInfo(name, PropertyKind.KEY, cls)
            for name in instance
            if isinstance(name, str)
        }
        return Shape((cls, frozenset(props)), cls, props)
    return describe(type(instance)).shape_of(instance)


def find_constructor(cls: Type, *parameter_names: str) -> Constructor:
    """Select one of several constructors of ``cls`` by parameter names."""
    return describe(cls).find_constructor(*parameter_names)
