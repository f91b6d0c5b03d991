"""
Immutable object graph reconstruction.

Given an immutable root object, a path to a nested value and a new value,
build a new root that differs from the original only along that path. Every
object on the path is rebuilt through its constructor; everything else is
shared by reference.

Key Features:
- Dotted-string and lambda paths, including integer indices
- Constructor and parameter binding by case-insensitive name match
- Per-type constructor overrides with explicit parameter maps
- Conversion between shapes (clone, plain object / mapping -> immutable type)
- Change notifications with the list of affected properties
- Thread-local default engine

Quick Start:
    >>> from remute import Remute, remute
    >>>
    >>> engine = Remute()
    >>> updated = engine.apply(organization, 'dept.manager.first_name', 'Foo')
    >>> updated.dept.manager.first_name
    'Foo'
    >>> updated.dept.employees is organization.dept.employees
    True
    >>>
    >>> # Default engine, lambda path
    >>> updated = remute(organization, lambda o: o.dept.title, 'R&D')

Architecture:
    apply(root, path, value):
        Step Extractor -> AccessStep tuple (cached per root type and path)
        Instance Evaluator -> current leaf and every parent on the path
        Strategy Resolver -> constructor + bindings per parent shape (cached)
        Reconstruction Walker -> rebuild from the leaf up to the root
        Change Notifier -> handlers receive the affected properties

Modules:
    - engine: Remute engine (apply, convert, register_strategy, handlers)
    - configuration: ActivationConfiguration per-type overrides
    - strategy: ReconstructionStrategy and its resolver
    - steps: access steps, string and lambda path extraction
    - evaluator: compiled read paths
    - descriptors: constructor and readable property introspection
    - notifications: change handler registry
    - cache: append-only caches
    - defaults: thread-local default engine, remute()/remute_to() helpers
    - errors: error taxonomy
"""

__version__ = '0.1.0'

# Engine
from remute.engine import Remute, EngineSettings

# Configuration
from remute.configuration import ActivationConfiguration, StrategyOverride

# Introspection
from remute.descriptors import Constructor, TypeDescriptor, describe, find_constructor, shape_of

# Steps
from remute.steps import MemberStep, IndexStep, ParsedPath, parse_path, record_path

# Strategy
from remute.strategy import ReconstructionStrategy, ParameterBinding

# Defaults
from remute.defaults import get_default_engine, set_default_engine, remute, remute_to

# Errors
from remute.errors import (
    RemuteError,
    NullArgumentError,
    UnsupportedPathError,
    ConstructorAmbiguityError,
    PropertyBindingError,
    UnassignablePropertyError,
    InvalidOverrideError,
)

__all__ = [
    # Engine
    'Remute',
    'EngineSettings',
    # Configuration
    'ActivationConfiguration',
    'StrategyOverride',
    # Introspection
    'Constructor',
    'TypeDescriptor',
    'describe',
    'find_constructor',
    'shape_of',
    # Steps
    'MemberStep',
    'IndexStep',
    'ParsedPath',
    'parse_path',
    'record_path',
    # Strategy
    'ReconstructionStrategy',
    'ParameterBinding',
    # Defaults
    'get_default_engine',
    'set_default_engine',
    'remute',
    'remute_to',
    # Errors
    'RemuteError',
    'NullArgumentError',
    'UnsupportedPathError',
    'ConstructorAmbiguityError',
    'PropertyBindingError',
    'UnassignablePropertyError',
    'InvalidOverrideError',
]
