"""
Reconstruction strategies and their resolver.

A ReconstructionStrategy is the recipe for rebuilding an instance of a target
type from a source shape: which constructor to call, and which source
property supplies each constructor argument. Strategies are resolved lazily
and cached per (source shape, target type) for the lifetime of the resolver.

Resolution rules:
1. A registered StrategyOverride names the constructor. Without one, the
   target type must expose exactly one eligible constructor.
2. Each constructor parameter binds to the property named by the override's
   parameter map, or else to the single readable property of the source whose
   name matches the parameter name case-insensitively.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional, Tuple

from remute.cache import AppendOnlyCache, CacheKey
from remute.configuration import ActivationConfiguration, StrategyOverride
from remute.descriptors import Constructor, PropertyInfo, Shape, describe
from remute.errors import ConstructorAmbiguityError, PropertyBindingError, UnassignablePropertyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParameterBinding:
    """Constructor parameter at ``position`` is supplied by ``property``."""
    position: int
    parameter_name: str
    property: PropertyInfo


@dataclass(frozen=True)
class ReconstructionStrategy:
    """Constructor plus ordered parameter bindings for one target type."""
    target_type: type
    constructor: Constructor
    bindings: Tuple[ParameterBinding, ...]
    bound_properties: FrozenSet[str] = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, 'bound_properties', frozenset(b.property.name for b in self.bindings))

    def binds(self, property_name: str) -> bool:
        return property_name in self.bound_properties

    def ensure_assignable(self, property_name: str, source: Any) -> None:
        """Raise UnassignablePropertyError if no parameter is bound to ``property_name``."""
        if self.binds(property_name):
            return
        info = describe(type(source)).readable_property(property_name, source)
        declaring_type = info.declaring_type if info is not None else self.target_type
        raise UnassignablePropertyError(property_name, describe(declaring_type).name)

    def build(self, source: Any, replaced_property: Optional[str] = None, value: Any = None) -> Any:
        """
        Construct a new target instance from ``source``.

        Args:
            source: Object the bound properties are read from
            replaced_property: Property whose parameter receives ``value``
                instead of the source's current value
            value: Replacement value

        Returns:
            New instance of the target type
        """
        if replaced_property is not None:
            self.ensure_assignable(replaced_property, source)

        arguments = []
        for binding in self.bindings:
            if binding.property.name == replaced_property:
                arguments.append(value)
            else:
                arguments.append(binding.property.read(source))
        return self.constructor.invoke(arguments)


class StrategyResolver:
    """Resolves and caches ReconstructionStrategies."""

    def __init__(self, configuration: ActivationConfiguration):
        self._configuration = configuration
        self._strategies: AppendOnlyCache[ReconstructionStrategy] = AppendOnlyCache('strategy')

    def resolve(self, shape: Shape, target_type: type) -> ReconstructionStrategy:
        """Strategy for rebuilding ``target_type`` from values of ``shape``."""
        key = CacheKey.from_args(shape.key, target_type)
        return self._strategies.get_or_compute(key, lambda: self._build(shape, target_type))

    def is_resolved(self, target_type: type) -> bool:
        """Whether any strategy for ``target_type`` has been cached."""
        return any(key.components[1] is target_type for key in self._strategies.keys())

    def _build(self, shape: Shape, target_type: type) -> ReconstructionStrategy:
        override = self._configuration.get(target_type)
        constructor = self._find_constructor(target_type, override)

        bindings = tuple(
            ParameterBinding(position, parameter.name, self._find_property(shape, parameter.name, override))
            for position, parameter in enumerate(constructor.parameters)
        )
        self._configuration.mark_in_use(target_type)
        logger.debug(
            f"Resolved strategy {shape.source_type.__name__} -> {describe(target_type).name}: "
            f"{[(b.parameter_name, b.property.name) for b in bindings]}"
        )
        return ReconstructionStrategy(target_type=target_type, constructor=constructor, bindings=bindings)

    @staticmethod
    def _find_constructor(target_type: type, override: Optional[StrategyOverride]) -> Constructor:
        if override is not None:
            return override.constructor

        constructors = describe(target_type).constructors()
        if len(constructors) != 1:
            raise ConstructorAmbiguityError(describe(target_type).name)
        return constructors[0]

    @staticmethod
    def _find_property(shape: Shape, parameter_name: str, override: Optional[StrategyOverride]) -> PropertyInfo:
        if override is not None:
            mapped = override.parameters.get(parameter_name)
            # The map names members of the target type; a foreign source shape
            # without that member falls back to matching by name
            if mapped is not None and mapped in shape.properties:
                return shape.properties[mapped]

        wanted = parameter_name.casefold()
        matches = [info for name, info in shape.properties.items() if name.casefold() == wanted]
        if len(matches) != 1:
            raise PropertyBindingError(parameter_name, shape.source_type.__name__)
        return matches[0]
