"""
Per-type reconstruction overrides.

By default a type is rebuilt through its single constructor, binding each
parameter to the property with the same (case-insensitive) name. An
ActivationConfiguration registers, per type, a preferred constructor and
optionally an explicit parameter -> property map instead:

    config = (
        ActivationConfiguration()
        .configure(User, find_constructor(User, 'id', 'first_name', 'last_name'))
        .configure(Account, Account.from_login, {'login': 'user_name'})
        .configure_expression(Person, lambda p: (Person.named, p.first, p.last))
    )

Overrides are validated when they are registered.
"""

import inspect
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Set, Type, Union

from remute.descriptors import Constructor, describe
from remute.errors import ConstructorAmbiguityError, InvalidOverrideError
from remute.steps import MemberStep, record_path, recorded_steps, recorder_for

logger = logging.getLogger(__name__)

PropertySelector = Union[str, Callable[[Any], Any]]
_MISSING = object()


@dataclass(frozen=True)
class StrategyOverride:
    """Registered constructor (and optional parameter map) for one type."""
    target_type: type
    constructor: Constructor
    parameters: Mapping[str, str]  # parameter name -> property name


def _is_member_of(target_type: type, property_name: str) -> bool:
    """Whether ``property_name`` can be a readable property of ``target_type`` instances."""
    descriptor = describe(target_type)
    if descriptor.readable_property(property_name) is not None:
        return True
    if descriptor.has_declared_shape or property_name.startswith('_'):
        return False
    # Plain instance attributes are only known per instance; accept names not
    # claimed by something on the class (methods, class attributes)
    return inspect.getattr_static(target_type, property_name, _MISSING) is _MISSING


class ActivationConfiguration:
    """Fluent registry of StrategyOverrides keyed by target type."""

    def __init__(self):
        self._settings: Dict[type, StrategyOverride] = {}
        # Types an engine has resolved a strategy for; their overrides are final
        self._in_use: Set[type] = set()

    def configure(
        self,
        target_type: Type,
        constructor: Union[Constructor, Callable[..., Any], None] = None,
        parameters: Optional[Mapping[str, PropertySelector]] = None,
    ) -> 'ActivationConfiguration':
        """
        Register the constructor (and parameter bindings) used to rebuild ``target_type``.

        Args:
            target_type: Type the override applies to
            constructor: A Constructor (see ``find_constructor``), the type itself
                (the default), or any callable returning an instance of the type
            parameters: Optional map of constructor parameter name to property
                name, or to a one-member lambda such as ``lambda u: u.first_name``.
                Parameters left out still bind by name.

        Returns:
            self, for chaining

        Raises:
            InvalidOverrideError: a parameter does not belong to the constructor,
                a property does not belong to the type, or a strategy for the
                type was already resolved
        """
        if target_type in self._in_use:
            raise InvalidOverrideError.already_resolved(describe(target_type).name)

        resolved_constructor = self._resolve_constructor(target_type, constructor)
        type_name = describe(target_type).name

        bindings: Dict[str, str] = {}
        for parameter_name, selector in (parameters or {}).items():
            if parameter_name not in resolved_constructor.parameter_names:
                raise InvalidOverrideError.invalid_parameter(parameter_name, type_name)
            property_name = self._property_name(selector, type_name)
            if not _is_member_of(target_type, property_name):
                raise InvalidOverrideError.invalid_property(property_name, type_name)
            bindings[parameter_name] = property_name

        self._settings[target_type] = StrategyOverride(
            target_type=target_type,
            constructor=resolved_constructor,
            parameters=MappingProxyType(bindings),
        )
        logger.debug(f"Registered override for {type_name}: {resolved_constructor!r} {bindings}")
        return self

    def configure_expression(self, target_type: Type, expression: Callable[[Any], Any]) -> 'ActivationConfiguration':
        """
        Register an override from an expression naming a constructor and its arguments.

        The expression receives the instance being rebuilt and returns a tuple of
        ``(constructor, x.property_1, x.property_2, ...)``; each argument binds
        positionally to the constructor's parameters.

        Example:
            config.configure_expression(User, lambda u: (User.from_names, u.first_name, u.last_name))
        """
        type_name = describe(target_type).name
        result = expression(recorder_for(expression))

        if not isinstance(result, tuple) or not result or recorded_steps(result[0]) is not None or not callable(result[0]):
            raise InvalidOverrideError.invalid_expression(type_name)

        arguments = result[1:]
        if result[0] is target_type:
            # Overloads are told apart by arity, the way a call expression picks one
            candidates = [c for c in describe(target_type).constructors() if len(c.parameters) == len(arguments)]
            if len(candidates) != 1:
                raise ConstructorAmbiguityError(type_name)
            constructor = candidates[0]
        else:
            constructor = self._resolve_constructor(target_type, result[0])
        if len(arguments) != len(constructor.parameter_names):
            raise InvalidOverrideError.invalid_expression(type_name)

        parameters = {}
        for parameter_name, argument in zip(constructor.parameter_names, arguments):
            steps = recorded_steps(argument)
            if steps is None or len(steps) != 1 or not isinstance(steps[0], MemberStep):
                raise InvalidOverrideError.invalid_expression_argument(repr(argument), type_name)
            parameters[parameter_name] = steps[0].name

        return self.configure(target_type, constructor, parameters)

    def get(self, target_type: type) -> Optional[StrategyOverride]:
        return self._settings.get(target_type)

    def mark_in_use(self, target_type: type) -> None:
        """Freeze the override for ``target_type`` once a strategy depends on it."""
        self._in_use.add(target_type)

    def __contains__(self, target_type: type) -> bool:
        return target_type in self._settings

    def __len__(self) -> int:
        return len(self._settings)

    @staticmethod
    def _resolve_constructor(target_type: type, constructor: Any) -> Constructor:
        if isinstance(constructor, Constructor):
            return constructor
        if constructor is None or constructor is target_type:
            candidates = describe(target_type).constructors()
            if len(candidates) != 1:
                raise ConstructorAmbiguityError(describe(target_type).name)
            return candidates[0]
        if not callable(constructor):
            raise InvalidOverrideError.invalid_expression(describe(target_type).name)
        return Constructor.from_callable(constructor, target_type)

    @staticmethod
    def _property_name(selector: PropertySelector, type_name: str) -> str:
        if isinstance(selector, str):
            return selector
        if callable(selector):
            steps = record_path(selector)
            if len(steps) == 1 and isinstance(steps[0], MemberStep):
                return steps[0].name
        raise InvalidOverrideError.invalid_expression_argument(repr(selector), type_name)
