"""
Error taxonomy for immutable object reconstruction.

Every error is raised synchronously where it is detected (path extraction,
strategy resolution, or the reconstruction walk) and propagates to the caller
untouched. Each one reflects a static mismatch between a path or a type and
what the engine needs, so nothing here is retried.

Each error also derives from the builtin it specializes, so callers can catch
either ``RemuteError`` or the usual ``TypeError``/``ValueError``.
"""

from typing import Optional

CONFIGURATION_HINT = "ActivationConfiguration"


class RemuteError(Exception):
    """Base class for all reconstruction errors."""


class NullArgumentError(RemuteError, TypeError):
    """A required argument (root, path, source) is None."""

    def __init__(self, argument_name: str):
        self.argument_name = argument_name
        super().__init__(f"Value cannot be None. Parameter name: '{argument_name}'.")


class UnsupportedPathError(RemuteError, ValueError):
    """The path contains a node the step extractor cannot classify."""

    def __init__(self, message: str, path_text: Optional[str] = None):
        self.path_text = path_text
        super().__init__(message)

    @classmethod
    def not_a_property(cls, member_name: str, path_text: Optional[str] = None) -> 'UnsupportedPathError':
        return cls(f"Type member '{member_name}' is expected to be a property.", path_text)

    @classmethod
    def unprocessable(cls, expression_text: str) -> 'UnsupportedPathError':
        return cls(f"Unable to process expression. Expression: '{expression_text}'.", expression_text)


class ConstructorAmbiguityError(RemuteError, TypeError):
    """Zero or several eligible constructors and no override registered."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(
            f"Unable to find appropriate constructor of type '{type_name}'. "
            f"Consider to use {CONFIGURATION_HINT} parameter."
        )


class PropertyBindingError(RemuteError, TypeError):
    """A constructor parameter does not match exactly one readable property."""

    def __init__(self, parameter_name: str, type_name: str):
        self.parameter_name = parameter_name
        self.type_name = type_name
        super().__init__(
            f"Unable to find appropriate property to use as a constructor parameter "
            f"'{parameter_name}'. Type '{type_name}'. Consider to use {CONFIGURATION_HINT} parameter."
        )


class UnassignablePropertyError(RemuteError, AttributeError):
    """The replaced property has no constructor parameter bound to it."""

    def __init__(self, property_name: str, type_name: str):
        self.property_name = property_name
        self.type_name = type_name
        super().__init__(
            f"Unable to construct object of type '{type_name}'. "
            f"There is no constructor parameter matching property '{property_name}'."
        )


class InvalidOverrideError(RemuteError, ValueError):
    """A registered override references a foreign parameter or property."""

    @classmethod
    def invalid_parameter(cls, parameter_name: str, type_name: str) -> 'InvalidOverrideError':
        return cls(f"Invalid parameter '{parameter_name}'. Parameter must be a member of '{type_name}' constructor.")

    @classmethod
    def invalid_property(cls, property_name: str, type_name: str) -> 'InvalidOverrideError':
        return cls(f"Invalid property '{property_name}'. Must be a member of '{type_name}'.")

    @classmethod
    def invalid_expression(cls, type_name: str) -> 'InvalidOverrideError':
        return cls(f"Expression must specify constructor of '{type_name}'.")

    @classmethod
    def invalid_expression_argument(cls, argument_text: str, type_name: str) -> 'InvalidOverrideError':
        return cls(f"Parameter {argument_text} must be a property of '{type_name}'.")

    @classmethod
    def already_resolved(cls, type_name: str) -> 'InvalidOverrideError':
        return cls(f"Type '{type_name}' is already in use. Register overrides before first use.")
