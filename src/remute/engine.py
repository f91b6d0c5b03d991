"""
Remute: rebuild immutable object graphs along a path.

``apply(root, path, value)`` returns a new root identical to ``root`` except
along the path to the leaf, where every ancestor is reconstructed through its
constructor. Subtrees off the path are shared by reference with the original.

Walk (leaf to root):
    1. Read the current leaf. If it equals ``value`` return ``root`` itself.
    2. Plan: for every step, read its parent and resolve the parent's
       strategy. Members and bindings are checked here, so a failure leaves
       the inputs untouched.
    3. Rebuild: a member step calls the parent's constructor with the pending
       value bound to that member; an index step writes the pending value into
       the parent collection's slot. The result becomes the pending value.
       If a constructor raises, in-place collection writes made so far are
       undone before the error propagates.
    4. Notify change handlers with the affected properties, root to leaf.

Index writes mutate mutable collections in place unless
``EngineSettings.copy_on_index_write`` is set; tuples are always rebuilt.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

from remute.configuration import ActivationConfiguration, PropertySelector
from remute.descriptors import describe, shape_of
from remute.errors import NullArgumentError, UnsupportedPathError
from remute.evaluator import InstanceEvaluator
from remute.notifications import ChangeHandler, ChangeNotifier
from remute.steps import AccessStep, IndexStep, ParsedPath, PathExpression, StepExtractor, is_indexable
from remute.strategy import ReconstructionStrategy, StrategyResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    """Engine behavior switches.

    Attributes:
        copy_on_index_write: Copy mutable collections before writing an
            element instead of writing into the existing collection.
    """
    copy_on_index_write: bool = False


@dataclass(frozen=True)
class _Frame:
    step: AccessStep
    parent: Any
    strategy: Optional[ReconstructionStrategy] = None


@dataclass
class PathWalkState:
    """Scratch state of a single apply() call. Never shared or retained."""
    root: Any
    pending: Any
    remaining: List[_Frame]  # root-most first; the walk pops from the end
    affected: List[str] = field(default_factory=list)  # leaf to root
    label_suffix: str = ''
    written: List[Tuple[Any, int, Any]] = field(default_factory=list)  # (collection, index, old value)


def _values_equal(current: Any, value: Any) -> bool:
    if current is value:
        return True
    try:
        return bool(current == value)
    except (TypeError, ValueError):
        # Elementwise comparisons (arrays) have no single truth value
        return False


def _is_writable(collection: Any) -> bool:
    return is_indexable(collection) and (isinstance(collection, tuple) or hasattr(collection, '__setitem__'))


def _restore(state: PathWalkState) -> None:
    for collection, index, old in reversed(state.written):
        collection[index] = old
    state.written.clear()


class Remute:
    """
    Reconstruction engine holding its own strategy and path caches.

    Example:
        engine = Remute()
        updated = engine.apply(organization, 'dept.manager.first_name', 'Foo')
        updated = engine.apply(organization, lambda o: o.dept.manager.first_name, 'Foo')
        employee = engine.convert(payload, Employee)
    """

    def __init__(
        self,
        configuration: Optional[ActivationConfiguration] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.configuration = configuration if configuration is not None else ActivationConfiguration()
        self.settings = settings if settings is not None else EngineSettings()
        self._extractor = StepExtractor()
        self._evaluator = InstanceEvaluator()
        self._resolver = StrategyResolver(self.configuration)
        self._notifier = ChangeNotifier()

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    def apply(self, root: Any, path: PathExpression, value: Any) -> Any:
        """
        Return a copy of ``root`` with the value at ``path`` replaced.

        Args:
            root: Original object (left unchanged, except for in-place
                collection element writes)
            path: Dotted string or one-argument lambda naming the leaf
            value: New leaf value

        Returns:
            New root, or ``root`` itself when ``value`` equals the current value

        Raises:
            NullArgumentError: root or path is None
            UnsupportedPathError: path is not a chain of property/index accesses
            ConstructorAmbiguityError: an ancestor type has no single constructor
            PropertyBindingError: a constructor parameter matches no single property
            UnassignablePropertyError: a replaced property has no constructor parameter
        """
        if root is None:
            raise NullArgumentError('root')

        parsed = self._extractor.extract(root, path)
        current = self._evaluator.evaluate(root, parsed.steps)
        if _values_equal(current, value):
            return root

        state = PathWalkState(root=root, pending=value, remaining=self._plan(root, parsed))
        try:
            while state.remaining:
                self._process_step(state)
        except BaseException:
            _restore(state)
            raise
        if state.label_suffix:
            # The root itself is the indexed collection
            state.affected.append(state.label_suffix)

        new_root = state.pending
        affected = tuple(reversed(state.affected))
        logger.debug(f"Rebuilt {type(root).__name__} along '{parsed.text}': {affected}")

        self._notifier.emit(root, new_root, value, affected)
        return new_root

    def with_(self, root: Any, path: PathExpression, value: Any) -> Any:
        """Alias of :meth:`apply`."""
        return self.apply(root, path, value)

    def convert(self, source: Any, target_type: type) -> Any:
        """
        Build a ``target_type`` instance from any object's readable properties.

        Works as a clone when ``target_type`` is the source's own type, and as a
        conversion from plain objects, SimpleNamespaces and mappings otherwise.
        """
        if source is None:
            raise NullArgumentError('source')
        if target_type is None:
            raise NullArgumentError('target_type')

        strategy = self._resolver.resolve(shape_of(source), target_type)
        target = strategy.build(source)

        self._notifier.emit(source, target, None, ())
        return target

    def register_strategy(
        self,
        target_type: type,
        constructor: Any = None,
        parameters: Optional[Mapping[str, PropertySelector]] = None,
    ) -> 'Remute':
        """
        Register a constructor override for ``target_type`` on this engine.

        Same as ``self.configuration.configure(...)``. Overrides are final once
        a strategy for ``target_type`` has been resolved, whichever way they
        are registered.

        Raises:
            InvalidOverrideError: the override is invalid, or a strategy for
                ``target_type`` was already resolved
        """
        self.configuration.configure(target_type, constructor, parameters)
        return self

    def on_change(self, handler: ChangeHandler) -> None:
        """Subscribe ``handler(source, target, value, affected_properties)``."""
        self._notifier.subscribe(handler)

    def off_change(self, handler: ChangeHandler) -> None:
        """Unsubscribe a change handler."""
        self._notifier.unsubscribe(handler)

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------

    def _plan(self, root: Any, parsed: ParsedPath) -> List[_Frame]:
        frames = []
        for position, step in enumerate(parsed.steps):
            parent = self._evaluator.evaluate(root, parsed.steps[:position])
            if isinstance(step, IndexStep):
                if not _is_writable(parent):
                    raise UnsupportedPathError.unprocessable(parsed.text)
                frames.append(_Frame(step, parent))
                continue

            if describe(type(parent)).readable_property(step.name, parent) is None:
                raise UnsupportedPathError.not_a_property(step.name, parsed.text)
            strategy = self._resolver.resolve(shape_of(parent), type(parent))
            strategy.ensure_assignable(step.name, parent)
            frames.append(_Frame(step, parent, strategy))
        return frames

    def _process_step(self, state: PathWalkState) -> None:
        frame = state.remaining.pop()
        step = frame.step

        if isinstance(step, IndexStep):
            state.pending = self._write_index(state, frame.parent, step.index)
            state.label_suffix = f"[{step.index}]{state.label_suffix}"
            return

        state.pending = frame.strategy.build(frame.parent, step.name, state.pending)
        state.affected.append(f"{step.name}{state.label_suffix}")
        state.label_suffix = ''

    def _write_index(self, state: PathWalkState, collection: Any, index: int) -> Any:
        value = state.pending
        if isinstance(collection, tuple):
            items = list(collection)
            items[index] = value
            make = getattr(type(collection), '_make', None)
            return make(items) if make is not None else type(collection)(items)

        if self.settings.copy_on_index_write:
            collection = copy.copy(collection)
        else:
            state.written.append((collection, index, collection[index]))
        collection[index] = value
        return collection
