"""
Access steps and the step extractor.

A path designates one leaf value reachable from a root object. It is written
either as a dotted string or as a one-argument lambda:

    "dept.manager.first_name"
    "level3s[0].employees[1].last_name"
    lambda o: o.dept.manager.first_name
    lambda o: o.employees[i]            # i is evaluated right away

Both forms decompose into the same tuple of AccessSteps, ordered from the
root to the leaf. Paths are validated against the object graph the first time
a (root type, path text) pair is seen; later calls reuse the cached result.
"""

import logging
import operator
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union

from remute.cache import AppendOnlyCache, CacheKey
from remute.descriptors import describe
from remute.errors import NullArgumentError, UnsupportedPathError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberStep:
    """Read a named property."""
    name: str

    def read(self, instance: Any) -> Any:
        return getattr(instance, self.name)

    def render(self, prefix: str) -> str:
        return f"{prefix}.{self.name}" if prefix else self.name


@dataclass(frozen=True)
class IndexStep:
    """Read one element of an ordered collection."""
    index: int

    def read(self, instance: Any) -> Any:
        return instance[self.index]

    def render(self, prefix: str) -> str:
        return f"{prefix}[{self.index}]"


AccessStep = Union[MemberStep, IndexStep]
PathExpression = Union[str, Callable[[Any], Any]]


def format_path(steps: Tuple[AccessStep, ...]) -> str:
    """Normalized text of a step sequence, e.g. ``a.b[1].c``."""
    text = ''
    for step in steps:
        text = step.render(text)
    return text


@dataclass(frozen=True)
class ParsedPath:
    """Validated step sequence for one path shape."""
    steps: Tuple[AccessStep, ...]
    text: str

    def __len__(self) -> int:
        return len(self.steps)


# =============================================================================
# STRING PATHS
# =============================================================================

_TOKEN = re.compile(r'\s*(?:(?P<dot>\.)|(?P<name>[^\W\d]\w*)|\[\s*(?P<index>[+-]?\d+)\s*\])')


def parse_path(text: str) -> Tuple[AccessStep, ...]:
    """Parse ``a.b[1].c`` into access steps."""
    source = text.strip()
    steps = []
    after_dot = False
    position = 0

    while position < len(source):
        match = _TOKEN.match(source, position)
        if match is None or match.end() == position:
            raise UnsupportedPathError.unprocessable(text)

        if match.group('dot'):
            if after_dot or not steps:
                raise UnsupportedPathError.unprocessable(text)
            after_dot = True
        elif match.group('name'):
            # Members after the first one need a separating dot
            if steps and not after_dot:
                raise UnsupportedPathError.unprocessable(text)
            steps.append(MemberStep(match.group('name')))
            after_dot = False
        else:
            if after_dot:
                raise UnsupportedPathError.unprocessable(text)
            steps.append(IndexStep(int(match.group('index'))))

        position = match.end()

    if after_dot:
        raise UnsupportedPathError.unprocessable(text)
    return tuple(steps)


# =============================================================================
# LAMBDA PATHS
# =============================================================================

class PathRecorder:
    """Stand-in for the root parameter of a path lambda.

    Attribute reads and integer subscripts are recorded; every other use of
    the recorder is rejected.
    """

    def __init__(self, parameter_name: str, steps: Tuple[AccessStep, ...] = (), origin: object = None):
        object.__setattr__(self, '_parameter_name', parameter_name)
        object.__setattr__(self, '_steps', steps)
        object.__setattr__(self, '_origin', origin if origin is not None else object())

    def _text(self) -> str:
        path = format_path(self._steps)
        if not path:
            return self._parameter_name
        return f"{self._parameter_name}{path}" if path.startswith('[') else f"{self._parameter_name}.{path}"

    def _extend(self, step: AccessStep) -> 'PathRecorder':
        return PathRecorder(self._parameter_name, self._steps + (step,), self._origin)

    def __getattr__(self, name: str) -> 'PathRecorder':
        if name.startswith('__') and name.endswith('__'):
            raise AttributeError(name)
        return self._extend(MemberStep(name))

    def __getitem__(self, key: Any) -> 'PathRecorder':
        try:
            index = operator.index(key)
        except TypeError:
            raise UnsupportedPathError.unprocessable(f"{self._text()}[{key!r}]") from None
        return self._extend(IndexStep(index))

    def __call__(self, *args, **kwargs):
        raise UnsupportedPathError.unprocessable(f"{self._text()}(...)")

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("PathRecorder is read-only.")

    def __repr__(self) -> str:
        return self._text()


def recorded_steps(value: Any) -> Optional[Tuple[AccessStep, ...]]:
    """Steps recorded by ``value`` if it is a PathRecorder, else None."""
    if isinstance(value, PathRecorder):
        return value._steps
    return None


def recorder_for(fn: Callable[[Any], Any]) -> PathRecorder:
    """Root recorder for the single parameter of ``fn``."""
    return PathRecorder(_parameter_name(fn))


def _parameter_name(fn: Callable) -> str:
    code = getattr(fn, '__code__', None)
    if code is None or code.co_argcount != 1:
        raise UnsupportedPathError.unprocessable(repr(fn))
    return code.co_varnames[0]


def record_path(fn: Callable[[Any], Any]) -> Tuple[AccessStep, ...]:
    """Run a one-argument lambda against a recorder and return its steps."""
    parameter_name = _parameter_name(fn)
    root = PathRecorder(parameter_name)
    try:
        result = fn(root)
    except (TypeError, AttributeError) as e:
        # Arithmetic, iteration, dunder access or assignment on the recorder
        raise UnsupportedPathError.unprocessable(f"{parameter_name} => <{e}>") from e

    if not isinstance(result, PathRecorder) or result._origin is not root._origin:
        raise UnsupportedPathError.unprocessable(f"{parameter_name} => {result!r}")
    return result._steps


# =============================================================================
# EXTRACTOR
# =============================================================================

def is_indexable(value: Any) -> bool:
    if isinstance(value, (str, bytes, Mapping)):
        return False
    return hasattr(value, '__getitem__') and hasattr(value, '__len__')


class StepExtractor:
    """Decompose path expressions into validated, cached step sequences."""

    def __init__(self):
        self._paths: AppendOnlyCache[ParsedPath] = AppendOnlyCache('path')

    def extract(self, root: Any, path: PathExpression) -> ParsedPath:
        """
        Extract the step sequence for ``path`` written against ``root``.

        Args:
            root: Object the path is rooted at
            path: Dotted string or one-argument lambda

        Returns:
            ParsedPath with steps ordered root to leaf

        Raises:
            NullArgumentError: path is None
            UnsupportedPathError: the path has a node that is not a readable
                property access or an integer index
        """
        if path is None:
            raise NullArgumentError('path')

        if isinstance(path, str):
            key = CacheKey.from_args(type(root), path.strip())
            return self._paths.get_or_compute(key, lambda: self._compile(root, parse_path(path), path))

        if callable(path):
            # Captured indices may differ between calls, so lambdas are always re-recorded
            steps = record_path(path)
            text = format_path(steps)
            key = CacheKey.from_args(type(root), text)
            return self._paths.get_or_compute(key, lambda: self._compile(root, steps, text))

        raise UnsupportedPathError.unprocessable(repr(path))

    def _compile(self, root: Any, steps: Tuple[AccessStep, ...], display_text: str) -> ParsedPath:
        self._validate(root, steps, display_text)
        parsed = ParsedPath(steps=steps, text=format_path(steps))
        logger.debug(f"Compiled path '{parsed.text}' for {type(root).__name__}: {len(steps)} steps")
        return parsed

    def _validate(self, root: Any, steps: Tuple[AccessStep, ...], display_text: str) -> None:
        current = root
        for step in steps:
            if current is None:
                # Deeper members cannot be checked without a value; the walk reports them
                return
            if isinstance(step, MemberStep):
                if describe(type(current)).readable_property(step.name, current) is None:
                    raise UnsupportedPathError.not_a_property(step.name, display_text)
            elif not is_indexable(current):
                raise UnsupportedPathError.unprocessable(display_text)
            current = step.read(current)
