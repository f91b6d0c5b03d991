"""
Compiled read paths.

Reading the value at a path prefix is a pure operation. The first read of a
(root type, path text) pair compiles the step sequence into a chain of
``operator.attrgetter``/``operator.itemgetter`` calls; later reads reuse it.
"""

import logging
import operator
from typing import Any, Callable, List, Tuple

from remute.cache import AppendOnlyCache, CacheKey
from remute.steps import AccessStep, MemberStep, format_path

logger = logging.getLogger(__name__)

Reader = Callable[[Any], Any]


def _identity(instance: Any) -> Any:
    return instance


def compile_reader(steps: Tuple[AccessStep, ...]) -> Reader:
    """Compile steps into a single callable.

    Consecutive member steps collapse into one dotted ``attrgetter``.
    """
    getters: List[Reader] = []
    members: List[str] = []
    for step in steps:
        if isinstance(step, MemberStep):
            members.append(step.name)
            continue
        if members:
            getters.append(operator.attrgetter('.'.join(members)))
            members = []
        getters.append(operator.itemgetter(step.index))
    if members:
        getters.append(operator.attrgetter('.'.join(members)))

    if not getters:
        return _identity
    if len(getters) == 1:
        return getters[0]

    def read(instance: Any) -> Any:
        for getter in getters:
            instance = getter(instance)
        return instance

    return read


class InstanceEvaluator:
    """Evaluates path prefixes against a root object."""

    def __init__(self):
        self._readers: AppendOnlyCache[Reader] = AppendOnlyCache('reader')

    def reader(self, root_type: type, steps: Tuple[AccessStep, ...]) -> Reader:
        """Cached compiled reader for ``steps`` rooted at ``root_type``."""
        key = CacheKey.from_args(root_type, format_path(steps))
        return self._readers.get_or_compute(key, lambda: compile_reader(steps))

    def evaluate(self, root: Any, steps: Tuple[AccessStep, ...]) -> Any:
        """Current value reachable from ``root`` through ``steps``."""
        return self.reader(type(root), steps)(root)
