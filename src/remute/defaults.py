"""
Default engine and chaining helpers.

Provides thread-local storage for the default Remute engine. Each thread
lazily creates its own engine on first use, so strategy caches and change
handlers registered on the default engine are per thread.

    updated = remute(employee, 'first_name', 'Foo')
    updated = remute(remute(employee, 'first_name', 'Foo'), 'last_name', 'Bar')
    employee = remute_to(poco, Employee)
"""

import threading
from typing import Any, Optional

from remute.engine import Remute
from remute.steps import PathExpression

_default_engine_context = threading.local()


def get_default_engine() -> Remute:
    """Get the calling thread's default engine, creating it on first use."""
    engine = getattr(_default_engine_context, 'value', None)
    if engine is None:
        engine = Remute()
        _default_engine_context.value = engine
    return engine


def set_default_engine(engine: Optional[Remute]) -> None:
    """Set the calling thread's default engine.

    Args:
        engine: Engine to use, or None to start over with a fresh engine on
            the next ``get_default_engine()`` call
    """
    _default_engine_context.value = engine


def remute(instance: Any, path: PathExpression, value: Any, engine: Optional[Remute] = None) -> Any:
    """Return a copy of ``instance`` with the value at ``path`` replaced."""
    return (engine or get_default_engine()).apply(instance, path, value)


def remute_to(source: Any, target_type: type, engine: Optional[Remute] = None) -> Any:
    """Build a ``target_type`` instance from the readable properties of ``source``."""
    return (engine or get_default_engine()).convert(source, target_type)
