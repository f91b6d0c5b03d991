"""
Change notification sink.

Handlers are called synchronously, once per completed top-level call, after
the new root exists. A failing handler is logged and does not affect the
result of the call or the remaining handlers.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

# (source, target, value, affected_properties)
ChangeHandler = Callable[[Any, Any, Any, Tuple[str, ...]], None]


class ChangeNotifier:
    """Plain registered-handler list."""

    def __init__(self):
        self._handlers: List[ChangeHandler] = []

    def subscribe(self, handler: ChangeHandler) -> None:
        """Subscribe to change notifications."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: ChangeHandler) -> None:
        """Unsubscribe from change notifications."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, source: Any, target: Any, value: Any = None, affected_properties: Optional[Tuple[str, ...]] = None) -> None:
        """Fire all handlers (best-effort)."""
        affected = tuple(affected_properties or ())
        for handler in list(self._handlers):
            try:
                handler(source, target, value, affected)
            except Exception as e:
                logger.warning(f"Error in change handler {handler!r}: {e}")

    def __len__(self) -> int:
        return len(self._handlers)
