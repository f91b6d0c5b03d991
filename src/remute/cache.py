"""
Append-only caches for reconstruction strategies and compiled paths.

Provides a reusable abstraction for caching values whose keys are static
type/path combinations. The key space is the set of distinct combinations a
program exercises, so entries are never evicted.

Concurrent use: ``dict.setdefault`` is atomic for keys made of types, strings
and ints, so two threads racing on the same miss both compute, and the first
insert wins. Computation is idempotent, which makes the race harmless.
"""

from typing import TypeVar, Generic, Optional, Callable, Tuple, Any, Dict, Iterator
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class CacheKey:
    """Immutable cache key that can include multiple components."""
    components: Tuple[Any, ...]

    def __hash__(self):
        return hash(self.components)

    def __eq__(self, other):
        if not isinstance(other, CacheKey):
            return False
        return self.components == other.components

    @classmethod
    def from_args(cls, *args) -> 'CacheKey':
        """Create cache key from variable arguments."""
        return cls(components=args)


class AppendOnlyCache(Generic[T]):
    """
    Thread-safe insert-if-absent cache with no eviction.

    Example:
        cache = AppendOnlyCache('strategies')

        strategy = cache.get_or_compute(
            key=CacheKey.from_args(source_shape, target_type),
            compute_fn=lambda: build_strategy(source_shape, target_type)
        )
    """

    def __init__(self, name: str):
        """
        Initialize cache.

        Args:
            name: Label used in debug logging
        """
        self._name = name
        self._cache: Dict[CacheKey, T] = {}

    def get_or_compute(self, key: CacheKey, compute_fn: Callable[[], T]) -> T:
        """
        Get cached value or compute and cache it.

        Args:
            key: Cache key
            compute_fn: Function to compute value if cache miss

        Returns:
            Cached or computed value. When two threads miss together, both
            receive the value that was inserted first.
        """
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        value = compute_fn()
        logger.debug(f"{self._name} cache miss: {key.components}")
        return self._cache.setdefault(key, value)

    def get(self, key: CacheKey) -> Optional[T]:
        """Get cached value without computing."""
        return self._cache.get(key)

    def keys(self) -> Iterator[CacheKey]:
        """Snapshot of the current keys."""
        return iter(list(self._cache))

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)
