"""Process-wide get-or-load map keyed by tenant.

TenantCache is the single-flight primitive shared by the face cache and the
classifier registry:

- hits are served under a short guard lock only,
- concurrent misses for one tenant collapse into a single load,
- invalidation bumps a per-tenant generation so a load that raced it is
  handed to its callers but never stored as current.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Iterator, Optional, TypeVar

from .keyed_lock import KeyedLock

logger = logging.getLogger(__name__)

V = TypeVar('V')


class TenantCache(Generic[V]):
    """Thread-safe tenant key -> value map with per-key single-flight loading.

    Attributes:
        name: Name used in log messages
    """

    def __init__(self, name: str, lock_timeout: Optional[float] = None):
        """Initialize tenant cache.

        Args:
            name: Name used in log messages
            lock_timeout: Maximum wait for a tenant lock (None blocks forever)
        """
        self.name = name
        self._guard = threading.Lock()
        self._entries: Dict[str, V] = {}
        self._generations: Dict[str, int] = {}
        self._locks = KeyedLock(timeout=lock_timeout)

    def peek(self, key: str) -> Optional[V]:
        """Get the current value without loading.

        Returns:
            Cached value or None if absent
        """
        with self._guard:
            return self._entries.get(key)

    def get_or_load(self, key: str, loader: Callable[[str], V]) -> V:
        """Get the current value, loading it once on a miss.

        The loader runs while holding only this key's lock. If it raises,
        nothing is stored and the exception propagates.

        Args:
            key: Tenant key
            loader: Called with the key to produce the value

        Returns:
            Cached or freshly loaded value
        """
        value = self.peek(key)
        if value is not None:
            logger.debug(f"{self.name}: hit for '{key}'")
            return value

        with self._locks.hold(key):
            with self._guard:
                value = self._entries.get(key)
                generation = self._generations.get(key, 0)
            if value is not None:
                # Another caller finished the load while we waited
                return value

            logger.debug(f"{self.name}: miss for '{key}', loading")
            value = loader(key)

            with self._guard:
                if self._generations.get(key, 0) == generation:
                    self._entries[key] = value
                else:
                    logger.warning(
                        f"{self.name}: '{key}' was invalidated during load, "
                        f"result not cached"
                    )
            return value

    def put(self, key: str, value: V) -> None:
        """Replace the current value for a key."""
        with self._guard:
            self._entries[key] = value
            self._generations[key] = self._generations.get(key, 0) + 1

    def invalidate(self, key: str) -> bool:
        """Remove the current value for a key (idempotent).

        Returns:
            True if a value was removed
        """
        with self._guard:
            removed = self._entries.pop(key, None) is not None
            self._generations[key] = self._generations.get(key, 0) + 1
        if removed:
            logger.debug(f"{self.name}: invalidated '{key}'")
        return removed

    def clear(self) -> None:
        """Remove every cached value."""
        with self._guard:
            for key in self._entries:
                self._generations[key] = self._generations.get(key, 0) + 1
            self._entries.clear()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold this key's load lock, blocking loads for the key meanwhile."""
        with self._locks.hold(key):
            yield

    def __contains__(self, key: str) -> bool:
        with self._guard:
            return key in self._entries

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def __repr__(self) -> str:
        """String representation."""
        return f"TenantCache(name='{self.name}', entries={len(self)})"
