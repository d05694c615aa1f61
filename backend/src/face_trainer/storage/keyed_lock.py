"""Per-key locking for tenant state.

This module provides in-process locks keyed by tenant, so that loading or
training for one tenant never blocks callers working on another tenant.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from ..exceptions import LockTimeout

logger = logging.getLogger(__name__)


class _LockEntry:
    """A re-entrant lock plus the number of threads holding or waiting on it."""

    __slots__ = ('lock', 'users')

    def __init__(self):
        self.lock = threading.RLock()
        self.users = 0


class KeyedLock:
    """Map of key -> re-entrant lock, created on demand.

    Locks are dropped once no thread holds or waits on them, so the map only
    grows with the number of keys in use at the same time.

    Attributes:
        timeout: Default maximum time to wait for a key (seconds, None = forever)
    """

    def __init__(self, timeout: Optional[float] = None):
        """Initialize keyed lock.

        Args:
            timeout: Default acquisition timeout in seconds (None blocks forever)
        """
        self.timeout = timeout
        self._guard = threading.Lock()
        self._entries: Dict[str, _LockEntry] = {}

    @contextmanager
    def hold(self, key: str, timeout: Optional[float] = None) -> Iterator[None]:
        """Hold the lock for a key.

        Usage:
            with keyed_lock.hold(tenant_key):
                # Only one thread per tenant_key runs here
                pass

        Args:
            key: Key to lock
            timeout: Override of the default timeout for this acquisition

        Raises:
            LockTimeout: If the lock cannot be acquired in time
        """
        if timeout is None:
            timeout = self.timeout

        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _LockEntry()
            entry.users += 1

        try:
            acquired = entry.lock.acquire(timeout=-1 if timeout is None else timeout)
            if not acquired:
                raise LockTimeout(
                    f"Could not acquire lock for '{key}' within {timeout} seconds",
                    details={'key': key, 'timeout': timeout}
                )
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        """Get number of keys currently in use."""
        with self._guard:
            return len(self._entries)

    def __repr__(self) -> str:
        """String representation."""
        return f"KeyedLock(active_keys={len(self)}, timeout={self.timeout})"
