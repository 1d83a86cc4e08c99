"""
Per-key locks for order mutations.

Each order id gets its own lock while someone holds or waits for it; the
entry is dropped once nobody does. Acquisition is bounded so a stuck holder
cannot block callers forever.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from core.domain.exceptions import OrderLockTimeoutError

logger = logging.getLogger(__name__)


class KeyedLock:
    """Registry of exclusive locks keyed by order id."""

    def __init__(self, timeout: float = 10.0):
        """
        Initialize the registry.

        Args:
            timeout: Seconds to wait for a lock before giving up
        """
        self._timeout = timeout
        self._guard = threading.Lock()
        # key -> [lock, number of holders and waiters]
        self._entries: Dict[str, List] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Raises:
            OrderLockTimeoutError: If the lock is not acquired within the timeout
        """
        with self._guard:
            entry = self._entries.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        try:
            if not lock.acquire(timeout=self._timeout):
                logger.warning("Timed out waiting for order lock %s", key)
                raise OrderLockTimeoutError(f"Order {key} is busy, try again later")
            try:
                yield
            finally:
                lock.release()
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[key]

    def __len__(self) -> int:
        """Return the number of keys currently held or waited on."""
        with self._guard:
            return len(self._entries)
