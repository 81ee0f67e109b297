"""
In-process keyed leases for cell writes.

A lease short-circuits concurrent writes to the same (product, warehouse)
inside one process: the second caller fails fast instead of queueing. The
database write lock taken by the unit of work stays the authority across
processes.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from src.core.exceptions import ConcurrentUpdateError

CellKey = tuple[str, str]


class KeyedLease:
    """Non-blocking try-or-fail exclusive lease per cell key."""

    def __init__(self) -> None:
        self._held: set[CellKey] = set()
        self._lock = threading.Lock()

    def try_acquire(self, key: CellKey) -> bool:
        with self._lock:
            if key in self._held:
                return False
            self._held.add(key)
            return True

    def release(self, key: CellKey) -> None:
        with self._lock:
            self._held.discard(key)

    def is_held(self, key: CellKey) -> bool:
        with self._lock:
            return key in self._held

    @contextmanager
    def hold(self, key: CellKey) -> Iterator[None]:
        """
        Hold the lease for the duration of the block.

        Raises:
            ConcurrentUpdateError: Another holder has the key.
        """
        if not self.try_acquire(key):
            raise ConcurrentUpdateError(*key)
        try:
            yield
        finally:
            self.release(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._held)
