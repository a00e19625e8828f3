import threading
from contextlib import contextmanager
from typing import Dict, Hashable


class KeyedLocks:
    """
    Registry of per-key mutexes.

    A lock object exists only while some thread holds or waits on its key, so
    the registry does not grow with the number of keys ever seen.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._waiters: Dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable, timeout: float = -1):
        """Acquire the lock for key; raises TimeoutError if not acquired within timeout"""
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._waiters[key] = self._waiters.get(key, 0) + 1

        acquired = False
        try:
            acquired = lock.acquire(timeout=timeout)
            if not acquired:
                raise TimeoutError(f"Timed out waiting for lock on {key!r}")
            yield
        finally:
            if acquired:
                lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
