import threading
from contextlib import contextmanager
from typing import Dict, Hashable


class KeyedLock:
    """One mutex per key, created on first use and kept for the process lifetime."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: Hashable):
        with self._lock_for(key):
            yield
