"""
Per-key mutual exclusion.

Services hold no game state between calls, but some of their check-then-act sequences (load -> validate -> store) must not
interleave for the same key. KeyedLock hands out one lock per key, so different games (or different (user, game) pairs)
never wait on each other.
"""

import threading
from contextlib import contextmanager
from typing import Generator, Hashable


class KeyedLock:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}
        self._waiters: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Generator[None, None, None]:
        """Block until the lock for key is free, hold it for the duration of the with-block."""
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._waiters[key] -= 1
                # Drop idle keys so the table only holds keys in use.
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
