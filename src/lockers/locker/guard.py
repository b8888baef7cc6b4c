"""Per-locker serialization of command processing.

Every command that loads, mutates and saves a Locker aggregate goes through
``process_for_locker``. The lock is held across the whole unit of work, so
two deposits against the same locker run one after the other and the second
one sees the first one's committed pool entry and rotated token. Different
lockers never wait on each other.
"""

import threading
from collections.abc import Hashable
from contextlib import contextmanager
from typing import Any

import structlog
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


class KeyedLock:
    """A re-entrant lock per key, dropped once nobody holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}
        self._users: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable):
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            self._users[key] = self._users.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


locker_locks = KeyedLock()


def process_for_locker(locker_id: str, command) -> Any:
    """Process ``command`` synchronously while holding the locker's lock."""
    key = str(locker_id).strip()
    with locker_locks.hold(key):
        logger.debug("locker_guard_acquired", locker_id=key, command=type(command).__name__)
        return current_domain.process(command, asynchronous=False)
