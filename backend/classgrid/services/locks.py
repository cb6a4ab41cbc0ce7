from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock


class ScheduleLockRegistry:
    """One mutex per schedule id, shared by every request handled in this process.

    Row locks taken inside the transaction cover multi-node PostgreSQL
    deployments; this registry serializes writers on a single node and on
    databases without ``SELECT ... FOR UPDATE`` support.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    def _lock_for(self, schedule_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(schedule_id)
            if lock is None:
                lock = Lock()
                self._locks[schedule_id] = lock
            return lock

    @contextmanager
    def hold(self, schedule_id: str) -> Iterator[None]:
        lock = self._lock_for(schedule_id)
        with lock:
            yield

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


schedule_locks = ScheduleLockRegistry()
