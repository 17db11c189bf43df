"""Named advisory locks, one per resource.

``FileNamedLock`` uses :mod:`filelock` so locks are shared between processes
and released by the OS when a holder dies. ``InMemoryNamedLock`` only
coordinates threads of one process.
"""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

from filelock import FileLock, Timeout

from link_registry.errors import LockError, LockTimeout

LOGGER = logging.getLogger(__name__)


class NamedLock(ABC):
    """Blocking mutual exclusion keyed by name.

    A ``timeout`` of ``None`` waits forever; expiry raises :class:`LockTimeout`.
    Sequential re-acquisition of the same name is safe.
    """

    @abstractmethod
    def acquire(self, name: str, blocking: bool = True, timeout: Optional[float] = None) -> None: ...

    @abstractmethod
    def release(self, name: str) -> None: ...

    @contextlib.contextmanager
    def hold(self, name: str, timeout: Optional[float] = None) -> Iterator[None]:
        start = time.monotonic()
        self.acquire(name, timeout=timeout)
        LOGGER.debug(
            "lock-acquired name=%s wait_ms=%.3f", name, (time.monotonic() - start) * 1000.0
        )
        try:
            yield None
        finally:
            self.release(name)
            LOGGER.debug("lock-released name=%s", name)


class InMemoryNamedLock(NamedLock):
    """Per-name ``threading.Lock`` objects for one process.

    Locks are created on first use and kept for the life of the instance, one
    per resource name seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, name: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(name, threading.Lock())

    def acquire(self, name: str, blocking: bool = True, timeout: Optional[float] = None) -> None:
        lock = self._lock_for(name)
        if not blocking:
            acquired = lock.acquire(blocking=False)
        else:
            acquired = lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise LockTimeout(name, 0.0 if not blocking else timeout)

    def release(self, name: str) -> None:
        try:
            self._lock_for(name).release()
        except RuntimeError as exc:
            raise LockError(f"lock {name!r} is not held") from exc


class FileNamedLock(NamedLock):
    """One lock file per name under ``lock_dir``.

    Each acquisition opens its own :class:`filelock.FileLock`, so threads of
    one process exclude each other as well as separate processes do.
    """

    def __init__(self, lock_dir: str | Path, poll_interval: float = 0.05) -> None:
        self.lock_dir = Path(lock_dir)
        self.poll_interval = poll_interval
        self._held = threading.local()

    def _held_locks(self) -> dict[str, FileLock]:
        held = getattr(self._held, "locks", None)
        if held is None:
            held = self._held.locks = {}
        return held

    def lock_path(self, name: str) -> Path:
        return self.lock_dir / f"file-{name}.lock"

    def acquire(self, name: str, blocking: bool = True, timeout: Optional[float] = None) -> None:
        held = self._held_locks()
        if name in held:
            raise LockError(f"lock {name!r} is already held by this thread")
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        lock = FileLock(str(self.lock_path(name)), thread_local=False)
        wait = -1 if timeout is None else timeout
        try:
            lock.acquire(timeout=wait, poll_interval=self.poll_interval, blocking=blocking)
        except Timeout as exc:
            raise LockTimeout(name, 0.0 if not blocking else timeout) from exc
        held[name] = lock

    def release(self, name: str) -> None:
        lock = self._held_locks().pop(name, None)
        if lock is None:
            raise LockError(f"lock {name!r} is not held by this thread")
        lock.release()
