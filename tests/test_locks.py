from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from link_registry.errors import LockError, LockTimeout
from link_registry.storage import FileNamedLock, InMemoryNamedLock, NamedLock


@pytest.fixture(params=["memory", "file"])
def named_lock(request, tmp_path: Path) -> NamedLock:
    if request.param == "memory":
        return InMemoryNamedLock()
    return FileNamedLock(tmp_path / "locks", poll_interval=0.01)


def _hold_in_thread(lock: NamedLock, name: str, started: threading.Event, done: threading.Event):
    def run() -> None:
        with lock.hold(name):
            started.set()
            done.wait(timeout=5)

    thread = threading.Thread(target=run)
    thread.start()
    assert started.wait(timeout=5)
    return thread


def test_sequential_reacquisition_is_safe(named_lock: NamedLock) -> None:
    for _ in range(3):
        with named_lock.hold("bookmarks"):
            pass


def test_waiter_times_out_while_lock_is_held(named_lock: NamedLock) -> None:
    started, done = threading.Event(), threading.Event()
    thread = _hold_in_thread(named_lock, "bookmarks", started, done)
    try:
        with pytest.raises(LockTimeout) as excinfo:
            named_lock.acquire("bookmarks", timeout=0.05)
        assert excinfo.value.name == "bookmarks"
        with pytest.raises(LockTimeout):
            named_lock.acquire("bookmarks", blocking=False)
    finally:
        done.set()
        thread.join(timeout=5)

    with named_lock.hold("bookmarks", timeout=1.0):
        pass


def test_different_names_do_not_block(named_lock: NamedLock) -> None:
    started, done = threading.Event(), threading.Event()
    thread = _hold_in_thread(named_lock, "bookmarks", started, done)
    try:
        with named_lock.hold("reading-list", timeout=0.05):
            pass
    finally:
        done.set()
        thread.join(timeout=5)


def test_hold_is_mutually_exclusive(named_lock: NamedLock) -> None:
    inside = 0
    overlaps: list[int] = []
    guard = threading.Lock()

    def worker() -> None:
        nonlocal inside
        for _ in range(5):
            with named_lock.hold("bookmarks"):
                with guard:
                    inside += 1
                    overlaps.append(inside)
                time.sleep(0.001)
                with guard:
                    inside -= 1

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert len(overlaps) == 20
    assert max(overlaps) == 1


def test_hold_releases_on_error(named_lock: NamedLock) -> None:
    with pytest.raises(RuntimeError):
        with named_lock.hold("bookmarks"):
            raise RuntimeError("boom")

    named_lock.acquire("bookmarks", blocking=False)
    named_lock.release("bookmarks")


def test_release_without_acquire_is_an_error(named_lock: NamedLock) -> None:
    with pytest.raises(LockError):
        named_lock.release("bookmarks")


def test_file_lock_uses_resource_keyed_lock_file(tmp_path: Path) -> None:
    lock = FileNamedLock(tmp_path / "locks")

    with lock.hold("bookmarks"):
        assert lock.lock_path("bookmarks") == tmp_path / "locks" / "file-bookmarks.lock"
        assert lock.lock_path("bookmarks").exists()
