from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from link_registry.errors import StorageError

LOGGER = logging.getLogger(__name__)


class BlobStore(ABC):
    """Named byte blobs, one per resource.

    ``get`` and ``delete`` on a missing name are not errors.
    """

    @abstractmethod
    def get(self, name: str) -> Optional[bytes]: ...

    @abstractmethod
    def put(self, name: str, data: bytes) -> None: ...

    @abstractmethod
    def delete(self, name: str) -> None: ...

    @abstractmethod
    def list(self) -> list[str]: ...


class FilesystemBlobStore(BlobStore):
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def ensure_layout(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _p(self, name: str) -> Path:
        return self.root / name

    def get(self, name: str) -> Optional[bytes]:
        path = self._p(name)
        LOGGER.debug("reading blob", extra={"resource": name})
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.warning("unable to read %s: %s", path, exc, extra={"resource": name})
            return None

    def put(self, name: str, data: bytes) -> None:
        path = self._p(name)
        temp_path = path.parent / f".{path.name}.tmp"
        try:
            self.ensure_layout()
            temp_path.write_bytes(data)
            os.replace(temp_path, path)
        except OSError as exc:
            raise StorageError(f"unable to write {path}: {exc}") from exc

    def delete(self, name: str) -> None:
        path = self._p(name)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("unable to delete %s: %s", path, exc, extra={"resource": name})

    def list(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            p.name for p in self.root.iterdir() if p.is_file() and not p.name.startswith(".")
        )


class InMemoryBlobStore(BlobStore):
    """Dict-backed store for tests and single-process use."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._guard = threading.Lock()

    def get(self, name: str) -> Optional[bytes]:
        with self._guard:
            return self._blobs.get(name)

    def put(self, name: str, data: bytes) -> None:
        with self._guard:
            self._blobs[name] = bytes(data)

    def delete(self, name: str) -> None:
        with self._guard:
            self._blobs.pop(name, None)

    def list(self) -> list[str]:
        with self._guard:
            return sorted(self._blobs)
