"""Per-resource locked read-modify-write of link collections."""

from __future__ import annotations

import contextlib
import logging
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional, Protocol

from link_registry import hashing
from link_registry.errors import FetchError, InvalidResourceName
from link_registry.schemas.entry import Collection, Entry, Metadata
from link_registry.services.codec import CollectionCodec
from link_registry.storage.blobs import BlobStore
from link_registry.storage.locks import NamedLock

LOGGER = logging.getLogger(__name__)


class MetadataFetcher(Protocol):
    def fetch(self, url: str) -> Metadata: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_resource_name(name: str) -> str:
    if not name or not name.strip():
        raise InvalidResourceName("resource name must not be empty")
    if name.startswith(".") or any(ch in name for ch in ("/", "\\", "\x00")):
        raise InvalidResourceName(f"invalid resource name {name!r}")
    return name


class ResourceStore:
    """Stores links in named collections, one blob per resource.

    Every load-mutate-persist cycle runs while the resource's lock is held.
    Fetch and decode failures are logged and absorbed; lock and storage
    failures propagate.
    """

    def __init__(
        self,
        blobs: BlobStore,
        locks: NamedLock,
        fetcher: MetadataFetcher,
        codec: Optional[CollectionCodec] = None,
        lock_timeout: Optional[float] = None,
        fetch_before_lock: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.blobs = blobs
        self.locks = locks
        self.fetcher = fetcher
        self.codec = codec or CollectionCodec()
        self.lock_timeout = lock_timeout
        self.fetch_before_lock = fetch_before_lock
        self.clock = clock

    @contextlib.contextmanager
    def _locked(self, resource_name: str) -> Iterator[None]:
        LOGGER.info("locking category %s", resource_name, extra={"resource": resource_name})
        with self.locks.hold(resource_name, timeout=self.lock_timeout):
            yield
        LOGGER.info("unlocking category %s", resource_name, extra={"resource": resource_name})

    def _load(self, resource_name: str) -> Collection:
        data = self.blobs.get(resource_name)
        if data is None:
            return {}
        return self.codec.decode(data, resource=resource_name)

    def _persist(self, resource_name: str, collection: Collection) -> None:
        LOGGER.info(
            "saving update into %s", resource_name, extra={"resource": resource_name}
        )
        self.blobs.put(resource_name, self.codec.encode(collection))

    def _fetch(self, resource_name: str, url: str) -> Optional[Metadata]:
        try:
            return self.fetcher.fetch(url)
        except FetchError as exc:
            LOGGER.error(
                "unable to get url content",
                extra={"resource": resource_name, "url": url},
            )
            LOGGER.debug("%s", exc)
            return None
        except Exception:  # noqa: BLE001 - a failed scrape still stores the bare link
            LOGGER.exception(
                "unexpected error getting url content",
                extra={"resource": resource_name, "url": url},
            )
            return None

    def list_resources(self) -> list[str]:
        LOGGER.info("listing all categories")
        return list(self.blobs.list())

    def store(self, resource_name: str, url: str) -> None:
        validate_resource_name(resource_name)
        metadata: Optional[Metadata] = None
        if self.fetch_before_lock:
            metadata = self._fetch(resource_name, url)

        with self._locked(resource_name):
            collection = self._load(resource_name)
            if not self.fetch_before_lock:
                metadata = self._fetch(resource_name, url)
            key = hashing.entry_id(url)
            # drop first so the re-inserted entry moves to the end
            collection.pop(key, None)
            collection[key] = Entry.build(url, self.clock(), metadata)
            self._persist(resource_name, collection)

    def retrieve(self, resource_name: str) -> Collection:
        validate_resource_name(resource_name)
        with self._locked(resource_name):
            return self._load(resource_name)

    def delete(self, resource_name: str, entry_id: str) -> None:
        validate_resource_name(resource_name)
        with self._locked(resource_name):
            collection = self._load(resource_name)
            if collection.pop(entry_id, None) is not None:
                LOGGER.info(
                    "deleted url %s in %s",
                    entry_id,
                    resource_name,
                    extra={"resource": resource_name},
                )
                self._persist(resource_name, collection)

        if not collection:
            self._remove_if_empty(resource_name)

    def _remove_if_empty(self, resource_name: str) -> None:
        with self.locks.hold(resource_name, timeout=self.lock_timeout):
            # a store may have landed since the entry was deleted
            if self._load(resource_name):
                return
            LOGGER.info(
                "no more content in %s, deleting it",
                resource_name,
                extra={"resource": resource_name},
            )
            self.blobs.delete(resource_name)
