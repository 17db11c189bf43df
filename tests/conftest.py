from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Union

import pytest

from link_registry.errors import FetchError
from link_registry.schemas import Metadata
from link_registry.services import ResourceStore
from link_registry.storage import InMemoryBlobStore, InMemoryNamedLock

STORED_AT = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


class FakeFetcher:
    """Returns canned metadata per URL; exceptions are raised instead."""

    def __init__(self) -> None:
        self.pages: dict[str, Union[Metadata, Exception]] = {}
        self.calls: list[str] = []

    def fetch(self, url: str) -> Metadata:
        self.calls.append(url)
        result = self.pages.get(url)
        if result is None:
            raise FetchError(url, "connection refused")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def locks() -> InMemoryNamedLock:
    return InMemoryNamedLock()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def make_store(
    blobs: InMemoryBlobStore, locks: InMemoryNamedLock, fetcher: FakeFetcher
) -> Callable[..., ResourceStore]:
    def _make(**kwargs) -> ResourceStore:
        kwargs.setdefault("blobs", blobs)
        kwargs.setdefault("locks", locks)
        kwargs.setdefault("fetcher", fetcher)
        kwargs.setdefault("clock", lambda: STORED_AT)
        return ResourceStore(**kwargs)

    return _make


@pytest.fixture
def store(make_store) -> ResourceStore:
    return make_store()
