from link_registry.storage.blobs import BlobStore, FilesystemBlobStore, InMemoryBlobStore
from link_registry.storage.locks import FileNamedLock, InMemoryNamedLock, NamedLock

__all__ = [
    "BlobStore",
    "FileNamedLock",
    "FilesystemBlobStore",
    "InMemoryBlobStore",
    "InMemoryNamedLock",
    "NamedLock",
]
