from functools import lru_cache

from link_registry.config import get_settings
from link_registry.services import CollectionCodec, MetadataService, ResourceStore
from link_registry.storage import FileNamedLock, FilesystemBlobStore


@lru_cache()
def get_metadata_service() -> MetadataService:
    return MetadataService.from_settings(get_settings())


@lru_cache()
def get_resource_store() -> ResourceStore:
    settings = get_settings()
    blobs = FilesystemBlobStore(settings.storage_dir)
    blobs.ensure_layout()
    return ResourceStore(
        blobs=blobs,
        locks=FileNamedLock(settings.resolved_lock_dir),
        fetcher=get_metadata_service(),
        codec=CollectionCodec(),
        lock_timeout=settings.lock_timeout,
        fetch_before_lock=settings.fetch_before_lock,
    )


def close_metadata_service() -> None:
    # the cached store holds the client being closed
    get_resource_store.cache_clear()
    if get_metadata_service.cache_info().currsize:
        get_metadata_service().close()
        get_metadata_service.cache_clear()
