from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status

from link_registry.api.deps import get_resource_store
from link_registry.errors import InvalidResourceName, LockError, StorageError
from link_registry.hashing import entry_id
from link_registry.schemas import LinkCreate, StoredLink
from link_registry.services import ResourceStore

router = APIRouter(prefix="/resources", tags=["resources"])

Store = Annotated[ResourceStore, Depends(get_resource_store)]


@contextmanager
def _registry_errors() -> Iterator[None]:
    try:
        yield
    except InvalidResourceName as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except LockError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except StorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc


@router.get("", response_model=list[str])
def list_resources(store: Store) -> list[str]:
    """List all resource names."""
    return store.list_resources()


@router.get("/{resource}")
def retrieve_resource(resource: str, store: Store) -> dict[str, Any]:
    """Return every entry of a resource keyed by entry id."""
    with _registry_errors():
        collection = store.retrieve(resource)
    return {key: entry.to_json_dict() for key, entry in collection.items()}


@router.post(
    "/{resource}", response_model=StoredLink, status_code=status.HTTP_201_CREATED
)
def store_link(resource: str, payload: LinkCreate, store: Store) -> StoredLink:
    """Fetch a link's metadata and store it in a resource."""
    # rejected here rather than by a validator: the 422 body would echo the text
    if not payload.is_encodable():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="url is not valid UTF-8 text",
        )
    with _registry_errors():
        store.store(resource, payload.url)
    return StoredLink(id=entry_id(payload.url), url=payload.url)


@router.delete("/{resource}/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_link(resource: str, link_id: str, store: Store) -> Response:
    """Remove an entry from a resource; unknown ids are ignored."""
    with _registry_errors():
        store.delete(resource, link_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
