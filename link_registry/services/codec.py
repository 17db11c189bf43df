from __future__ import annotations

import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from link_registry.errors import DecodeError
from link_registry.schemas.entry import Collection

LOGGER = logging.getLogger(__name__)


class CollectionCodec:
    """JSON encoding of a collection (entry id -> entry)."""

    def __init__(self) -> None:
        self._adapter: TypeAdapter[Collection] = TypeAdapter(Collection)

    def encode(self, collection: Collection) -> bytes:
        return self._adapter.dump_json(collection, by_alias=True, exclude_none=True)

    def decode_strict(self, data: bytes) -> Collection:
        try:
            return self._adapter.validate_json(data)
        except ValidationError as exc:
            raise DecodeError(str(exc)) from exc

    def decode(self, data: bytes, resource: Optional[str] = None) -> Collection:
        """Decode ``data``; undecodable input yields an empty collection."""
        try:
            return self.decode_strict(data)
        except DecodeError as exc:
            LOGGER.warning(
                "discarding undecodable collection: %s", exc, extra={"resource": resource}
            )
            return {}
