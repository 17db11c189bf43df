from link_registry.services.codec import CollectionCodec
from link_registry.services.metadata import MetadataService
from link_registry.services.resources import ResourceStore

__all__ = ["CollectionCodec", "MetadataService", "ResourceStore"]
