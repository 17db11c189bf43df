from link_registry.schemas.entry import Collection, Entry, Metadata
from link_registry.schemas.link import LinkCreate, StoredLink

__all__ = [
    "Collection",
    "Entry",
    "LinkCreate",
    "Metadata",
    "StoredLink",
]
