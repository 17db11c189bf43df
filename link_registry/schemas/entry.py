from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Metadata(BaseModel):
    """Display metadata scraped from a page."""

    title: str
    properties: dict[str, str] = Field(default_factory=dict)
    keywords: Optional[list[str]] = None


class Entry(BaseModel):
    """A stored link. Scraped meta properties are kept as extra fields."""

    url: str
    stored_at: datetime = Field(alias="storedAt")
    page: Optional[str] = None
    keywords: Optional[list[str]] = None

    model_config = ConfigDict(extra="allow")

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    @classmethod
    def build(
        cls, url: str, stored_at: datetime, metadata: Optional[Metadata] = None
    ) -> "Entry":
        fields: dict[str, Any] = {}
        if metadata is not None:
            fields.update(metadata.properties)
            if metadata.keywords is not None:
                fields["keywords"] = metadata.keywords
        # applied last so a page's own og:url cannot replace them
        fields["url"] = url
        fields["storedAt"] = stored_at
        return cls.model_validate(fields)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


Collection = dict[str, Entry]
