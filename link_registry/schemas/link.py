from pydantic import BaseModel, Field


class LinkCreate(BaseModel):
    # kept as a plain string: entry ids hash the exact text
    url: str = Field(min_length=1)

    def is_encodable(self) -> bool:
        try:
            self.url.encode("utf-8")
        except UnicodeEncodeError:
            return False
        return True


class StoredLink(BaseModel):
    id: str
    url: str
