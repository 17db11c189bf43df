from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from link_registry import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    app_name: str = Field(
        default="Link Registry",
        description="Application name",
    )
    storage_dir: Path = Field(
        default=Path("data/links"),
        description="Directory holding one JSON file per resource",
    )
    lock_dir: Optional[Path] = Field(
        default=None,
        description="Directory for lock files, defaults to <storage_dir>/.locks",
    )
    lock_timeout: Optional[float] = Field(
        default=None,
        ge=0,
        description="Seconds to wait for a resource lock; unset waits forever",
    )
    fetch_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds allowed for fetching a page",
    )
    # Certificate and hostname checks are off to scrape arbitrary third-party
    # pages. Turn this off to harden the fetch.
    insecure_fetch: bool = Field(
        default=True,
        description="Skip TLS verification when fetching pages",
    )
    fetch_before_lock: bool = Field(
        default=True,
        description="Fetch page metadata before taking the resource lock",
    )
    user_agent: str = Field(
        default=f"link-registry/{__version__}",
        description="User-Agent header sent when fetching pages",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def resolved_lock_dir(self) -> Path:
        return self.lock_dir if self.lock_dir is not None else self.storage_dir / ".locks"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
