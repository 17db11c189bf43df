from typing import Optional


class RegistryError(Exception):
    """Base error for all link registry exceptions."""


class FetchError(RegistryError):
    """Raised when a page cannot be retrieved or is not HTML."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class DecodeError(RegistryError):
    """Raised when a collection blob is not a valid encoded collection."""


class LockError(RegistryError):
    """Raised when a resource lock cannot be acquired."""


class LockTimeout(LockError):
    """Raised when waiting for a resource lock exceeds the timeout."""

    def __init__(self, name: str, timeout: Optional[float]) -> None:
        super().__init__(f"timed out after {timeout}s waiting for lock {name!r}")
        self.name = name
        self.timeout = timeout


class StorageError(RegistryError):
    """Raised when a collection blob cannot be written."""


class InvalidResourceName(RegistryError, ValueError):
    """Raised when a resource name is empty or not a single path segment."""
