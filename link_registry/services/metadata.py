"""Fetch a page and scrape its display metadata."""

from __future__ import annotations

import logging
import re
import warnings
from typing import Optional, Union

import httpx
from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, XMLParsedAsHTMLWarning

from link_registry.config import Settings
from link_registry.errors import FetchError
from link_registry.schemas.entry import Metadata

LOGGER = logging.getLogger(__name__)

_OG_PROPERTY = re.compile(r"^og:")

warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)


def _is_html(content_type: str) -> bool:
    return "html" in content_type.lower()


def _content(tag) -> str:
    value = tag.get("content", "")
    return value if isinstance(value, str) else " ".join(value)


def parse_document(html: Union[bytes, str]) -> Optional[BeautifulSoup]:
    """Parse permissively; ``None`` means there is nothing to scrape."""
    if not html:
        return None
    try:
        return BeautifulSoup(html, "html.parser")
    except Exception as exc:  # noqa: BLE001 - unparseable pages scrape as empty
        LOGGER.debug("unable to parse document: %s", exc)
        return None


def extract_metadata(url: str, html: Union[bytes, str]) -> Metadata:
    soup = parse_document(html)

    title: Optional[str] = None
    if soup is not None and soup.title is not None:
        title = soup.title.get_text().strip() or None
    if title is None:
        LOGGER.info("no title found for %s", url, extra={"url": url})
        title = url

    properties: dict[str, str] = {"page": title}
    if soup is not None:
        for tag in soup.find_all("meta", attrs={"property": _OG_PROPERTY}):
            properties[tag["property"].removeprefix("og:")] = _content(tag)
        # generic meta tags win over Open Graph ones on the same key
        for tag in soup.find_all("meta", attrs={"name": True}):
            name = tag["name"]
            if name:
                properties[name] = _content(tag)

    keywords: Optional[list[str]] = None
    raw_keywords = properties.pop("keywords", None)
    if raw_keywords is not None:
        keywords = raw_keywords.split(",")
    else:
        LOGGER.info("no keywords found on page", extra={"url": url})

    return Metadata(title=title, properties=properties, keywords=keywords)


class MetadataService:
    """Fetches pages and extracts title, Open Graph and meta tag properties.

    With ``insecure=True`` certificate and hostname checks are skipped so that
    arbitrary third-party pages can be scraped.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        insecure: bool = True,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if insecure:
            LOGGER.warning("TLS verification is disabled for metadata fetches")
        headers = {"User-Agent": user_agent} if user_agent else None
        self._client = httpx.Client(
            timeout=timeout,
            verify=not insecure,
            follow_redirects=True,
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "MetadataService":
        return cls(
            timeout=settings.fetch_timeout,
            insecure=settings.insecure_fetch,
            user_agent=settings.user_agent,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        self._client.close()

    def download(self, url: str) -> bytes:
        # idna failures on malformed hostnames surface as UnicodeError (a ValueError)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise FetchError(url, str(exc)) from exc

        content_type = response.headers.get("content-type")
        if content_type and not _is_html(content_type):
            raise FetchError(url, f"not an HTML document ({content_type})")
        return response.content

    def fetch(self, url: str) -> Metadata:
        """Download ``url`` and scrape it, raising :class:`FetchError` on failure."""
        return extract_metadata(url, self.download(url))
