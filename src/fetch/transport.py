"""How listing requests reach the upstream servers.

The transport is chosen once (``build_transport``) and handed to the
``FetchClient``. A direct transport talks to the listing services; a proxy
transport sends every page request to the ``/api/server-proxy`` route of
another running instance that can reach them.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from src.config import config
from src.fetch.endpoints import LISTING_HEADERS, listing_params
from src.parse.models import SourceDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListingRequest:
    url: str
    params: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


class Transport(Protocol):
    name: str

    def build_request(self, source: SourceDescriptor, page: int, page_size: int) -> ListingRequest:
        ...


class DirectTransport:
    """Request the listing service of the source's own server."""

    name = "direct"

    def build_request(self, source: SourceDescriptor, page: int, page_size: int) -> ListingRequest:
        return ListingRequest(
            url=source.base_url,
            params=listing_params(page, page_size, source.data_filter, source.context_language, source.context_site),
            headers=dict(LISTING_HEADERS),
        )


class ProxyTransport:
    """Forward listing requests through another instance's server-proxy route."""

    name = "proxy"

    def __init__(self, proxy_base: str):
        self.proxy_base = proxy_base.rstrip("/")

    def build_request(self, source: SourceDescriptor, page: int, page_size: int) -> ListingRequest:
        params = listing_params(page, page_size, source.data_filter, source.context_language, source.context_site)
        params["domain"] = source.domain
        params["service"] = source.kind.value
        return ListingRequest(
            url=f"{self.proxy_base}/api/server-proxy",
            params=params,
            headers={"ngrok-skip-browser-warning": "true", "Accept": "application/json"},
        )


def build_transport(proxy_url: Optional[str] = None) -> Transport:
    """Pick the transport from an explicit URL or the configured PROXY_URL."""
    proxy = proxy_url if proxy_url is not None else config.PROXY_URL
    if proxy:
        logger.info(f"Listing requests will go through proxy {proxy}")
        return ProxyTransport(proxy)
    return DirectTransport()
