"""HTTP client for listing pages with retries and error handling."""
import logging
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from src.config import config
from src.fetch.errors import FetchError
from src.fetch.transport import DirectTransport, Transport, build_transport
from src.parse.kinds import extract_records
from src.parse.models import Page, SourceDescriptor
from src.parse.payload import PayloadDecodeError, decode_payload, read_total

logger = logging.getLogger(__name__)


class FetchClient:
    """Fetches listing pages through a transport; one instance per comparison."""

    def __init__(
        self,
        transport: Optional[Transport] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.transport = transport or build_transport()
        self.timeout = timeout if timeout is not None else config.TIMEOUT
        self.max_retries = max_retries if max_retries is not None else config.MAX_RETRIES
        self.retry_base_delay = retry_base_delay if retry_base_delay is not None else config.RETRY_BASE_DELAY

        if http_client is None:
            # Configure connection pool
            limits = httpx.Limits(
                max_connections=100,
                max_keepalive_connections=20,
            )
            http_client = httpx.AsyncClient(
                http2=True,
                timeout=self.timeout,
                follow_redirects=True,
                limits=limits,
            )
        self.client = http_client
        self.request_count = 0
        self.failure_count = 0
        self.exhausted_count = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    async def _get(self, url: str, params: dict[str, Any], headers: dict[str, str], timeout: float) -> httpx.Response:
        self.request_count += 1
        try:
            response = await self.client.get(url, params=params, headers=headers, timeout=timeout)
        except httpx.TimeoutException as e:
            raise FetchError("timeout", url=url, message=f"Timeout after {timeout:g}s") from e
        except httpx.HTTPError as e:
            # Transport failures plus body decoding and redirect loops
            raise FetchError("network", url=url, message=f"Network error: {e}") from e
        if not response.is_success:
            raise FetchError(response.status_code, url=url)
        return response

    async def fetch_payload(
        self,
        source: SourceDescriptor,
        page: int,
        page_size: int,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Fetch one listing page and return its decoded, unwrapped payload."""
        request = self.transport.build_request(source, page, page_size)
        response = await self._get(
            request.url,
            params=request.params,
            headers=request.headers,
            timeout=timeout or self.timeout,
        )
        try:
            return decode_payload(response.text)
        except PayloadDecodeError as e:
            raise FetchError("decode", url=request.url, message=str(e)) from e

    async def fetch_page(
        self,
        source: SourceDescriptor,
        page: int,
        page_size: int,
        timeout: Optional[float] = None,
    ) -> Page:
        """Fetch one page. Raises FetchError; never retries."""
        payload = await self.fetch_payload(source, page, page_size, timeout=timeout)
        return Page(
            total=read_total(payload),
            records=extract_records(source.kind, payload),
            page_number=page,
            page_size=page_size,
        )

    async def fetch_page_with_retry(
        self,
        source: SourceDescriptor,
        page: int,
        page_size: int,
        max_attempts: Optional[int] = None,
    ) -> Optional[Page]:
        """Fetch one page with backoff; returns None once every attempt failed."""
        attempts = max_attempts or self.max_retries + 1
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_incrementing(start=self.retry_base_delay, increment=self.retry_base_delay),
            retry=retry_if_exception_type(FetchError),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    try:
                        return await self.fetch_page(source, page, page_size)
                    except FetchError as e:
                        self.failure_count += 1
                        logger.warning(
                            f"[fetch] {source} page {page} size {page_size} "
                            f"attempt {attempt.retry_state.attempt_number}/{attempts} failed: {e}"
                        )
                        raise
        except FetchError as e:
            self.exhausted_count += 1
            logger.error(f"[fetch] {source} page {page} size {page_size} gave up after {attempts} attempts: {e}")
        return None

    async def fetch_text(self, url: str, headers: dict[str, str], timeout: Optional[float] = None) -> str:
        """Fetch a plain page (used for the event feeds)."""
        response = await self._get(url, params={}, headers=headers, timeout=timeout or self.timeout)
        return response.text


def direct_client(**kwargs) -> FetchClient:
    """Client that always talks to the upstream servers, ignoring PROXY_URL."""
    return FetchClient(transport=DirectTransport(), **kwargs)
