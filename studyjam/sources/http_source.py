# studyjam/sources/http_source.py
from typing import Optional

import httpx
from loguru import logger
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from studyjam.config.settings import settings
from studyjam.utils.misc_utils import cache_bust_token
from .base_source import CsvSource, FetchError

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}

CACHE_BUST_PARAM = "cachebust"


class RetryableStatusError(Exception):
    """A transient HTTP status, retried when fetch_max_attempts > 1."""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"HTTP {response.status_code} for {response.url}")


class HttpCsvSource(CsvSource):
    """Reads CSV files from static hosting, bypassing HTTP caches on every call."""

    name = "http"

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/") + "/"
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout),
            follow_redirects=True,
        )

    def url_for(self, resource: str) -> str:
        return self.base_url + resource.lstrip("/")

    async def fetch_text(self, resource: str) -> str:
        url = self.url_for(resource)
        try:
            response = await self._get(url)
        except RetryableStatusError as e:
            raise FetchError(
                resource, RuntimeError(f"HTTP {e.response.status_code}")
            ) from e
        except httpx.HTTPStatusError as e:
            raise FetchError(
                resource, RuntimeError(f"HTTP {e.response.status_code}")
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Network error fetching {resource}: {e}")
            raise FetchError(resource, e) from e
        logger.debug(f"Fetched {resource} ({len(response.content)} bytes)")
        return response.text

    @retry(
        stop=stop_after_attempt(settings.fetch_max_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.RequestError, RetryableStatusError)),
        reraise=True,  # Reraise the last exception after max attempts
    )
    async def _get(self, url: str) -> httpx.Response:
        """GETs a URL with a fresh cache-busting parameter per attempt."""
        response = await self.client.get(
            url,
            params={CACHE_BUST_PARAM: cache_bust_token()},
            headers={"Cache-Control": "no-cache"},
        )
        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.warning(f"Transient status {response.status_code} for {url}")
            raise RetryableStatusError(response)
        if response.is_error:
            logger.error(f"HTTP error {response.status_code} for {url}")
        response.raise_for_status()  # Raises HTTPStatusError for 4xx/5xx
        return response

    async def close(self) -> None:
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.debug(f"Closed HTTP client for {self.base_url}")
