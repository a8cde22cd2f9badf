"""Base fetcher with HTTP client and retry logic."""

from typing import Any, Dict, Optional
import logging

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from .. import __version__
from ..errors import BadResponseError, PackageNotFoundError, RequestFailedError

logger = logging.getLogger(__name__)


class BaseFetcher:
    """Owns the HTTP client and turns responses into JSON payloads or registry errors."""

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.BaseTransport] = None):
        self.client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": f"nuver/{__version__}", "Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.ConnectError, httpx.ReadTimeout)),
        reraise=True,
    )
    def _get(self, url: str, params: Optional[Dict[str, str]] = None) -> httpx.Response:
        logger.debug(f"Fetching: {url}")
        return self.client.get(url, params=params)

    def fetch_response(self, url: str, params: Optional[Dict[str, str]] = None) -> httpx.Response:
        """GET ``url``, mapping transport failures to RequestFailedError."""
        try:
            return self._get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Error fetching {url}: {e}")
            raise RequestFailedError(url, str(e) or type(e).__name__) from e

    def fetch_json(
        self,
        url: str,
        params: Optional[Dict[str, str]] = None,
        package: Optional[str] = None,
    ) -> Any:
        """Fetch a JSON document.

        A 404 becomes PackageNotFoundError for ``package`` (or the URL),
        any other non-200 status or an unparseable body becomes
        BadResponseError.
        """
        response = self.fetch_response(url, params=params)
        if response.status_code == 404:
            logger.debug(f"Not found: {url}")
            raise PackageNotFoundError(package or url)
        if response.status_code != 200:
            logger.warning(f"HTTP {response.status_code} fetching {url}")
            raise BadResponseError(response.status_code, str(response.url))

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Invalid JSON from {url}: {e}")
            raise BadResponseError(response.status_code, str(response.url)) from e

    def close(self):
        """Clean up HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
