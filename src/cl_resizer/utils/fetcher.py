"""Bounded HTTP fetch of source images."""

import httpx
from loguru import logger

from ..common.errors import FetchError, FetchSizeExceededError

DEFAULT_MAX_BYTES = 15 * 1024 * 1024


class Fetcher:
    """Download a URL's body with a hard size ceiling.

    One GET per call, no retries. The body is streamed so that an oversize
    response is rejected as soon as the ceiling is crossed instead of being
    buffered whole.

    Example:
        async with httpx.AsyncClient(timeout=30.0) as client:
            fetcher = Fetcher(client)
            data = await fetcher.fetch("https://example.com/photo.jpeg")
    """

    def __init__(self, client: httpx.AsyncClient, max_bytes: int = DEFAULT_MAX_BYTES):
        """Initialize fetcher.

        Args:
            client: Shared async client (owned by the caller)
            max_bytes: Largest body accepted, in bytes
        """
        self.client: httpx.AsyncClient = client
        self.max_bytes: int = max_bytes

    async def fetch(self, url: str) -> bytes:
        """Fetch ``url`` and return the full body.

        Raises:
            FetchError: On a malformed URL, transport or read failure, or a non-200 status
            FetchSizeExceededError: If the body is larger than ``max_bytes``
        """
        logger.info(f"Fetching {url}")
        try:
            async with self.client.stream("GET", url) as response:
                if response.status_code != httpx.codes.OK:
                    raise FetchError(url, status=response.status_code)

                size_header = response.headers.get("content-length")
                if size_header is not None and size_header.isdigit():
                    if int(size_header) > self.max_bytes:
                        raise FetchSizeExceededError(url, self.max_bytes)

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > self.max_bytes:
                        raise FetchSizeExceededError(url, self.max_bytes)

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, reason=f"fetch failed: {e}") from e

        return bytes(body)
