"""Dispatcher runtime - drives one resize batch through the pipeline."""

import asyncio
from typing import Awaitable, Callable
from urllib.parse import urlsplit

from loguru import logger

from .algo.image_resize import (
    TransformTask,
    decode_image,
    encode_image,
    resize_image,
    spawn_resize,
)
from .common.config import ResizerConfig
from .common.errors import ResizeError, ResizeTimeoutError
from .common.identifier import derive_key
from .common.image_cache import ImageCache
from .common.schemas import ResizeRequest, ResizeResult, Strategy
from .utils.fetcher import Fetcher
from .utils.singleflight import SingleFlight

OPTIMISTIC_SUFFIX = ".jpeg"

Transform = Callable[[bytes, int, int], Awaitable[bytes]]


class ResizeDispatcher:
    """Runs resize batches under one of three concurrency strategies.

    Responsibilities:
    - Derives the cache key for each URL and short-circuits on cache hits
    - Fetches, decodes, resizes and encodes on a miss, then caches the bytes
    - Shares one computation between concurrent requests for the same key
    - Collapses every per-URL error into a ``failure`` result

    Strategies (see ``Strategy.from_selector``):
    - ``"true"``: fire-and-wait. The resize runs on a spawned thread that is
      awaited without a timeout. URLs ending in ``.jpeg`` are reported
      successful immediately and processed in the background.
    - ``"false"``: bounded-wait. The spawned resize is awaited for at most
      ``config.resize_timeout`` seconds. Joining a computation another
      request already started is bounded by the same timeout.
    - anything else: synchronous. The whole decode, resize and encode chain
      runs on one worker thread that the caller awaits directly.

    Example:
        cache = LRUImageCache(capacity=1024)
        async with httpx.AsyncClient() as client:
            dispatcher = ResizeDispatcher(cache, Fetcher(client))
            results = await dispatcher.process_resizes(
                ResizeRequest(urls=["http://example.com/a.jpeg"], width=100)
            )
    """

    def __init__(
        self,
        cache: ImageCache,
        fetcher: Fetcher,
        config: ResizerConfig | None = None,
    ):
        """Initialize dispatcher.

        Args:
            cache: Shared image cache (owned by the caller)
            fetcher: Fetcher used for every source download
            config: Optional config. Defaults to ``ResizerConfig()``.
        """
        self.cache: ImageCache = cache
        self.fetcher: Fetcher = fetcher
        self.config: ResizerConfig = config if config is not None else ResizerConfig()
        self._flight: SingleFlight[bytes] = SingleFlight()
        self._background: set[asyncio.Task[None]] = set()

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    async def process_resizes(
        self,
        request: ResizeRequest,
        strategy: str | Strategy | None = None,
    ) -> list[ResizeResult]:
        """Resize every URL in ``request`` and return one result per URL.

        Args:
            request: Batch to process
            strategy: Selector overriding ``request.strategy``

        Returns:
            Results in input order; ``len(results) == len(request.urls)``
        """
        selected = Strategy.from_selector(request.strategy if strategy is None else strategy)
        logger.info(
            f"Processing {len(request.urls)} url(s) at {request.width}x{request.height} "
            + f"with strategy={selected.name.lower()}"
        )

        if selected is Strategy.FIRE_AND_WAIT:
            return await self._process_fire_and_wait(request)
        if selected is Strategy.BOUNDED_WAIT:
            return await self._process_bounded_wait(request)
        return await self._process_synchronous(request)

    async def drain(self) -> None:
        """Wait for every detached fast-path task to finish."""
        while self._background:
            _ = await asyncio.gather(*list(self._background), return_exceptions=True)

    def pending_background(self) -> int:
        return len(self._background)

    def key_for(self, url: str, width: int, height: int) -> str:
        if self.config.key_includes_dimensions:
            return derive_key(url, width, height)
        return derive_key(url)

    # ─────────────────────────────────────────────────────────────
    # Strategies
    # ─────────────────────────────────────────────────────────────

    async def _process_fire_and_wait(self, request: ResizeRequest) -> list[ResizeResult]:
        results: list[ResizeResult] = []
        for url in request.urls:
            key = self.key_for(url, request.width, request.height)

            if self.cache.contains(key):
                results.append(self._cache_hit(url, key))
                continue

            if is_optimistic_jpeg(url):
                # Reported before the work is done; callers re-check via the image URL
                self._detach(url, key, request.width, request.height)
                results.append(ResizeResult.succeeded(self._public_url(key)))
                continue

            results.append(
                await self._resize_to_result(
                    url, key, request.width, request.height, self._spawned_transform
                )
            )
        return results

    async def _process_bounded_wait(self, request: ResizeRequest) -> list[ResizeResult]:
        results: list[ResizeResult] = []
        for url in request.urls:
            key = self.key_for(url, request.width, request.height)

            if self.cache.contains(key):
                results.append(self._cache_hit(url, key))
                continue

            results.append(
                await self._resize_to_result(
                    url,
                    key,
                    request.width,
                    request.height,
                    self._bounded_transform,
                    follower_timeout=self.config.resize_timeout,
                )
            )
        return results

    async def _process_synchronous(self, request: ResizeRequest) -> list[ResizeResult]:
        results: list[ResizeResult] = []
        for url in request.urls:
            key = self.key_for(url, request.width, request.height)

            if self.cache.contains(key):
                results.append(self._cache_hit(url, key))
                continue

            results.append(
                await self._resize_to_result(
                    url, key, request.width, request.height, self._inline_transform
                )
            )
        return results

    # ─────────────────────────────────────────────────────────────
    # Transforms (bytes in, JPEG bytes out)
    # ─────────────────────────────────────────────────────────────

    async def _inline_transform(self, data: bytes, width: int, height: int) -> bytes:
        # One worker-thread hop for the whole chain; the caller still waits on it
        return await asyncio.to_thread(self._transform_blocking, data, width, height)

    async def _spawned_transform(self, data: bytes, width: int, height: int) -> bytes:
        image = await asyncio.to_thread(decode_image, data)
        resized = await spawn_resize(TransformTask(image=image, width=width, height=height))
        return await asyncio.to_thread(encode_image, resized, self.config.jpeg_quality)

    async def _bounded_transform(self, data: bytes, width: int, height: int) -> bytes:
        image = await asyncio.to_thread(decode_image, data)
        pending = spawn_resize(TransformTask(image=image, width=width, height=height))
        try:
            resized = await asyncio.wait_for(pending, timeout=self.config.resize_timeout)
        except asyncio.TimeoutError as e:
            raise ResizeTimeoutError(self.config.resize_timeout) from e
        return await asyncio.to_thread(encode_image, resized, self.config.jpeg_quality)

    def _transform_blocking(self, data: bytes, width: int, height: int) -> bytes:
        image = decode_image(data)
        resized = resize_image(image, width, height)
        return encode_image(resized, self.config.jpeg_quality)

    # ─────────────────────────────────────────────────────────────
    # Pipeline plumbing
    # ─────────────────────────────────────────────────────────────

    async def _fetch_and_cache(
        self,
        url: str,
        key: str,
        width: int,
        height: int,
        transform: Transform,
        follower_timeout: float | None = None,
    ) -> bytes:
        async def _compute() -> bytes:
            data = await self.fetcher.fetch(url)
            encoded = await transform(data, width, height)
            logger.info(f"Caching {key}")
            self.cache.add(key, encoded)
            return encoded

        try:
            return await self._flight.do(key, _compute, follower_timeout)
        except asyncio.TimeoutError as e:
            # Only a follower gets here; the leader's own work carries on
            raise ResizeTimeoutError(follower_timeout or 0.0) from e

    async def _resize_to_result(
        self,
        url: str,
        key: str,
        width: int,
        height: int,
        transform: Transform,
        follower_timeout: float | None = None,
    ) -> ResizeResult:
        try:
            _ = await self._fetch_and_cache(url, key, width, height, transform, follower_timeout)
        except ResizeError as e:
            logger.warning(f"Failed to resize {url}: {e}")
            return ResizeResult.failed()
        return ResizeResult.succeeded(self._public_url(key))

    def _detach(self, url: str, key: str, width: int, height: int) -> None:
        async def _run() -> None:
            try:
                _ = await self._fetch_and_cache(url, key, width, height, self._spawned_transform)
            except ResizeError as e:
                logger.error(f"Background resize of {url} failed: {e}")

        task = asyncio.create_task(_run())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _cache_hit(self, url: str, key: str) -> ResizeResult:
        logger.debug(f"Cache hit for {url}: {key}")
        return ResizeResult.succeeded(self._public_url(key), cached=True)

    def _public_url(self, key: str) -> str:
        return self.config.base_url + key


def is_optimistic_jpeg(url: str) -> bool:
    """True when the URL path ends in exactly ``.jpeg``.

    The query string and fragment are ignored, so ``a.jpeg?w=1`` qualifies;
    the match is case-sensitive.
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        # Unparseable; left to the fetcher to report as a failure
        return False
    return path.endswith(OPTIMISTIC_SUFFIX)
