"""HTTP surface - FastAPI router and application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

import httpx
from fastapi import APIRouter, FastAPI, HTTPException, Query
from fastapi.responses import Response
from loguru import logger

from .common.config import ResizerConfig
from .common.identifier import KEY_PREFIX, KEY_SUFFIX
from .common.image_cache import LRUImageCache
from .common.schemas import ResizeRequest, ResizeResult
from .dispatcher import ResizeDispatcher
from .utils.fetcher import Fetcher


def create_resize_router(dispatcher: ResizeDispatcher, cache: LRUImageCache) -> APIRouter:
    """Create router with injected dependencies.

    Args:
        dispatcher: Dispatcher that processes resize batches
        cache: The same cache the dispatcher writes to, used to serve images

    Returns:
        Configured APIRouter with resize, image and stats endpoints
    """
    router = APIRouter()

    @router.post("/v1/resize", response_model=list[ResizeResult])
    async def resize_images(
        resize_request: ResizeRequest,
        selector: Annotated[
            str | None,
            Query(alias="async", description="Strategy selector: 'true', 'false' or other"),
        ] = None,
    ) -> list[ResizeResult]:
        """Resize a batch of source URLs.

        Per-URL failures are reported in the body; the batch itself always
        succeeds.
        """
        return await dispatcher.process_resizes(resize_request, selector)

    @router.get(KEY_PREFIX + "{image_id}" + KEY_SUFFIX)
    async def get_image(image_id: str) -> Response:
        """Serve a cached resized image."""
        data = cache.get(KEY_PREFIX + image_id + KEY_SUFFIX)
        if data is None:
            raise HTTPException(status_code=404, detail="Image not found")
        return Response(content=data, media_type="image/jpeg")

    @router.get("/v1/cache/stats")
    async def cache_stats() -> dict[str, int]:
        return cache.stats()

    # Mark functions as used (accessed via FastAPI decorator)
    _ = (resize_images, get_image, cache_stats)

    return router


def create_app(
    config: ResizerConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the resize service application.

    The cache is created once here and lives as long as the app. The HTTP
    client used for fetching is closed on shutdown, after outstanding
    background resizes have finished.

    Args:
        config: Optional config. Defaults to ``ResizerConfig()``.
        transport: Optional httpx transport for the fetch client

    Example:
        app = create_app(ResizerConfig.from_env())
        # uvicorn.run(app, port=8080)
    """
    config = config if config is not None else ResizerConfig()
    cache = LRUImageCache(capacity=config.cache_size)
    client = httpx.AsyncClient(
        timeout=config.fetch_timeout,
        follow_redirects=True,
        transport=transport,
    )
    dispatcher = ResizeDispatcher(
        cache,
        Fetcher(client, max_bytes=config.max_fetch_bytes),
        config,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            f"Resize service starting: base_url={config.base_url}, "
            + f"cache_size={config.cache_size}"
        )
        try:
            yield
        finally:
            await dispatcher.drain()
            await client.aclose()
            logger.info("Resize service stopped")

    app = FastAPI(title="cl_resizer", lifespan=lifespan)
    app.include_router(create_resize_router(dispatcher, cache))
    app.state.dispatcher = dispatcher
    app.state.cache = cache
    return app
