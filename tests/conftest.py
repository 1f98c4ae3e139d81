"""Test configuration and fixtures for cl_resizer.

This module provides:
- Synthetic JPEG generation with PIL
- A fake remote image host built on ``httpx.MockTransport``
- Function-scoped config, cache, fetcher and dispatcher fixtures
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from io import BytesIO

import httpx
import pytest
import pytest_asyncio
from PIL import Image, ImageDraw

from cl_resizer.common.config import ResizerConfig
from cl_resizer.common.image_cache import LRUImageCache
from cl_resizer.dispatcher import ResizeDispatcher
from cl_resizer.utils.fetcher import Fetcher

BASE_URL = "http://resizer.test:8080"

JpegFactory = Callable[..., bytes]


# ============================================================================
# Image Fixtures
# ============================================================================


def jpeg_bytes(width: int, height: int, color: tuple[int, int, int] = (73, 109, 137)) -> bytes:
    """Render a simple JPEG with a grid and a circle."""
    img = Image.new("RGB", (width, height), color=color)
    draw = ImageDraw.Draw(img)

    for x in range(0, width, 25):
        draw.line([(x, 0), (x, height)], fill=(255, 255, 255), width=1)
    for y in range(0, height, 25):
        draw.line([(0, y), (width, y)], fill=(255, 255, 255), width=1)
    draw.ellipse([width // 4, height // 4, 3 * width // 4, 3 * height // 4], fill=(200, 100, 100))

    buffer = BytesIO()
    img.save(buffer, "JPEG", quality=85)
    return buffer.getvalue()


@pytest.fixture
def make_jpeg() -> JpegFactory:
    """Provide the synthetic JPEG factory."""
    return jpeg_bytes


# ============================================================================
# Fake Remote Host
# ============================================================================


class FakeRemote:
    """In-memory image host; unknown URLs answer 404."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, bytes]] = {}
        self.calls: list[str] = []
        self.delay: float = 0.0

    def serve(self, url: str, body: bytes, status: int = 200) -> None:
        self.routes[url] = (status, body)

    def call_count(self, url: str) -> int:
        return self.calls.count(url)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        status, body = self.routes.get(url, (404, b"not found"))
        return httpx.Response(status, content=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def remote() -> FakeRemote:
    """Provide an empty fake remote host."""
    return FakeRemote()


# ============================================================================
# Pipeline Fixtures
# ============================================================================


@pytest.fixture
def config() -> ResizerConfig:
    """Provide config with a recognizable base URL and a short timeout."""
    return ResizerConfig(base_url=BASE_URL, resize_timeout=1.0)


@pytest.fixture
def cache() -> LRUImageCache:
    """Provide a small LRU cache."""
    return LRUImageCache(capacity=16)


@pytest_asyncio.fixture
async def http_client(remote: FakeRemote) -> AsyncIterator[httpx.AsyncClient]:
    """Provide an async client wired to the fake remote."""
    async with httpx.AsyncClient(transport=remote.transport) as client:
        yield client


@pytest.fixture
def fetcher(http_client: httpx.AsyncClient) -> Fetcher:
    """Provide a Fetcher with the default ceiling."""
    return Fetcher(http_client)


@pytest_asyncio.fixture
async def dispatcher(
    cache: LRUImageCache, fetcher: Fetcher, config: ResizerConfig
) -> AsyncIterator[ResizeDispatcher]:
    """Provide a dispatcher; outstanding background work is drained on teardown."""
    dispatcher = ResizeDispatcher(cache, fetcher, config)
    yield dispatcher
    await dispatcher.drain()
