"""cl_resizer - fetch, resize and cache remote images."""

from .common.config import ResizerConfig
from .common.errors import (
    DecodeError,
    EncodeError,
    FetchError,
    FetchSizeExceededError,
    ResizeError,
    ResizeTimeoutError,
)
from .common.identifier import derive_id, derive_key
from .common.image_cache import ImageCache, LRUImageCache
from .common.schemas import ResizeRequest, ResizeResult, ResultStatus, Strategy
from .dispatcher import ResizeDispatcher
from .server import create_app, create_resize_router
from .utils.fetcher import Fetcher
from .utils.singleflight import SingleFlight

__version__ = "0.1.0"

__all__ = [
    "ResizeRequest",
    "ResizeResult",
    "ResultStatus",
    "Strategy",
    "ResizerConfig",
    "ImageCache",
    "LRUImageCache",
    "ResizeDispatcher",
    "Fetcher",
    "SingleFlight",
    "derive_id",
    "derive_key",
    "ResizeError",
    "FetchError",
    "FetchSizeExceededError",
    "DecodeError",
    "EncodeError",
    "ResizeTimeoutError",
    "create_app",
    "create_resize_router",
    "__version__",
]
