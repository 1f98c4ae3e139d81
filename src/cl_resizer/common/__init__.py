"""Common module - schemas, errors, config, cache and key derivation."""

from .config import ResizerConfig
from .identifier import derive_id, derive_key
from .image_cache import ImageCache, LRUImageCache
from .schemas import ResizeRequest, ResizeResult, ResultStatus, Strategy

__all__ = [
    "ResizeRequest",
    "ResizeResult",
    "ResultStatus",
    "Strategy",
    "ResizerConfig",
    "ImageCache",
    "LRUImageCache",
    "derive_id",
    "derive_key",
]
