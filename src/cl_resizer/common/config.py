"""Runtime configuration for the resize service."""

import os
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, TypeAdapter, field_validator

MIB = 1024 * 1024


class ResizerConfig(BaseModel):
    """Settings shared by the dispatcher, fetcher and HTTP layer.

    Attributes:
        base_url: Scheme and host:port prepended to cache keys in results
        cache_size: Maximum number of cached images (LRU)
        max_fetch_bytes: Hard ceiling on a fetched response body
        resize_timeout: Seconds the bounded-wait strategy waits for a resize
        fetch_timeout: HTTP client timeout in seconds
        key_includes_dimensions: Fold width/height into the cache key
        jpeg_quality: Quality used when encoding resized images
    """

    base_url: str = "http://localhost:8080"
    cache_size: int = Field(default=1024, ge=1)
    max_fetch_bytes: int = Field(default=15 * MIB, gt=0)
    resize_timeout: float = Field(default=3.0, gt=0)
    fetch_timeout: float = Field(default=30.0, gt=0)
    key_includes_dimensions: bool = True
    jpeg_quality: int = Field(default=75, ge=1, le=95)

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_env(cls) -> "ResizerConfig":
        """Build a config from ``RESIZER_*`` environment variables.

        Unset variables keep their defaults; invalid values raise
        ``pydantic.ValidationError``.
        """
        env_map = {
            "RESIZER_BASE_URL": "base_url",
            "RESIZER_CACHE_SIZE": "cache_size",
            "RESIZER_RESIZE_TIMEOUT": "resize_timeout",
            "RESIZER_FETCH_TIMEOUT": "fetch_timeout",
            "RESIZER_KEY_INCLUDES_DIMENSIONS": "key_includes_dimensions",
            "RESIZER_JPEG_QUALITY": "jpeg_quality",
        }
        values: dict[str, object] = {
            field: os.environ[var] for var, field in env_map.items() if var in os.environ
        }

        max_fetch_mb = os.getenv("RESIZER_MAX_FETCH_MB")
        if max_fetch_mb is not None:
            values["max_fetch_bytes"] = TypeAdapter(PositiveInt).validate_python(max_fetch_mb) * MIB

        return cls.model_validate(values)
