"""Pydantic schemas for resize requests and results."""

from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

# ─────────────────────────────────────────────────────────────
# Strategy selector
# ─────────────────────────────────────────────────────────────


class Strategy(str, Enum):
    FIRE_AND_WAIT = "true"
    BOUNDED_WAIT = "false"
    SYNCHRONOUS = "default"

    @classmethod
    def from_selector(cls, selector: "str | Strategy | None") -> "Strategy":
        """Map a raw selector to a strategy.

        Only the exact literals ``"true"`` and ``"false"`` are recognized;
        anything else (including ``None`` and ``"True"``) is synchronous.
        """
        if isinstance(selector, Strategy):
            return selector
        if selector == cls.FIRE_AND_WAIT.value:
            return cls.FIRE_AND_WAIT
        if selector == cls.BOUNDED_WAIT.value:
            return cls.BOUNDED_WAIT
        return cls.SYNCHRONOUS


# ─────────────────────────────────────────────────────────────
# Request
# ─────────────────────────────────────────────────────────────


class ResizeRequest(BaseModel):
    """Batch of source URLs to resize to one target size.

    Attributes:
        urls: Source image URLs, processed in order (duplicates allowed)
        width: Target width in pixels (0 = derive from aspect ratio)
        height: Target height in pixels (0 = derive from aspect ratio)
        strategy: Raw strategy selector ("true", "false", anything else)
    """

    urls: list[str] = Field(default_factory=list, description="Source image URLs")
    width: int = Field(default=0, ge=0, description="Target width (0 = keep aspect)")
    height: int = Field(default=0, ge=0, description="Target height (0 = keep aspect)")
    strategy: str = Field(default="", description="Concurrency strategy selector")


# ─────────────────────────────────────────────────────────────
# Result
# ─────────────────────────────────────────────────────────────


class ResultStatus(str, Enum):
    success = "success"
    failure = "failure"


class ResizeResult(BaseModel):
    """Outcome for one source URL.

    ``url`` is only meaningful when ``result`` is ``success``.
    """

    url: str = ""
    result: ResultStatus
    cached: bool = False

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    @classmethod
    def succeeded(cls, url: str, cached: bool = False) -> "ResizeResult":
        return cls(url=url, result=ResultStatus.success, cached=cached)

    @classmethod
    def failed(cls) -> "ResizeResult":
        return cls(result=ResultStatus.failure)
