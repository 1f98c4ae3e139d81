"""Error taxonomy for the resize pipeline.

Every error raised by a pipeline stage derives from ``ResizeError``. The
dispatcher collapses all of them into a ``failure`` result, so the attributes
here only serve logging and tests.
"""


class ResizeError(Exception):
    """Base class for per-URL pipeline failures."""


class FetchError(ResizeError):
    def __init__(self, url: str, status: int | None = None, reason: str | None = None):
        self.url: str = url
        self.status: int | None = status
        if reason is None:
            reason = f"non-200 status: {status}" if status is not None else "fetch failed"
        super().__init__(f"{reason} ({url})")


class FetchSizeExceededError(FetchError):
    def __init__(self, url: str, limit: int):
        self.limit: int = limit
        super().__init__(url, reason=f"response body exceeds {limit} bytes")


class DecodeError(ResizeError):
    """Bytes are not a decodable JPEG image."""


class EncodeError(ResizeError):
    """Resized image could not be encoded."""


class ResizeTimeoutError(ResizeError):
    def __init__(self, timeout: float):
        self.timeout: float = timeout
        super().__init__(f"resize did not finish within {timeout:g}s")
