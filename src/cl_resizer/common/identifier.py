"""Deterministic cache keys for source URLs."""

import base64
import hashlib

KEY_PREFIX = "/v1/image/"
KEY_SUFFIX = ".jpeg"


def derive_id(url: str, width: int | None = None, height: int | None = None) -> str:
    """Return the URL-safe base64 SHA-256 digest identifying a source.

    With no dimensions the digest covers the URL bytes alone. When either
    dimension is given, ``"<url>|<width>x<height>"`` is hashed instead so that
    different target sizes of one source get different ids.
    """
    material = url
    if width is not None or height is not None:
        material = f"{url}|{width or 0}x{height or 0}"
    digest = hashlib.sha256(material.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii")


def derive_key(url: str, width: int | None = None, height: int | None = None) -> str:
    """Return the cache key path, e.g. ``/v1/image/<id>.jpeg``."""
    return f"{KEY_PREFIX}{derive_id(url, width, height)}{KEY_SUFFIX}"
