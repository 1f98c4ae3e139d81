"""Pure JPEG decode / resize / encode logic.

Framework-agnostic: operates on bytes and ``PIL.Image`` objects only. The
one concurrency helper, ``spawn_resize``, runs a resize on a worker thread
so the event loop is never blocked by it.
"""

import asyncio
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ..common.errors import DecodeError, EncodeError

JPEG_FORMAT = "JPEG"
DEFAULT_JPEG_QUALITY = 75


@dataclass
class TransformTask:
    """A decoded image and the size it should be rescaled to."""

    image: Image.Image
    width: int
    height: int


def decode_image(data: bytes) -> Image.Image:
    """Decode JPEG bytes into a fully loaded image.

    Raises:
        DecodeError: If the bytes are not a readable JPEG
    """
    try:
        img = Image.open(BytesIO(data), formats=[JPEG_FORMAT])
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"failed to jpeg decode: {e}") from e
    return img


def target_size(original: tuple[int, int], width: int, height: int) -> tuple[int, int]:
    """Compute output dimensions for a resize.

    Args:
        original: Source (width, height)
        width: Requested width, 0 = derive from aspect ratio
        height: Requested height, 0 = derive from aspect ratio

    Returns:
        (width, height) of the output image
    """
    original_width, original_height = original

    if width and height:
        return width, height
    if not width and not height:
        return original_width, original_height
    if not width:
        w = int(original_width * height / original_height + 0.5)
        return max(1, w), height

    h = int(original_height * width / original_width + 0.5)
    return width, max(1, h)


def resize_image(image: Image.Image, width: int, height: int) -> Image.Image:
    """Rescale with a 3-lobe Lanczos filter.

    Both dimensions nonzero scales to exactly that size (aspect ratio not
    preserved); a zero dimension is derived from the source aspect ratio.
    """
    size = target_size(image.size, width, height)
    return image.resize(size, Image.Resampling.LANCZOS)


def encode_image(image: Image.Image, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """Encode an image as JPEG bytes.

    Raises:
        EncodeError: If Pillow cannot write the image
    """
    # JPEG only stores L, RGB and CMYK
    if image.mode not in ("L", "RGB", "CMYK"):
        image = image.convert("RGB")

    buffer = BytesIO()
    try:
        image.save(buffer, format=JPEG_FORMAT, quality=quality)
    except (OSError, ValueError) as e:
        raise EncodeError(f"failed to jpeg encode resized image: {e}") from e
    return buffer.getvalue()


async def spawn_resize(task: TransformTask) -> Image.Image:
    """Resize on a worker thread and return its single result.

    If the awaiting side gives up (e.g. ``asyncio.wait_for`` times out) the
    thread runs to completion and its result is dropped.
    """
    return await asyncio.to_thread(resize_image, task.image, task.width, task.height)
