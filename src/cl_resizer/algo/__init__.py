"""Image decode, resize and encode algorithms."""

from .image_resize import (
    TransformTask,
    decode_image,
    encode_image,
    resize_image,
    spawn_resize,
    target_size,
)

__all__ = [
    "TransformTask",
    "decode_image",
    "encode_image",
    "resize_image",
    "spawn_resize",
    "target_size",
]
