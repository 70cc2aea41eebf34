"""Image decoding and downscaling ahead of palette extraction."""
from __future__ import annotations

import math
from pathlib import Path
from typing import Tuple

import cv2
import numpy as np

MAX_DIMENSION = 320


class ImageDecodeError(RuntimeError):
    """Raised when image bytes cannot be decoded."""


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes into an ``(H, W, 4)`` RGBA uint8 array."""
    if not data:
        raise ImageDecodeError("Image data is empty")
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ImageDecodeError("Unable to decode image data")
    return to_rgba(image)


def to_rgba(image: np.ndarray) -> np.ndarray:
    if image.dtype != np.uint8:
        # 16-bit PNG/TIFF
        image = (image / 257).astype(np.uint8)
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    raise ImageDecodeError(f"Unsupported channel count: {channels}")


def load_image(path: Path | str) -> np.ndarray:
    source = Path(path)
    try:
        data = source.read_bytes()
    except OSError as error:
        raise ImageDecodeError(f"Unable to read image {source}: {error}") from error
    return decode_image(data)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fit_dimensions(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> Tuple[int, int]:
    """Scale ``(width, height)`` so the longer side is at most ``max_dimension``.

    Aspect ratio is preserved, both sides are rounded and never drop below
    one pixel. Smaller images keep their size.
    """
    longest = max(width, height, 1)
    scale = min(1.0, max_dimension / longest)
    return max(1, _round_half_up(width * scale)), max(1, _round_half_up(height * scale))


def downscale(image: np.ndarray, max_dimension: int = MAX_DIMENSION) -> np.ndarray:
    height, width = image.shape[:2]
    target_w, target_h = fit_dimensions(width, height, max_dimension)
    if (target_w, target_h) == (width, height):
        return image
    return cv2.resize(image, (target_w, target_h), interpolation=cv2.INTER_AREA)


__all__ = [
    "ImageDecodeError",
    "MAX_DIMENSION",
    "decode_image",
    "downscale",
    "fit_dimensions",
    "load_image",
    "to_rgba",
]
