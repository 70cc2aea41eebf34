"""Pixel sampling for palette extraction."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

CHANNELS = 4
ALPHA_THRESHOLD = 10


class SamplingError(ValueError):
    """Raised when the input is not a usable RGBA pixel buffer."""


@dataclass
class SamplerConfig:
    sample_step: int = 4
    alpha_threshold: int = ALPHA_THRESHOLD


def as_pixel_array(pixels) -> np.ndarray:
    """Return ``pixels`` as an ``(N, 4)`` uint8 view/copy."""
    if isinstance(pixels, np.ndarray):
        flat = pixels.reshape(-1)
    elif isinstance(pixels, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(pixels, dtype=np.uint8)
    else:
        flat = np.asarray(list(pixels)).reshape(-1)
    if flat.size % CHANNELS:
        raise SamplingError(f"Pixel buffer length {flat.size} is not a multiple of {CHANNELS}")
    if flat.size and (flat.min() < 0 or flat.max() > 255):
        raise SamplingError("Pixel buffer values must be within 0..255")
    return flat.astype(np.uint8, copy=False).reshape(-1, CHANNELS)


class Sampler:
    """Abstract sampler interface."""

    def sample(self, pixels) -> np.ndarray:
        raise NotImplementedError


class PixelSampler(Sampler):
    """Takes every ``sample_step``-th pixel and drops near-transparent ones."""

    def __init__(self, config: SamplerConfig | None = None, logger: Optional[logging.Logger] = None) -> None:
        self._config = config or SamplerConfig()
        self._logger = logger or logging.getLogger(__name__)
        if self._config.sample_step < 1:
            raise SamplingError(f"sample_step must be >= 1, got {self._config.sample_step}")

    def sample(self, pixels) -> np.ndarray:  # noqa: D401
        rgba = as_pixel_array(pixels)
        strided = rgba[:: self._config.sample_step]
        opaque = strided[strided[:, 3] >= self._config.alpha_threshold]
        samples = np.ascontiguousarray(opaque[:, :3])
        self._logger.debug(
            "Sampled %d of %d pixels (step=%d)", samples.shape[0], rgba.shape[0], self._config.sample_step
        )
        return samples


def sample_pixels(pixels, sample_step: int = 4) -> np.ndarray:
    return PixelSampler(SamplerConfig(sample_step=sample_step)).sample(pixels)


__all__ = [
    "ALPHA_THRESHOLD",
    "PixelSampler",
    "Sampler",
    "SamplerConfig",
    "SamplingError",
    "as_pixel_array",
    "sample_pixels",
]
