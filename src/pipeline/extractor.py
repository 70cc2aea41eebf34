"""High-level palette extraction orchestrator."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import numpy as np

from .clusterer import ClustererConfig, KMeansClusterer
from .imaging import MAX_DIMENSION, decode_image, downscale, load_image
from .sampler import PixelSampler, SamplerConfig, as_pixel_array
from .types import RGB, PaletteResult


@dataclass
class ExtractorConfig:
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    cluster: ClustererConfig = field(default_factory=ClustererConfig)
    max_dimension: int = MAX_DIMENSION
    compute_silhouette: bool = True


class PaletteExtractor:
    """Coordinates decoding, sampling and clustering."""

    def __init__(
        self,
        config: ExtractorConfig | None = None,
        logger: logging.Logger | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._config = config or ExtractorConfig()
        self._logger = logger or logging.getLogger(__name__)
        self._sampler = PixelSampler(self._config.sampler, self._logger)
        self._clusterer = KMeansClusterer(self._config.cluster, rng=rng, logger=self._logger)

    @property
    def config(self) -> ExtractorConfig:
        return self._config

    def extract_pixels(self, pixels, width: int | None = None, height: int | None = None) -> PaletteResult:
        started = time.perf_counter()
        rgba = as_pixel_array(pixels)
        samples = self._sampler.sample(rgba)
        result = self._clusterer.cluster(samples)

        silhouette = None
        if self._config.compute_silhouette and result.entries:
            silhouette = self._clusterer.silhouette(samples, result)

        summary = {
            "width": width,
            "height": height,
            "pixels": int(rgba.shape[0]),
            "samples": int(samples.shape[0]),
            "k": len(result.entries),
            "iterations": result.iterations,
            "converged": result.converged,
            "silhouette": silhouette,
            "elapsed_ms": round((time.perf_counter() - started) * 1000.0, 3),
        }
        if not result.entries:
            self._logger.info("No opaque samples in %d pixels; palette is empty", rgba.shape[0])
        else:
            self._logger.info(
                "Extracted %d colors from %d samples in %d iterations",
                len(result.entries),
                samples.shape[0],
                result.iterations,
            )
        return PaletteResult(entries=result.entries, summary=summary)

    def extract_array(self, image: np.ndarray) -> PaletteResult:
        """Extract from an ``(H, W, 4)`` RGBA array, downscaling it first."""
        scaled = downscale(image, self._config.max_dimension)
        height, width = scaled.shape[:2]
        self._logger.debug(
            "Downscaled %dx%d to %dx%d", image.shape[1], image.shape[0], width, height
        )
        return self.extract_pixels(scaled, width=width, height=height)

    def extract_image(self, data: bytes) -> PaletteResult:
        return self.extract_array(decode_image(data))

    def extract_file(self, path: Path | str) -> PaletteResult:
        return self.extract_array(load_image(path))


def extract_palette(
    pixels,
    k: int,
    max_iter: int = 10,
    sample_step: int = 4,
    rng: Optional[np.random.Generator] = None,
) -> List[RGB]:
    """Return ``k`` colors ranked by population (empty if nothing is opaque)."""
    config = ExtractorConfig(
        sampler=SamplerConfig(sample_step=sample_step),
        cluster=ClustererConfig(k=k, max_iter=max_iter),
        compute_silhouette=False,
    )
    return PaletteExtractor(config, rng=rng).extract_pixels(pixels).colors


__all__ = ["ExtractorConfig", "PaletteExtractor", "extract_palette"]
