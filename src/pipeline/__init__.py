"""Palette extraction pipeline components."""

from .clusterer import Clusterer, ClustererConfig, KMeansClusterer, lloyd_step
from .extractor import ExtractorConfig, PaletteExtractor, extract_palette
from .imaging import ImageDecodeError, decode_image, downscale, fit_dimensions
from .sampler import PixelSampler, Sampler, SamplerConfig, SamplingError, sample_pixels
from .types import ClusterResult, PaletteEntry, PaletteResult

__all__ = [
    "Clusterer",
    "ClustererConfig",
    "KMeansClusterer",
    "lloyd_step",
    "ExtractorConfig",
    "PaletteExtractor",
    "extract_palette",
    "ImageDecodeError",
    "decode_image",
    "downscale",
    "fit_dimensions",
    "PixelSampler",
    "Sampler",
    "SamplerConfig",
    "SamplingError",
    "sample_pixels",
    "ClusterResult",
    "PaletteEntry",
    "PaletteResult",
]
