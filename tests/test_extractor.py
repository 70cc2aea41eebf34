from __future__ import annotations

import cv2
import numpy as np

from src.pipeline.clusterer import ClustererConfig
from src.pipeline.extractor import ExtractorConfig, PaletteExtractor, extract_palette
from src.pipeline.sampler import SamplerConfig

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _buffer(pixels) -> bytes:
    return bytes(channel for pixel in pixels for channel in pixel)


def _three_quarters_red_png(width: int = 64, height: int = 32) -> bytes:
    bgr = np.zeros((height, width, 3), dtype=np.uint8)
    bgr[:, : width * 3 // 4] = (0, 0, 255)
    bgr[:, width * 3 // 4 :] = (255, 0, 0)
    ok, encoded = cv2.imencode(".png", bgr)
    assert ok
    return encoded.tobytes()


def test_two_colors_split_evenly() -> None:
    pixels = _buffer([RED, RED, BLUE, BLUE])
    for seed in range(10):
        colors = extract_palette(pixels, k=2, max_iter=20, sample_step=1, rng=np.random.default_rng(seed))
        assert sorted(colors) == [(0, 0, 255), (255, 0, 0)]


def test_single_color_with_one_cluster() -> None:
    pixels = _buffer([(10, 20, 30, 255)] * 3)
    extractor = PaletteExtractor(
        ExtractorConfig(sampler=SamplerConfig(sample_step=1), cluster=ClustererConfig(k=1))
    )
    result = extractor.extract_pixels(pixels)

    assert result.colors == [(10, 20, 30)]
    assert result.entries[0].count == 3
    assert result.summary["silhouette"] is None


def test_fully_transparent_buffer_yields_empty_palette() -> None:
    pixels = _buffer([(120, 40, 200, 0)] * 12)
    for k in (1, 3, 8):
        assert extract_palette(pixels, k=k, sample_step=1) == []

    result = PaletteExtractor().extract_pixels(pixels)
    assert result.entries == []
    assert result.summary["samples"] == 0
    assert result.summary["k"] == 0


def test_empty_buffer_and_zero_k() -> None:
    assert extract_palette(b"", k=5) == []
    assert extract_palette(_buffer([RED] * 8), k=0, sample_step=1) == []


def test_extract_image_ranks_by_population() -> None:
    config = ExtractorConfig(cluster=ClustererConfig(k=2, random_state=11))
    result = PaletteExtractor(config).extract_image(_three_quarters_red_png())

    assert result.colors == [(255, 0, 0), (0, 0, 255)]
    # 16 samples per row with the default step of 4: 12 red, 4 blue
    assert [entry.count for entry in result.entries] == [12 * 32, 4 * 32]
    assert result.summary["width"] == 64
    assert result.summary["height"] == 32
    assert result.summary["pixels"] == 64 * 32
    assert result.summary["samples"] == 16 * 32
    assert result.summary["silhouette"] is not None


def test_extract_file_downscales_large_images(tmp_path) -> None:
    path = tmp_path / "wide.png"
    bgr = np.full((100, 800, 3), (0, 255, 0), dtype=np.uint8)
    assert cv2.imwrite(str(path), bgr)

    result = PaletteExtractor(ExtractorConfig(cluster=ClustererConfig(k=3))).extract_file(path)

    assert result.summary["width"] == 320
    assert result.summary["height"] == 40
    assert len(result.colors) == 3
    assert result.colors[0] == (0, 255, 0)
