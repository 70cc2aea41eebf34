"""Runtime configuration for the palette service."""
from __future__ import annotations

import os
from typing import Optional

from src.pipeline import ClustererConfig, ExtractorConfig, SamplerConfig


def _optional_int(name: str) -> Optional[int]:
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw else None


DEFAULT_K = int(os.environ.get("PALETTE_DEFAULT_K", "5"))
K_MIN = int(os.environ.get("PALETTE_K_MIN", "3"))
K_MAX = int(os.environ.get("PALETTE_K_MAX", "8"))
MAX_ITER = int(os.environ.get("PALETTE_MAX_ITER", "10"))
MAX_ITER_LIMIT = int(os.environ.get("PALETTE_MAX_ITER_LIMIT", "100"))
SAMPLE_STEP = int(os.environ.get("PALETTE_SAMPLE_STEP", "4"))
MAX_DIMENSION = int(os.environ.get("PALETTE_MAX_DIMENSION", "320"))
MAX_UPLOAD_BYTES = int(os.environ.get("PALETTE_MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))
LOG_LEVEL = os.environ.get("PALETTE_LOG_LEVEL", "INFO").upper()
SEED = _optional_int("PALETTE_SEED")


def extractor_config(
    k: int | None = None,
    max_iter: int | None = None,
    sample_step: int | None = None,
) -> ExtractorConfig:
    return ExtractorConfig(
        sampler=SamplerConfig(sample_step=sample_step if sample_step is not None else SAMPLE_STEP),
        cluster=ClustererConfig(
            k=k if k is not None else DEFAULT_K,
            max_iter=max_iter if max_iter is not None else MAX_ITER,
            random_state=SEED,
        ),
        max_dimension=MAX_DIMENSION,
    )


__all__ = [
    "DEFAULT_K",
    "K_MIN",
    "K_MAX",
    "MAX_ITER",
    "MAX_ITER_LIMIT",
    "SAMPLE_STEP",
    "MAX_DIMENSION",
    "MAX_UPLOAD_BYTES",
    "LOG_LEVEL",
    "SEED",
    "extractor_config",
]
