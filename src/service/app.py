"""FastAPI service for palette extraction."""
from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request

from . import __version__
from .colors import copy_all_text, rgb_to_hex, status_message
from .config import (
    DEFAULT_K,
    K_MAX,
    K_MIN,
    LOG_LEVEL,
    MAX_ITER_LIMIT,
    MAX_UPLOAD_BYTES,
    extractor_config,
)
from .schemas import PaletteColor, PaletteResponse, PixelPayload, Summary
from src.pipeline import ImageDecodeError, PaletteExtractor, PaletteResult, SamplingError

logger = logging.getLogger("palette.service")


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    configure_logging()
    yield


app = FastAPI(title="Palette Extractor", version=__version__, lifespan=lifespan)


def _validate_k(k: Optional[int]) -> int:
    value = DEFAULT_K if k is None else k
    if not K_MIN <= value <= K_MAX:
        raise HTTPException(status_code=422, detail=f"k must be between {K_MIN} and {K_MAX}")
    return value


def _create_extractor(k: Optional[int], max_iter: Optional[int], sample_step: Optional[int]) -> PaletteExtractor:
    config = extractor_config(k=_validate_k(k), max_iter=max_iter, sample_step=sample_step)
    return PaletteExtractor(config, logger)


def _to_response(result: PaletteResult) -> PaletteResponse:
    colors = [
        PaletteColor(rgb=list(entry.rgb), hex=rgb_to_hex(entry.rgb), count=entry.count)
        for entry in result.entries
    ]
    return PaletteResponse(
        colors=colors,
        hex_all=copy_all_text(result.colors),
        message=status_message(result.colors),
        summary=Summary(**result.summary),
    )


async def _run(label: str, func, *args) -> PaletteResponse:
    started = time.perf_counter()
    try:
        result = await asyncio.to_thread(func, *args)
    except ImageDecodeError as error:
        logger.warning("%s: could not decode image: %s", label, error)
        raise HTTPException(status_code=422, detail="Could not load image") from error
    except SamplingError as error:
        logger.warning("%s: invalid pixel buffer: %s", label, error)
        raise HTTPException(status_code=422, detail=str(error)) from error
    except Exception as error:  # pragma: no cover - unexpected failure
        logger.error("%s failed: %s", label, error)
        raise HTTPException(status_code=500, detail="Extraction failed") from error
    logger.info(
        "%s finished in %.2fs (colors=%d)", label, time.perf_counter() - started, len(result.entries)
    )
    return _to_response(result)


@app.get("/health")
def health():
    return {"status": "ok", "service": "palette-extractor", "version": __version__}


@app.post("/palette/image", response_model=PaletteResponse)
async def palette_from_image(
    request: Request,
    k: Optional[int] = Query(None),
    max_iter: Optional[int] = Query(None, ge=0, le=MAX_ITER_LIMIT),
    sample_step: Optional[int] = Query(None, ge=1),
) -> PaletteResponse:
    """Extract a palette from an encoded image sent as the request body."""

    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail="Choose an image first")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"Image exceeds {MAX_UPLOAD_BYTES} bytes")
    extractor = _create_extractor(k, max_iter, sample_step)
    return await _run("Image extraction", extractor.extract_image, data)


@app.post("/palette/pixels", response_model=PaletteResponse)
async def palette_from_pixels(payload: PixelPayload) -> PaletteResponse:
    """Extract a palette from an already decoded RGBA buffer."""

    expected = payload.width * payload.height * 4
    if expected > MAX_UPLOAD_BYTES or len(payload.data) > (MAX_UPLOAD_BYTES + 2) // 3 * 4:
        raise HTTPException(status_code=413, detail=f"Pixel buffer exceeds {MAX_UPLOAD_BYTES} bytes")
    try:
        raw = base64.b64decode(payload.data, validate=True)
    except (binascii.Error, ValueError) as error:
        raise HTTPException(status_code=422, detail="Pixel data is not valid base64") from error
    if len(raw) != expected:
        raise HTTPException(
            status_code=422,
            detail=f"Expected {expected} bytes for {payload.width}x{payload.height} RGBA, got {len(raw)}",
        )
    extractor = _create_extractor(payload.k, payload.max_iter, payload.sample_step)
    return await _run("Pixel extraction", extractor.extract_pixels, raw, payload.width, payload.height)
