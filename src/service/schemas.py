"""Pydantic models for the palette service."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .config import MAX_ITER_LIMIT


class PixelPayload(BaseModel):
    """Raw RGBA pixels supplied by a client that decoded the image itself."""

    width: int = Field(..., ge=1, description="Image width in pixels")
    height: int = Field(..., ge=1, description="Image height in pixels")
    data: str = Field(..., description="Base64 encoded RGBA bytes, row-major, width*height*4 long")
    k: Optional[int] = Field(None, description="Number of palette colors")
    max_iter: Optional[int] = Field(None, ge=0, le=MAX_ITER_LIMIT, description="Maximum k-means iterations")
    sample_step: Optional[int] = Field(None, ge=1, description="Take every n-th pixel")


class PaletteColor(BaseModel):
    rgb: List[int] = Field(..., min_length=3, max_length=3)
    hex: str
    count: int = Field(..., ge=0, description="Samples assigned to this color")


class Summary(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None
    pixels: int = 0
    samples: int = 0
    k: int = 0
    iterations: int = 0
    converged: bool = False
    silhouette: Optional[float] = None
    elapsed_ms: Optional[float] = None


class PaletteResponse(BaseModel):
    colors: List[PaletteColor] = Field(default_factory=list)
    hex_all: str = Field("", description="Space separated hex codes in palette order")
    message: str
    summary: Summary
