"""Hex formatting helpers for palette colors."""
from __future__ import annotations

from typing import Iterable, Sequence, Tuple


def rgb_to_hex(rgb: Sequence[int]) -> str:
    r, g, b = (int(value) for value in rgb[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Unsupported hex color: {value!r}")
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError:
        raise ValueError(f"Unsupported hex color: {value!r}")


def copy_all_text(colors: Iterable[Sequence[int]]) -> str:
    """Space separated hex codes, in palette order."""
    return " ".join(rgb_to_hex(rgb) for rgb in colors)


def status_message(colors: Sequence[Sequence[int]]) -> str:
    return f"Found {len(colors)} colors"


__all__ = ["copy_all_text", "hex_to_rgb", "rgb_to_hex", "status_message"]
