"""Typed primitives for the palette extraction pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class PaletteEntry:
    """A palette color paired with its final cluster population."""

    r: int
    g: int
    b: int
    count: int = 0

    @property
    def rgb(self) -> RGB:
        return (self.r, self.g, self.b)


@dataclass
class ClusterResult:
    """Ranked output of a clustering run.

    ``labels`` maps each sample to the index of its palette entry (after
    ranking), taken from the last completed assignment step.
    """

    entries: List[PaletteEntry]
    iterations: int = 0
    converged: bool = False
    labels: Optional[np.ndarray] = None

    @property
    def colors(self) -> List[RGB]:
        return [entry.rgb for entry in self.entries]

    @property
    def counts(self) -> List[int]:
        return [entry.count for entry in self.entries]


@dataclass
class PaletteResult:
    """Result bundle produced by the extractor."""

    entries: List[PaletteEntry]
    summary: Dict[str, object] = field(default_factory=dict)

    @property
    def colors(self) -> List[RGB]:
        return [entry.rgb for entry in self.entries]
