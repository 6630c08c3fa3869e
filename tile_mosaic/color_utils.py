"""RGB colour value type and Euclidean distance / cost-matrix computation."""

from __future__ import annotations

import math
from typing import NamedTuple

import numpy as np


class RGBColor(NamedTuple):
    """Average colour of an image or region, channels in ``[0, 255]``."""

    r: int
    g: int
    b: int

    @classmethod
    def from_array(cls, values: np.ndarray) -> RGBColor:
        r, g, b = (int(v) for v in values[:3])
        return cls(r, g, b)

    def to_hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


def color_distance(a: RGBColor, b: RGBColor) -> float:
    """Euclidean distance between two colours in RGB space."""
    dr = a[0] - b[0]
    dg = a[1] - b[1]
    db = a[2] - b[2]
    return math.sqrt(dr * dr + dg * dg + db * db)


def compute_cost_matrix(
    cell_colors: np.ndarray,
    tile_colors: np.ndarray,
    chunk_size: int = 512,
) -> np.ndarray:
    """Pairwise RGB Euclidean distance between grid cells and tiles.

    Args:
        cell_colors: (M, 3) uint8 RGB, one row per grid cell (row-major).
        tile_colors: (N, 3) uint8 RGB, one row per tile.
        chunk_size: Cell rows computed per batch (controls peak RAM).

    Returns:
        (M, N) float64 cost matrix; ``cost[i, j]`` equals
        ``color_distance(cell_colors[i], tile_colors[j])``.
    """
    c = cell_colors.reshape(-1, 3).astype(np.float64)
    t = tile_colors.reshape(-1, 3).astype(np.float64)

    m = len(c)
    cost = np.empty((m, len(t)), dtype=np.float64)
    for i in range(0, m, chunk_size):
        j = min(i + chunk_size, m)
        diff = c[i:j, np.newaxis, :] - t[np.newaxis, :, :]
        cost[i:j] = np.sqrt(np.sum(diff ** 2, axis=2))
    return cost
