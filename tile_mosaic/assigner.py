"""Greedy two-pass assignment of tiles to grid cells.

Pass 1 gives every tile its single best-fitting cell, never reusing a
tile or a cell.  Pass 2 fills whatever cells remain (the grid is usually
much larger than the tile pool) with the tile that minimises colour
distance plus a penalty proportional to how often it is already used.
"""

from __future__ import annotations

import logging
import time

import numpy as np

from tile_mosaic.color_utils import compute_cost_matrix
from tile_mosaic.errors import NoTilesAvailableError

logger = logging.getLogger(__name__)


def assign_tiles(
    color_grid: np.ndarray,
    tile_colors: np.ndarray,
    reuse_penalty: float = 50.0,
) -> np.ndarray:
    """Map every grid cell to a tile index.

    Args:
        color_grid:    (R, C, 3) uint8 - average colour per grid cell.
        tile_colors:   (N, 3) uint8 - average colour per tile.
        reuse_penalty: Added to a tile's score once per prior placement
                       during the fill pass.

    Returns:
        (R, C) int64 layout, every value in ``[0, N)``.

    Raises:
        NoTilesAvailableError: *tile_colors* is empty.
        ValueError: *color_grid* has no cells, or *tile_colors* is not
            an (N, 3) array.
    """
    grid = np.asarray(color_grid)
    tiles = np.asarray(tile_colors)
    if grid.ndim != 3 or grid.shape[2] != 3:
        msg = f"Expected an (R, C, 3) colour grid, got shape {grid.shape}"
        raise ValueError(msg)
    if tiles.size == 0:
        msg = "No tiles available to assign"
        raise NoTilesAvailableError(msg)
    if tiles.ndim != 2 or tiles.shape[1] != 3:
        msg = f"Expected (N, 3) tile colours, got shape {tiles.shape}"
        raise ValueError(msg)

    rows, cols = grid.shape[:2]
    num_cells = rows * cols
    num_tiles = len(tiles)
    if num_cells == 0:
        msg = "Colour grid has no cells"
        raise ValueError(msg)

    cost = compute_cost_matrix(grid.reshape(-1, 3), tiles)

    layout = np.full(num_cells, -1, dtype=np.int64)
    usage = np.zeros(num_tiles, dtype=np.int64)

    # -- Pass 1: unique best-fit placement --------------------------------
    t0 = time.perf_counter()
    target = min(num_tiles, num_cells)
    tile_used = np.zeros(num_tiles, dtype=bool)
    placed = 0

    # Stable sort over the row-major (cell, tile) flattening breaks ties
    # by cell index, then tile index.
    order = np.argsort(cost, axis=None, kind="stable")
    for flat in order:
        if placed >= target:
            break
        cell, tile = divmod(int(flat), num_tiles)
        if layout[cell] != -1 or tile_used[tile]:
            continue
        layout[cell] = tile
        tile_used[tile] = True
        usage[tile] = 1
        placed += 1

    logger.info(
        "Pass 1: placed %d unique tiles on %dx%d grid  (%.2f s)",
        placed, rows, cols, time.perf_counter() - t0,
    )

    # -- Pass 2: penalised fill, row-major --------------------------------
    t0 = time.perf_counter()
    remaining = np.flatnonzero(layout == -1)
    for cell in remaining:
        scores = cost[cell] + usage * reuse_penalty
        best = int(np.argmin(scores))  # first minimum on ties
        layout[cell] = best
        usage[best] += 1

    logger.info(
        "Pass 2: filled %d cells with penalty %.1f  (%.2f s)",
        len(remaining), reuse_penalty, time.perf_counter() - t0,
    )
    logger.debug("Tile usage: %s", usage.tolist())

    return layout.reshape(rows, cols)
