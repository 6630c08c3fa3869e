"""Reduce pixel data to average colours: one per tile, a grid per main image."""

from __future__ import annotations

import numpy as np
from PIL import Image

from tile_mosaic.color_utils import RGBColor
from tile_mosaic.errors import EmptyRegionError


def average_color(pixels: np.ndarray) -> RGBColor:
    """Per-channel mean of a block of pixels, truncated to integers.

    Args:
        pixels: Array whose last axis holds at least three channels
            (R, G, B); alpha or any further channel is ignored.

    Raises:
        EmptyRegionError: *pixels* holds no samples.
    """
    arr = np.asarray(pixels)
    if arr.ndim < 1 or arr.shape[-1] < 3:
        msg = f"Expected pixels with at least 3 channels, got shape {arr.shape}"
        raise ValueError(msg)

    rgb = arr[..., :3].reshape(-1, 3)
    count = len(rgb)
    if count == 0:
        msg = "Cannot average an empty pixel region"
        raise EmptyRegionError(msg)

    # Integer sums keep the floor exact.
    totals = rgb.astype(np.int64).sum(axis=0)
    return RGBColor.from_array(totals // count)


def cell_bounds(dimension: int, grid_size: int) -> list[tuple[int, int]]:
    """Split ``[0, dimension)`` into *grid_size* pixel-rounded intervals.

    Interval *i* spans ``floor(i * dimension / grid_size)`` to
    ``floor((i + 1) * dimension / grid_size)``.  Every interval is at least
    one pixel wide, so a grid finer than the image repeats pixels rather
    than dropping cells.
    """
    if grid_size < 1:
        msg = f"grid_size must be positive, got {grid_size}"
        raise ValueError(msg)
    if dimension < 1:
        msg = f"Cannot partition an image dimension of {dimension} pixels"
        raise EmptyRegionError(msg)

    bounds = []
    for i in range(grid_size):
        start = i * dimension // grid_size
        end = max(start + 1, (i + 1) * dimension // grid_size)
        bounds.append((start, end))
    return bounds


def sample_grid(image: np.ndarray, grid_size: int) -> np.ndarray:
    """Average colour of every cell of a ``grid_size x grid_size`` partition.

    Args:
        image: (H, W, C) pixel array with C >= 3.
        grid_size: Cells per side.

    Returns:
        (grid_size, grid_size, 3) uint8 colour grid, row-major.
    """
    arr = np.asarray(image)
    if arr.ndim != 3:
        msg = f"Expected an (H, W, C) image, got shape {arr.shape}"
        raise ValueError(msg)

    h, w = arr.shape[:2]
    rows = cell_bounds(h, grid_size)
    cols = cell_bounds(w, grid_size)

    grid = np.empty((grid_size, grid_size, 3), dtype=np.uint8)
    for r, (y0, y1) in enumerate(rows):
        for c, (x0, x1) in enumerate(cols):
            grid[r, c] = average_color(arr[y0:y1, x0:x1])
    return grid


def sample_tile(image: np.ndarray, sample_size: int = 20) -> RGBColor:
    """Average colour of a tile, measured on a small square thumbnail.

    Only one aggregate colour per tile is needed, so the image is first
    box-filtered down to ``sample_size x sample_size`` to bound the cost
    of analysing large photos.
    """
    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] < 3:
        msg = f"Expected an (H, W, C) image with C >= 3, got shape {arr.shape}"
        raise ValueError(msg)
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        msg = f"Cannot sample an empty tile of shape {arr.shape}"
        raise EmptyRegionError(msg)

    thumb = Image.fromarray(np.ascontiguousarray(arr[..., :3], dtype=np.uint8))
    thumb = thumb.resize((sample_size, sample_size), Image.BOX)
    return average_color(np.array(thumb, dtype=np.uint8))
