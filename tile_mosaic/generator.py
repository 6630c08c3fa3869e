"""Layout generation: sample every image concurrently, then assign tiles."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

import numpy as np

from tile_mosaic.assigner import assign_tiles
from tile_mosaic.color_utils import RGBColor
from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import NoTilesAvailableError
from tile_mosaic.image_io import PixelSource, load_rgb
from tile_mosaic.sampler import sample_grid, sample_tile

logger = logging.getLogger(__name__)


def _main_grid(source: PixelSource, grid_size: int) -> np.ndarray:
    return sample_grid(load_rgb(source), grid_size)


def _tile_color(source: PixelSource, sample_size: int) -> RGBColor:
    return sample_tile(load_rgb(source), sample_size)


def generate_layout(
    main_image: PixelSource,
    tile_images: Sequence[PixelSource],
    grid_size: int,
    config: MosaicConfig | None = None,
) -> np.ndarray:
    """Produce the cell -> tile index layout for a square mosaic.

    The main image's colour grid and every tile's average colour are
    computed as independent tasks on a thread pool; the assignment runs
    once all of them have finished.  The first sampling failure aborts
    the whole request.

    Args:
        main_image:  Image the mosaic should resemble.
        tile_images: Ordered tile images; layout values index into this.
        grid_size:   Cells per side of the square grid.
        config:      Sampling / penalty settings (defaults if omitted).

    Returns:
        (grid_size, grid_size) int64 layout.

    Raises:
        ValueError: *grid_size* is not a positive integer.
        NoTilesAvailableError: *tile_images* is empty.
        EmptyRegionError, DecodingError: an image could not be sampled.
    """
    cfg = config or MosaicConfig()
    if isinstance(grid_size, bool) or not isinstance(grid_size, (int, np.integer)):
        msg = f"grid_size must be an integer, got {type(grid_size).__name__}"
        raise ValueError(msg)
    if grid_size < 1:
        msg = f"grid_size must be positive, got {grid_size}"
        raise ValueError(msg)
    if len(tile_images) == 0:
        msg = "At least one tile image is required"
        raise NoTilesAvailableError(msg)

    grid_size = int(grid_size)
    logger.info(
        "Sampling main image (%dx%d grid) and %d tiles …",
        grid_size, grid_size, len(tile_images),
    )
    t0 = time.perf_counter()
    with ThreadPoolExecutor(max_workers=cfg.max_workers) as executor:
        grid_future = executor.submit(_main_grid, main_image, grid_size)
        tile_futures = [
            executor.submit(_tile_color, tile, cfg.tile_sample_size)
            for tile in tile_images
        ]
        try:
            color_grid = grid_future.result()
            tile_colors = np.array(
                [f.result() for f in tile_futures], dtype=np.uint8,
            )
        except Exception:
            for f in tile_futures:
                f.cancel()
            raise
    logger.info("Sampling done  (%.2f s)", time.perf_counter() - t0)

    return assign_tiles(color_grid, tile_colors, cfg.reuse_penalty)


class MosaicLayoutGenerator:
    """Reusable layout generator bound to one configuration."""

    def __init__(self, config: MosaicConfig | None = None) -> None:
        self.config = config or MosaicConfig()

    def generate(
        self,
        main_image: PixelSource,
        tile_images: Sequence[PixelSource],
        grid_size: int,
    ) -> np.ndarray:
        return generate_layout(main_image, tile_images, grid_size, self.config)


def get_layout_generator(config: MosaicConfig | None = None) -> MosaicLayoutGenerator:
    """Factory for the layout generator used by the CLI and web UI."""
    return MosaicLayoutGenerator(config)
