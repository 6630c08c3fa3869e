"""
Tile Mosaic Generator
=====================

Lay out a collection of tile images on a square grid so that, seen as a
whole, the tiles' average colours approximate a main image.

The layout engine is a deterministic two-pass greedy heuristic:

- **Pass 1** gives every tile its single best-fitting cell (no reuse)
- **Pass 2** fills the remaining cells, penalising tiles already used
"""

__version__ = "1.0.0"

from tile_mosaic.assigner import assign_tiles
from tile_mosaic.color_utils import RGBColor, color_distance, compute_cost_matrix
from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import (
    DecodingError,
    EmptyRegionError,
    MosaicError,
    NoTilesAvailableError,
)
from tile_mosaic.generator import (
    MosaicLayoutGenerator,
    generate_layout,
    get_layout_generator,
)
from tile_mosaic.image_io import (
    clamp_output_size,
    encode_mosaic,
    input_digest,
    load_rgb,
    render_mosaic,
    save_mosaic,
    validate_layout,
)
from tile_mosaic.sampler import average_color, cell_bounds, sample_grid, sample_tile

__all__ = [
    "DecodingError",
    "EmptyRegionError",
    "MosaicConfig",
    "MosaicError",
    "MosaicLayoutGenerator",
    "NoTilesAvailableError",
    "RGBColor",
    "assign_tiles",
    "average_color",
    "cell_bounds",
    "clamp_output_size",
    "color_distance",
    "compute_cost_matrix",
    "encode_mosaic",
    "generate_layout",
    "get_layout_generator",
    "input_digest",
    "load_rgb",
    "render_mosaic",
    "sample_grid",
    "sample_tile",
    "save_mosaic",
    "validate_layout",
]
