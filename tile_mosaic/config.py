"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic run.

    Attributes:
        grid_size:        Default number of cells per side of the square grid.
        min_grid_size:    Smallest grid the CLI / web UI will accept.
        max_grid_size:    Largest grid the CLI / web UI will accept.
        grid_presets:     Quick-pick grid sizes offered by the web UI.
        min_tiles:        Fewest tile images the CLI / web UI will accept.
        tile_sample_size: Side of the square each tile is downsampled to
                          before its average colour is taken.
        reuse_penalty:    Score added per prior use of a tile when filling
                          the cells left over after unique placement.
        max_workers:      Thread pool size for image sampling (None = default).
        output_size:      Side in pixels of the exported square mosaic.
        min_output_size:  Lower clamp for *output_size*.
        max_output_size:  Upper clamp for *output_size*.
        output_format:    "png" or "jpeg".
        jpeg_quality:     Quality used when exporting JPEG.
        overlay_opacity:  Opacity of the main image blended over the tiles.
        tiles_dir:        Folder scanned for tile images by the CLI.
        output_dir:       Folder for results.
    """

    # Grid
    grid_size: int = 20
    min_grid_size: int = 10
    max_grid_size: int = 100
    grid_presets: tuple[int, ...] = (20, 32, 48)

    # Tiles
    min_tiles: int = 2
    tile_sample_size: int = 20  # small square, only the mean colour is kept

    # Assignment
    reuse_penalty: float = 50.0  # same units as RGB Euclidean distance

    # Sampling
    max_workers: int | None = None

    # Output
    output_size: int = 1024
    min_output_size: int = 128
    max_output_size: int = 16_000
    output_format: str = "png"
    jpeg_quality: int = 90
    overlay_opacity: float = 0.65

    # Paths
    tiles_dir: Path = field(default_factory=lambda: Path("images") / "tiles")
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif"}
    )

    def clamp_grid_size(self, grid_size: int) -> int:
        """Clamp *grid_size* into ``[min_grid_size, max_grid_size]``."""
        return max(self.min_grid_size, min(self.max_grid_size, grid_size))
