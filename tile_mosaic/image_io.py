"""Image decoding, layout validation, mosaic rendering and export."""

from __future__ import annotations

import hashlib
import io
from pathlib import Path
from typing import IO, Sequence, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import DecodingError
from tile_mosaic.sampler import cell_bounds

# Anything generate_layout / render_mosaic accept as an image.
PixelSource = Union[np.ndarray, Image.Image, str, Path, IO[bytes]]

_FORMATS = {"png": "PNG", "jpeg": "JPEG", "jpg": "JPEG"}


def load_rgb(source: PixelSource) -> np.ndarray:
    """Decode *source* into an (H, W, 3) uint8 array.

    Arrays are passed through (extra channels dropped); Pillow images are
    converted; paths and binary file objects are opened with Pillow.

    Raises:
        DecodingError: the source cannot be read or is not an image.
    """
    if isinstance(source, np.ndarray):
        if source.ndim != 3 or source.shape[2] < 3:
            msg = f"Expected an (H, W, C) pixel array, got shape {source.shape}"
            raise DecodingError(msg)
        return np.ascontiguousarray(source[..., :3], dtype=np.uint8)

    try:
        if isinstance(source, Image.Image):
            img = source.convert("RGB")
        else:
            with Image.open(source) as opened:
                img = opened.convert("RGB")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        name = getattr(source, "name", source)
        msg = f"Could not decode image {name!s}: {exc}"
        raise DecodingError(msg) from exc
    return np.array(img, dtype=np.uint8)


def validate_layout(layout: np.ndarray, num_tiles: int) -> np.ndarray:
    """Check that *layout* is a non-empty rectangular matrix of tile indices.

    Returns:
        The layout as a 2-D int64 array.
    """
    try:
        arr = np.asarray(layout)
    except ValueError as exc:  # ragged nested lists
        msg = "Layout rows must all have the same length"
        raise ValueError(msg) from exc
    if arr.ndim != 2 or arr.size == 0:
        msg = f"Layout must be a non-empty 2-D matrix, got shape {arr.shape}"
        raise ValueError(msg)
    if not np.issubdtype(arr.dtype, np.integer):
        msg = f"Layout must hold integer tile indices, got {arr.dtype}"
        raise ValueError(msg)
    if arr.min() < 0 or arr.max() >= num_tiles:
        msg = (
            f"Layout references tiles outside [0, {num_tiles}): "
            f"min={arr.min()}, max={arr.max()}"
        )
        raise ValueError(msg)
    return arr.astype(np.int64)


def clamp_output_size(size: int, config: MosaicConfig | None = None) -> int:
    """Clamp an export side length into the configured range."""
    cfg = config or MosaicConfig()
    return max(cfg.min_output_size, min(cfg.max_output_size, int(size)))


def render_mosaic(
    layout: np.ndarray,
    tile_images: Sequence[PixelSource],
    size: int = 1024,
    main_image: PixelSource | None = None,
    overlay_opacity: float = 0.0,
) -> Image.Image:
    """Compose the tile images into a square mosaic.

    Each cell uses the same pixel partition as the colour sampler; the
    tile is centre-cropped to cover its cell.  When *main_image* is given
    it is stretched over the canvas and blended in at *overlay_opacity*.

    Args:
        layout:          (R, C) tile indices.
        tile_images:     Tile sources, index-aligned with the layout values.
        size:            Side of the output image in pixels.
        main_image:      Optional main image for the overlay.
        overlay_opacity: 0 (tiles only) to 1 (main image only).

    Returns:
        RGB ``PIL.Image`` of ``size x size`` pixels.
    """
    grid = validate_layout(layout, len(tile_images))
    if not 0.0 <= overlay_opacity <= 1.0:
        msg = f"overlay_opacity must lie in [0, 1], got {overlay_opacity}"
        raise ValueError(msg)

    rows, cols = grid.shape
    row_bounds = cell_bounds(size, rows)
    col_bounds = cell_bounds(size, cols)

    # Decode each used tile once.
    tiles = {
        idx: Image.fromarray(load_rgb(tile_images[idx]))
        for idx in np.unique(grid).tolist()
    }

    canvas = Image.new("RGB", (size, size), (30, 41, 59))
    cache: dict[tuple[int, int, int], Image.Image] = {}
    for r, (y0, y1) in enumerate(row_bounds):
        for c, (x0, x1) in enumerate(col_bounds):
            idx = int(grid[r, c])
            key = (idx, x1 - x0, y1 - y0)
            if key not in cache:
                cache[key] = ImageOps.fit(tiles[idx], key[1:], Image.LANCZOS)
            canvas.paste(cache[key], (x0, y0))

    if main_image is not None and overlay_opacity > 0.0:
        overlay = Image.fromarray(load_rgb(main_image)).resize(
            (size, size), Image.LANCZOS,
        )
        canvas = Image.blend(canvas, overlay, overlay_opacity)

    return canvas


def _pil_format(fmt: str) -> str:
    try:
        return _FORMATS[fmt.lower()]
    except KeyError:
        msg = f"Unsupported output format {fmt!r}; use 'png' or 'jpeg'"
        raise ValueError(msg) from None


def save_mosaic(
    image: Image.Image,
    path: str | Path,
    fmt: str = "png",
    jpeg_quality: int = 90,
) -> None:
    """Write a rendered mosaic to *path* as PNG or JPEG."""
    pil_fmt = _pil_format(fmt)
    if pil_fmt == "JPEG":
        image.save(path, format=pil_fmt, quality=jpeg_quality)
    else:
        image.save(path, format=pil_fmt)


def encode_mosaic(
    image: Image.Image,
    fmt: str = "png",
    jpeg_quality: int = 90,
) -> bytes:
    """Encode a rendered mosaic in memory (used for downloads)."""
    buf = io.BytesIO()
    save_mosaic(image, buf, fmt, jpeg_quality)
    return buf.getvalue()


def input_digest(main_data: bytes | None, tile_data: Sequence[bytes]) -> str:
    """Fingerprint of one request's encoded inputs, tile order included.

    Lets a cached layout be discarded once the images it was built from
    are replaced or removed.
    """
    h = hashlib.sha256()
    for blob in (main_data or b"", *tile_data):
        h.update(hashlib.sha256(blob).digest())
    return h.hexdigest()
