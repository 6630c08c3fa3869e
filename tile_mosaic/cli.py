"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import MosaicError
from tile_mosaic.generator import generate_layout
from tile_mosaic.image_io import (
    clamp_output_size,
    load_rgb,
    render_mosaic,
    save_mosaic,
)
from tile_mosaic.sampler import sample_tile

app = typer.Typer(
    name="tile-mosaic",
    help="Arrange a collection of photos into a mosaic of a main image.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path | None, extensions: frozenset[str]) -> list[Path]:
    if folder is None or not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _gather_tiles(
    tiles: list[Path] | None, tiles_dir: Path | None, cfg: MosaicConfig,
) -> list[Path]:
    found = list(tiles or [])
    found.extend(_collect_images(tiles_dir, cfg.SUPPORTED_EXTENSIONS))
    return found


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


# -- generate command --------------------------------------------------

@app.command()
def generate(
    main_image: Path = typer.Argument(..., help="Image the mosaic should resemble"),
    tiles: list[Path] | None = typer.Argument(None, help="Tile image files"),
    tiles_dir: Path | None = typer.Option(
        _DEFAULTS.tiles_dir, "--tiles-dir", "-t", help="Folder scanned for tiles",
    ),
    grid_size: int = typer.Option(
        _DEFAULTS.grid_size, "--grid-size", "-g",
        help=f"Cells per side ({_DEFAULTS.min_grid_size}-{_DEFAULTS.max_grid_size})",
    ),
    penalty: float = typer.Option(
        _DEFAULTS.reuse_penalty, "--penalty", help="Score added per tile reuse",
    ),
    size: int = typer.Option(
        _DEFAULTS.output_size, "--size", "-s", help="Output side in pixels",
    ),
    fmt: str = typer.Option(
        _DEFAULTS.output_format, "--format", "-f", help="'png' or 'jpeg'",
    ),
    overlay: float = typer.Option(
        _DEFAULTS.overlay_opacity, "--overlay",
        help="Opacity of the main image blended over the tiles (0-1)",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output image (default: output/<main>_mosaic.<fmt>)",
    ),
    layout_json: Path | None = typer.Option(
        None, "--layout-json", help="Also write the tile index layout as JSON",
    ),
    workers: int | None = typer.Option(
        _DEFAULTS.max_workers, "--workers", "-w", help="Sampling threads",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate a tile mosaic of MAIN_IMAGE and render it to an image file."""
    _setup_logging(verbose)
    logger = logging.getLogger("tile_mosaic")

    cfg = MosaicConfig(
        grid_size=grid_size,
        reuse_penalty=penalty,
        max_workers=workers,
        output_size=size,
        output_format=fmt.lower(),
        overlay_opacity=overlay,
        tiles_dir=tiles_dir or _DEFAULTS.tiles_dir,
    )

    tile_paths = _gather_tiles(tiles, tiles_dir, cfg)
    if len(tile_paths) < cfg.min_tiles:
        console.print(
            f"\n[yellow]Need at least {cfg.min_tiles} tile images, "
            f"found {len(tile_paths)}.[/yellow]"
        )
        console.print(f"Pass tile files or place them in {tiles_dir}/ and re-run.\n")
        raise typer.Exit(1)

    clamped = cfg.clamp_grid_size(grid_size)
    if clamped != grid_size:
        logger.warning("Grid size %d clamped to %d", grid_size, clamped)
    out_size = clamp_output_size(size, cfg)
    if out_size != size:
        logger.warning("Output size %d clamped to %d", size, out_size)

    if output is None:
        ext = "jpg" if cfg.output_format in ("jpeg", "jpg") else cfg.output_format
        output = cfg.output_dir / f"{main_image.stem}_mosaic.{ext}"
    output.parent.mkdir(parents=True, exist_ok=True)

    console.print(Panel.fit(
        f"[bold]TILE MOSAIC GENERATOR[/bold]\n"
        f"Main image: {main_image.name}  |  Tiles: {len(tile_paths)}\n"
        f"Grid: {clamped}x{clamped}  |  Reuse penalty: {cfg.reuse_penalty}\n"
        f"Output: {out_size}px {cfg.output_format}  |  Overlay: {cfg.overlay_opacity}",
        border_style="cyan",
    ))

    t_total = time.perf_counter()
    try:
        layout = generate_layout(main_image, tile_paths, clamped, cfg)
        mosaic = render_mosaic(
            layout, tile_paths, out_size,
            main_image=main_image, overlay_opacity=cfg.overlay_opacity,
        )
        save_mosaic(mosaic, output, cfg.output_format, cfg.jpeg_quality)
    except (MosaicError, ValueError) as exc:
        console.print(f"[red]✗ Generation failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    if layout_json is not None:
        layout_json.parent.mkdir(parents=True, exist_ok=True)
        layout_json.write_text(json.dumps(layout.tolist()))
        logger.info("Layout written to %s", layout_json)

    usage = np.bincount(layout.ravel(), minlength=len(tile_paths))
    elapsed = time.perf_counter() - t_total
    console.print(
        f"  [green]✓[/green] {output}  "
        f"[dim]{clamped}x{clamped} cells  tiles used={int(np.count_nonzero(usage))}"
        f"/{len(tile_paths)}  max reuse={int(usage.max())}"
        f"  time={elapsed:.1f}s[/dim]"
    )


# -- colors command ----------------------------------------------------

@app.command()
def colors(
    tiles: list[Path] | None = typer.Argument(None, help="Tile image files"),
    tiles_dir: Path | None = typer.Option(
        _DEFAULTS.tiles_dir, "--tiles-dir", "-t", help="Folder scanned for tiles",
    ),
) -> None:
    """Print the average colour of each tile image."""
    tile_paths = _gather_tiles(tiles, tiles_dir, _DEFAULTS)
    if not tile_paths:
        console.print("[yellow]No tile images found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Tile colours")
    table.add_column("#", justify="right")
    table.add_column("Tile")
    table.add_column("RGB")
    table.add_column("Hex")
    for idx, path in enumerate(tile_paths):
        try:
            color = sample_tile(load_rgb(path), _DEFAULTS.tile_sample_size)
        except MosaicError as exc:
            console.print(f"[red]✗ {path.name}:[/red] {exc}")
            raise typer.Exit(1) from exc
        hex_code = color.to_hex()
        table.add_row(
            str(idx), path.name,
            f"{color.r}, {color.g}, {color.b}",
            f"[on {hex_code}]   [/] {hex_code}",
        )
    console.print(table)


if __name__ == "__main__":
    app()
