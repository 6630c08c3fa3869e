#!/usr/bin/env python3
"""
main.py - Quick-start entry point.

Drop tile photos into ``images/tiles/`` and run:

    python main.py generate my_photo.jpg

Or use the full CLI:

    python -m tile_mosaic.cli generate --help
    python -m tile_mosaic.cli colors images/tiles/*.jpg
"""

from tile_mosaic.cli import app

if __name__ == "__main__":
    app()
