"""Exceptions raised by the layout engine."""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for every failure of a mosaic generation request."""


class EmptyRegionError(MosaicError, ValueError):
    """A sampled pixel region contained no pixels."""


class DecodingError(MosaicError, OSError):
    """An input image could not be read or decoded."""


class NoTilesAvailableError(MosaicError, ValueError):
    """The assigner was asked to place tiles from an empty pool."""
