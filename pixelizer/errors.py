"""Exceptions raised by the pixelizer core."""

from __future__ import annotations


class PixelizerError(ValueError):
    """Base class for all pixelizer failures."""


class InvalidDimensions(PixelizerError):
    """A pixel buffer has a zero dimension or a data length that does not match."""


class InvalidConfig(PixelizerError):
    """A processing parameter is outside its accepted range."""
