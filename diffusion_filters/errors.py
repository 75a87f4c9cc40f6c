"""Exceptions raised by the diffusion filters.

Each concrete error also derives from the closest builtin so callers that
only know about ``IndexError``/``ValueError`` keep working.
"""
from __future__ import annotations


class DiffusionError(Exception):
    """Base class for every error raised by :mod:`diffusion_filters`."""


class OutOfBounds(DiffusionError, IndexError):
    """Pixel access outside of a buffer."""


class InvalidDimensions(DiffusionError, ValueError):
    """Buffer shapes that do not fit the requested operation."""


class UnsupportedPadding(DiffusionError, ValueError):
    """Unknown border extension policy."""


class UnsupportedImageKind(DiffusionError, ValueError):
    """Channel layout other than grayscale (1) or RGB (3)."""


class InvalidParameter(DiffusionError, ValueError):
    """Numeric parameter outside of its admissible range."""
