from __future__ import annotations

import math

import numpy as np
from scipy.ndimage import correlate1d

from .errors import InvalidParameter
from .pixel_buffer import PixelBuffer


def gaussian_kernel(sigma: float, precision: float = 5.0, h: float = 1.0) -> np.ndarray:
    """Return the one-sided sampled Gaussian ``w[0..length]``.

    The kernel is cut off at ``precision * sigma`` and normalised so that the
    two-sided kernel ``w[length], ..., w[1], w[0], w[1], ..., w[length]`` sums to one.
    """
    if sigma <= 0:
        raise InvalidParameter(f"Gaussian sigma must be positive, got {sigma}")
    if precision <= 0:
        raise InvalidParameter(f"Gaussian precision must be positive, got {precision}")
    length = int(math.floor(precision * sigma / h)) + 1
    i = np.arange(length + 1, dtype=np.float64)
    weights = np.exp(-(i * i) * (h * h) / (2.0 * sigma * sigma))
    return weights / (weights[0] + 2.0 * weights[1:].sum())


def _two_sided(weights: np.ndarray) -> np.ndarray:
    return np.concatenate([weights[:0:-1], weights])


def gaussian_smooth(
    field: np.ndarray,
    sigma: float,
    precision: float = 5.0,
    hx: float = 1.0,
    hy: float = 1.0,
) -> np.ndarray:
    """Separable Gaussian smoothing of a 2D ``[y, x]`` field.

    One full pass along x, then one along y. Each 1D signal is extended by
    mirroring at both ends (edge sample repeated), so the output has the same
    shape and constant signals stay constant.
    """
    if sigma < 0:
        raise InvalidParameter(f"Gaussian sigma must be non-negative, got {sigma}")
    out = np.array(field, dtype=np.float64)
    if sigma == 0:
        return out
    out = correlate1d(out, _two_sided(gaussian_kernel(sigma, precision, hx)), axis=1, mode="reflect")
    out = correlate1d(out, _two_sided(gaussian_kernel(sigma, precision, hy)), axis=0, mode="reflect")
    return out


def convolve(sigma: float, precision: float, buffer: PixelBuffer, hx: float = 1.0, hy: float = 1.0) -> None:
    """Smooth the first channel of ``buffer`` in place."""
    buffer.matrix[:, :, 0] = gaussian_smooth(buffer.matrix[:, :, 0], sigma, precision, hx, hy)
