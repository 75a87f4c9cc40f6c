"""Perona-Malik diffusion with Catte regularisation.

The diffusivity is computed from the gradient of a Gaussian-smoothed copy of
the current image,

    g = exp(-|grad(K_sigma * u)|^2 / (2 lambda^2)),

so it drops towards zero across edges whose contrast exceeds ``lambda`` and
stays close to one in flat regions. Pre-smoothing makes the nonlinear problem
well posed.
"""
from __future__ import annotations

import logging
from typing import Union

import numpy as np

from .errors import InvalidParameter
from .homogeneous import HX, HY, framed_field, unframed_buffer, validate_inputs
from .padding import PaddingType, as_padding_type, refresh_dummies
from .pixel_buffer import PixelBuffer
from .smoothing import gaussian_smooth
from .stability import check_stability

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 5.0


def diffusivity(v: np.ndarray, lam: float, hx: float = HX, hy: float = HY) -> np.ndarray:
    """Diffusivity on the interior of the framed field ``v`` from central differences.

    Returns an array two pixels smaller than ``v`` in each axis, with values in ``(0, 1]``.
    """
    vx = (v[1:-1, 2:] - v[1:-1, :-2]) / (2.0 * hx)
    vy = (v[2:, 1:-1] - v[:-2, 1:-1]) / (2.0 * hy)
    return np.exp(-(vx * vx + vy * vy) / (2.0 * lam * lam))


def catte_step(
    f: np.ndarray,
    u: np.ndarray,
    g: np.ndarray,
    v: np.ndarray,
    tau: float,
    lam: float,
    sigma: float,
    precision: float = DEFAULT_PRECISION,
) -> None:
    """One Catte step reading the framed field ``f`` and writing the interior of ``u``.

    ``g`` and ``v`` are framed scratch arrays for the diffusivities and the
    smoothed image. ``f`` gets its frame refreshed in place.
    """
    refresh_dummies(f)

    np.copyto(v, f)
    if sigma > 0.0:
        v[1:-1, 1:-1] = gaussian_smooth(v[1:-1, 1:-1], sigma, precision, HX, HY)
        refresh_dummies(v)

    g[1:-1, 1:-1] = diffusivity(v, lam)
    refresh_dummies(g)

    rxx = tau / (2.0 * HX * HX)
    ryy = tau / (2.0 * HY * HY)

    fc = f[1:-1, 1:-1]
    gc = g[1:-1, 1:-1]
    u[1:-1, 1:-1] = (
        fc
        + rxx * (
            (g[1:-1, 2:] + gc) * (f[1:-1, 2:] - fc)
            + (g[1:-1, :-2] + gc) * (f[1:-1, :-2] - fc)
        )
        + ryy * (
            (g[2:, 1:-1] + gc) * (f[2:, 1:-1] - fc)
            + (g[:-2, 1:-1] + gc) * (f[:-2, 1:-1] - fc)
        )
    )


def catte_diffusion(
    image: PixelBuffer,
    iterations: int = 10,
    tau: float = 0.24,
    lam: float = 5.0,
    sigma: float = 1.0,
    padding: Union[PaddingType, str] = PaddingType.CONSTANT,
    precision: float = DEFAULT_PRECISION,
) -> PixelBuffer:
    """Apply ``iterations`` Catte steps to a grayscale buffer and return the result.

    ``lam`` is the contrast parameter, ``sigma`` the pre-smoothing scale
    (0 disables smoothing, which gives classic Perona-Malik).
    """
    policy = as_padding_type(padding)
    validate_inputs(image, iterations, tau)
    if not lam > 0:
        raise InvalidParameter(f"lambda must be positive, got {lam}")
    if not sigma >= 0:
        raise InvalidParameter(f"sigma must be non-negative, got {sigma}")
    if not precision > 0:
        raise InvalidParameter(f"precision must be positive, got {precision}")
    check_stability(tau, HX, HY)

    logger.debug(
        "Catte diffusion on %dx%d: iterations=%d tau=%g lambda=%g sigma=%g padding=%s",
        image.width, image.height, iterations, tau, lam, sigma, policy.value,
    )
    field = framed_field(image, policy)
    buffers = [field, field.copy()]
    g = np.ones_like(field)
    v = np.empty_like(field)
    iterations = int(iterations)
    for k in range(iterations):
        catte_step(buffers[k % 2], buffers[(k + 1) % 2], g, v, tau, lam, sigma, precision)
    return unframed_buffer(buffers[iterations % 2])
