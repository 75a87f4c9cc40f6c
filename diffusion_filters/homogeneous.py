"""Homogeneous (linear) diffusion and homogeneous diffusion inpainting.

Both filters solve the heat equation ``u_t = u_xx + u_yy`` with the explicit
(forward Euler) scheme

    u[i,j] <- f[i,j] + rx (f[i+1,j] - 2 f[i,j] + f[i-1,j])
                     + ry (f[i,j+1] - 2 f[i,j] + f[i,j-1])

with ``rx = tau / hx^2`` and ``ry = tau / hy^2``, on a working grid framed by
one dummy pixel on every side. The frame is refreshed from the interior before
every step, which gives reflecting (zero-flux) boundaries. The scheme is
stable for ``tau <= 0.25`` at unit pixel size; larger steps are only warned about.
"""
from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np

from .errors import InvalidDimensions, InvalidParameter, UnsupportedImageKind
from .padding import PaddingType, as_padding_type, refresh_dummies
from .pixel_buffer import ImageKind, PixelBuffer
from .stability import check_stability

logger = logging.getLogger(__name__)

HX = 1.0
HY = 1.0
FRAME = 1


def validate_inputs(image: PixelBuffer, iterations: int, tau: float) -> None:
    """Checks shared by every solver; nothing is mutated before they pass."""
    if image.kind is not ImageKind.GRAYSCALE:
        raise UnsupportedImageKind(
            f"Diffusion operates on GRAYSCALE buffers, got {image.kind.value}; convert the image first"
        )
    if int(iterations) != iterations or iterations < 0:
        raise InvalidParameter(f"iterations must be a non-negative integer, got {iterations}")
    if not tau > 0:
        raise InvalidParameter(f"tau must be positive, got {tau}")


def framed_field(image: PixelBuffer, policy: Union[PaddingType, str]) -> np.ndarray:
    """Return the first channel of ``image`` padded by the one-pixel working frame."""
    work = image.clone()
    work.pad(FRAME, FRAME, policy)
    return work.matrix[:, :, 0].copy()


def unframed_buffer(field: np.ndarray) -> PixelBuffer:
    buf = PixelBuffer.from_array(field)
    buf.trim(FRAME)
    return buf


def homogeneous_step(
    f: np.ndarray,
    u: np.ndarray,
    tau: float,
    known: Optional[np.ndarray] = None,
) -> None:
    """One explicit step reading the framed field ``f`` and writing the interior of ``u``.

    ``f`` gets its frame refreshed in place. Where ``known`` is true the value
    of ``f`` is copied unchanged.
    """
    rx = tau / (HX * HX)
    ry = tau / (HY * HY)

    refresh_dummies(f)
    centre = f[1:-1, 1:-1]
    update = (
        centre
        + rx * (f[1:-1, 2:] - 2.0 * centre + f[1:-1, :-2])
        + ry * (f[2:, 1:-1] - 2.0 * centre + f[:-2, 1:-1])
    )
    if known is None:
        u[1:-1, 1:-1] = update
    else:
        u[1:-1, 1:-1] = np.where(known, centre, update)


def _iterate(field: np.ndarray, iterations: int, tau: float, known: Optional[np.ndarray] = None) -> np.ndarray:
    # ping-pong: buffers[k % 2] holds the state before step k
    buffers = [field, field.copy()]
    for k in range(iterations):
        homogeneous_step(buffers[k % 2], buffers[(k + 1) % 2], tau, known)
    return buffers[iterations % 2]


def homogeneous_diffusion(
    image: PixelBuffer,
    iterations: int = 10,
    tau: float = 0.25,
    padding: Union[PaddingType, str] = PaddingType.CONSTANT,
) -> PixelBuffer:
    """Apply ``iterations`` steps of homogeneous diffusion to a grayscale buffer.

    The input buffer is left untouched; a new buffer of the same size is returned.
    """
    policy = as_padding_type(padding)
    validate_inputs(image, iterations, tau)
    check_stability(tau, HX, HY)

    logger.debug(
        "Homogeneous diffusion on %dx%d: iterations=%d tau=%g padding=%s",
        image.width, image.height, iterations, tau, policy.value,
    )
    u = _iterate(framed_field(image, policy), int(iterations), tau)
    return unframed_buffer(u)


def homogeneous_inpainting(
    image: PixelBuffer,
    mask: PixelBuffer,
    iterations: int = 10,
    tau: float = 0.25,
    padding: Union[PaddingType, str] = PaddingType.CONSTANT,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> PixelBuffer:
    """Reconstruct the pixels where ``mask`` is 0 by homogeneous diffusion.

    Pixels where ``mask`` is non-zero are known data: they are copied
    unchanged through every step and feed the diffusion into the hole. Unknown
    pixels start from uniform random grey values in ``[0, 255]``.
    """
    policy = as_padding_type(padding)
    validate_inputs(image, iterations, tau)
    if mask.kind is not ImageKind.GRAYSCALE:
        raise UnsupportedImageKind(f"Inpainting mask must be GRAYSCALE, got {mask.kind.value}")
    if (mask.width, mask.height) != (image.width, image.height):
        raise InvalidDimensions(
            f"Mask is {mask.width}x{mask.height} but image is {image.width}x{image.height}"
        )
    check_stability(tau, HX, HY)

    u = framed_field(image, policy)
    known_framed = framed_field(mask, policy) != 0

    rng = rng if rng is not None else np.random.default_rng(seed)
    holes = ~known_framed
    u[holes] = rng.integers(0, 256, size=int(holes.sum()))

    logger.debug(
        "Inpainting %d of %d pixels on %dx%d: iterations=%d tau=%g padding=%s",
        int((mask.matrix[:, :, 0] == 0).sum()), image.width * image.height,
        image.width, image.height, iterations, tau, policy.value,
    )
    u = _iterate(u, int(iterations), tau, known=known_framed[1:-1, 1:-1])
    return unframed_buffer(u)
