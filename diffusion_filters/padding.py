"""Border extension of pixel grids.

Given the grid::

    [1, 2]
    [3, 4]

padding by two pixels on every side gives, per policy:

``CONSTANT`` (value 0)::

    [0, 0, 0, 0, 0, 0]
    [0, 0, 0, 0, 0, 0]
    [0, 0, 1, 2, 0, 0]
    [0, 0, 3, 4, 0, 0]
    [0, 0, 0, 0, 0, 0]
    [0, 0, 0, 0, 0, 0]

``REPEAT``::

    [1, 2, 1, 2, 1, 2]
    [3, 4, 3, 4, 3, 4]
    [1, 2, 1, 2, 1, 2]
    [3, 4, 3, 4, 3, 4]
    [1, 2, 1, 2, 1, 2]
    [3, 4, 3, 4, 3, 4]

``MIRROR``::

    [4, 3, 3, 4, 4, 3]
    [2, 1, 1, 2, 2, 1]
    [2, 1, 1, 2, 2, 1]
    [4, 3, 3, 4, 4, 3]
    [4, 3, 3, 4, 4, 3]
    [2, 1, 1, 2, 2, 1]

``EXTEND``::

    [1, 1, 1, 2, 2, 2]
    [1, 1, 1, 2, 2, 2]
    [1, 1, 1, 2, 2, 2]
    [3, 3, 3, 4, 4, 4]
    [3, 3, 3, 4, 4, 4]
    [3, 3, 3, 4, 4, 4]
"""
from __future__ import annotations

from enum import Enum
from typing import Sequence, Union

import numpy as np

from .errors import InvalidDimensions, UnsupportedPadding


class PaddingType(str, Enum):
    CONSTANT = "CONSTANT"
    REPEAT = "REPEAT"
    MIRROR = "MIRROR"
    EXTEND = "EXTEND"


# numpy.pad modes; REPEAT tiles the whole canvas, i.e. index (i - margin) mod n
_NUMPY_MODES = {
    PaddingType.REPEAT: "wrap",
    PaddingType.MIRROR: "symmetric",
    PaddingType.EXTEND: "edge",
}


def as_padding_type(policy: Union[PaddingType, str]) -> PaddingType:
    """Return ``policy`` as a :class:`PaddingType`, accepting names in any case."""
    if isinstance(policy, PaddingType):
        return policy
    if isinstance(policy, str):
        try:
            return PaddingType(policy.upper())
        except ValueError:
            pass
    raise UnsupportedPadding(f"Unsupported padding type: {policy!r}")


def extend(
    grid: np.ndarray,
    margin_x: int,
    margin_y: int,
    policy: Union[PaddingType, str] = PaddingType.CONSTANT,
    constant_value: Union[float, Sequence[float]] = 0.0,
) -> np.ndarray:
    """Return a copy of ``grid`` grown by ``margin_x`` columns and ``margin_y`` rows on each side.

    ``grid`` is indexed ``[y, x]`` or ``[y, x, channel]``. ``constant_value`` is
    only used by ``CONSTANT``; a sequence gives one value per channel.
    """
    policy = as_padding_type(policy)
    margin_x = int(margin_x)
    margin_y = int(margin_y)
    if margin_x < 0 or margin_y < 0:
        raise InvalidDimensions(f"Padding margins must be non-negative, got ({margin_x}, {margin_y})")

    src = np.asarray(grid)
    if src.ndim not in (2, 3) or src.shape[0] == 0 or src.shape[1] == 0:
        raise InvalidDimensions(f"Cannot pad a grid of shape {src.shape}")

    if policy is PaddingType.CONSTANT:
        height, width = src.shape[:2]
        shape = (height + 2 * margin_y, width + 2 * margin_x) + src.shape[2:]
        out = np.empty(shape, dtype=np.result_type(src.dtype, np.float64))
        out[...] = _broadcast_constant(constant_value, src)
        out[margin_y:margin_y + height, margin_x:margin_x + width] = src
        return out

    pad_width = [(margin_y, margin_y), (margin_x, margin_x)]
    if src.ndim == 3:
        pad_width.append((0, 0))
    return np.pad(src, pad_width, mode=_NUMPY_MODES[policy])


def _broadcast_constant(value: Union[float, Sequence[float]], src: np.ndarray) -> np.ndarray:
    values = np.atleast_1d(np.asarray(value, dtype=np.float64))
    if src.ndim == 2:
        return values[0]
    channels = src.shape[2]
    if values.size != channels:
        values = np.full(channels, values[0])
    return values


def refresh_dummies(field: np.ndarray) -> None:
    """Copy the outermost interior rows and columns into the one-pixel frame of ``field``.

    This mirrors the image across its border, so that the discrete flux across
    the border vanishes (homogeneous Neumann boundary condition). Rows are
    refreshed first, then full columns including the corners.
    """
    field[0, 1:-1] = field[1, 1:-1]
    field[-1, 1:-1] = field[-2, 1:-1]
    field[:, 0] = field[:, 1]
    field[:, -1] = field[:, -2]
