from __future__ import annotations

import logging

from .errors import InvalidParameter

logger = logging.getLogger(__name__)


def stability_limit(hx: float = 1.0, hy: float = 1.0) -> float:
    """Largest time step for which the explicit schemes stay stable.

    The homogeneous update is a convex combination of the five stencil values
    iff ``2 tau/hx^2 + 2 tau/hy^2 <= 1``. Catte diffusivities are bounded by 1,
    so the same limit applies there.
    """
    return 1.0 / (2.0 / (hx * hx) + 2.0 / (hy * hy))


def check_stability(tau: float, hx: float = 1.0, hy: float = 1.0, strict: bool = False) -> bool:
    """Return whether ``tau`` respects :func:`stability_limit`.

    A violation is logged as a warning, or raised as :class:`InvalidParameter`
    when ``strict`` is set.
    """
    limit = stability_limit(hx, hy)
    if tau <= limit:
        return True
    message = f"tau={tau:g} exceeds the explicit scheme stability limit {limit:g}"
    if strict:
        raise InvalidParameter(message)
    logger.warning("%s; results may oscillate or blow up", message)
    return False
