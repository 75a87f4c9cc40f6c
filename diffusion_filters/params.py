from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .catte import DEFAULT_PRECISION, catte_diffusion
from .errors import InvalidParameter
from .homogeneous import HX, HY, homogeneous_diffusion, homogeneous_inpainting
from .padding import PaddingType
from .pixel_buffer import PixelBuffer
from .stability import check_stability


@dataclass(frozen=True)
class HomogeneousParams:
    iterations: int = 10
    tau: float = 0.25
    padding: PaddingType = PaddingType.CONSTANT

    name = "homogeneous"


@dataclass(frozen=True)
class InpaintingParams:
    mask: PixelBuffer
    iterations: int = 10
    tau: float = 0.25
    padding: PaddingType = PaddingType.CONSTANT
    seed: Optional[int] = None

    name = "inpainting"


@dataclass(frozen=True)
class CatteParams:
    iterations: int = 10
    tau: float = 0.24
    lam: float = 5.0
    sigma: float = 1.0
    precision: float = DEFAULT_PRECISION
    padding: PaddingType = PaddingType.CONSTANT

    name = "catte"


DiffusionParams = Union[HomogeneousParams, InpaintingParams, CatteParams]

ALGORITHMS = ("homogeneous", "inpainting", "catte")


def apply_filter(image: PixelBuffer, params: DiffusionParams, strict: bool = False) -> PixelBuffer:
    """Run the filter selected by the type of ``params`` on a grayscale ``image``.

    With ``strict`` a time step above the stability limit is rejected instead
    of only being logged.
    """
    if not isinstance(params, (HomogeneousParams, InpaintingParams, CatteParams)):
        raise InvalidParameter(f"Unknown diffusion parameters: {type(params).__name__}")
    if strict:
        check_stability(params.tau, HX, HY, strict=True)

    if isinstance(params, HomogeneousParams):
        return homogeneous_diffusion(image, params.iterations, params.tau, params.padding)
    if isinstance(params, InpaintingParams):
        return homogeneous_inpainting(
            image, params.mask, params.iterations, params.tau, params.padding, seed=params.seed
        )
    return catte_diffusion(
        image, params.iterations, params.tau, params.lam, params.sigma, params.padding, params.precision
    )
