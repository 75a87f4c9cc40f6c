"""PDE based image filters.

This package contains:
- pixel_buffer: the pixel grid the filters operate on
- padding: border extension policies and the zero-flux frame refresh
- smoothing: separable Gaussian convolution
- homogeneous: homogeneous diffusion and diffusion inpainting
- catte: Perona-Malik diffusion with Catte regularisation
- params: per-algorithm parameters and the filter dispatch
- io_utils: filesystem and image I/O helpers for the batch pipeline
"""

__version__ = "0.1.0"

from .errors import (
    DiffusionError,
    OutOfBounds,
    InvalidDimensions,
    UnsupportedPadding,
    UnsupportedImageKind,
    InvalidParameter,
)

from .padding import (
    PaddingType,
    extend,
    refresh_dummies,
)

from .pixel_buffer import (
    ImageKind,
    PixelBuffer,
    random_buffer,
)

from .smoothing import (
    gaussian_kernel,
    gaussian_smooth,
    convolve,
)

from .stability import (
    stability_limit,
    check_stability,
)

from .homogeneous import (
    homogeneous_diffusion,
    homogeneous_inpainting,
)

from .catte import (
    diffusivity,
    catte_diffusion,
)

from .params import (
    HomogeneousParams,
    InpaintingParams,
    CatteParams,
    DiffusionParams,
    apply_filter,
)

__all__ = [
    # errors
    "DiffusionError",
    "OutOfBounds",
    "InvalidDimensions",
    "UnsupportedPadding",
    "UnsupportedImageKind",
    "InvalidParameter",
    # padding
    "PaddingType",
    "extend",
    "refresh_dummies",
    # pixel_buffer
    "ImageKind",
    "PixelBuffer",
    "random_buffer",
    # smoothing
    "gaussian_kernel",
    "gaussian_smooth",
    "convolve",
    # stability
    "stability_limit",
    "check_stability",
    # filters
    "homogeneous_diffusion",
    "homogeneous_inpainting",
    "diffusivity",
    "catte_diffusion",
    # params
    "HomogeneousParams",
    "InpaintingParams",
    "CatteParams",
    "DiffusionParams",
    "apply_filter",
]
