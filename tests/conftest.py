import numpy as np
import pytest

from diffusion_filters import ImageKind, random_buffer


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def grey_5x5(rng):
    """Random 5x5 grayscale test image with intensities in [0, 255]."""
    return random_buffer(5, 5, ImageKind.GRAYSCALE, rng)
