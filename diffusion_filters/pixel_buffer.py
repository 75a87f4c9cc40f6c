from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, Sequence, Union

import numpy as np

from .errors import InvalidDimensions, OutOfBounds, UnsupportedImageKind
from .padding import PaddingType, as_padding_type, extend


class ImageKind(str, Enum):
    GRAYSCALE = "GRAYSCALE"
    RGB = "RGB"

    @property
    def channels(self) -> int:
        return 1 if self is ImageKind.GRAYSCALE else 3

    @classmethod
    def from_channels(cls, channels: int) -> "ImageKind":
        if channels == 1:
            return cls.GRAYSCALE
        if channels == 3:
            return cls.RGB
        raise UnsupportedImageKind(f"Unsupported channel count: {channels}")


class PixelBuffer:
    """Dense row-major grid of per-pixel vectors.

    Pixels are stored in ``matrix`` as a ``float64`` array of shape
    ``(height, width, channels)``; ``width`` and ``height`` are read from it,
    so they always agree with the grid. Coordinates in :meth:`get` and
    :meth:`set` are ``(x, y)``, i.e. column first.
    """

    def __init__(
        self,
        width: int,
        height: int,
        kind: Union[ImageKind, str] = ImageKind.GRAYSCALE,
        fill: float = 0.0,
    ) -> None:
        kind = _as_kind(kind)
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Buffer dimensions must be positive, got {width}x{height}")
        self.kind = kind
        self.matrix = np.full((int(height), int(width), kind.channels), fill, dtype=np.float64)

    @property
    def width(self) -> int:
        return self.matrix.shape[1]

    @property
    def height(self) -> int:
        return self.matrix.shape[0]

    @property
    def channels(self) -> int:
        return self.kind.channels

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height}, kind={self.kind.value})"

    # -----------------------------
    # Construction / conversion
    # -----------------------------

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer from a ``(H, W)`` or ``(H, W, C)`` array (copied)."""
        arr = np.asarray(array, dtype=np.float64)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise InvalidDimensions(f"Expected a 2D or 3D array, got shape {arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise InvalidDimensions(f"Buffer dimensions must be positive, got shape {arr.shape}")
        kind = ImageKind.from_channels(arr.shape[2])
        buf = cls.__new__(cls)
        buf.kind = kind
        buf.matrix = arr.copy()
        return buf

    @classmethod
    def from_matrix(cls, matrix: Sequence[Sequence[Sequence[float]]]) -> "PixelBuffer":
        """Build a buffer from nested rows of pixel vectors, e.g. ``[[[1], [2]], [[3], [4]]]``."""
        try:
            arr = np.array(matrix, dtype=np.float64)
        except ValueError as exc:
            raise InvalidDimensions("Rows and pixel vectors must all have the same length") from exc
        if arr.ndim != 3:
            raise InvalidDimensions(f"Expected rows of pixel vectors, got shape {arr.shape}")
        return cls.from_array(arr)

    @classmethod
    def from_image(cls, image: np.ndarray, kind: Union[ImageKind, str] = ImageKind.GRAYSCALE) -> "PixelBuffer":
        """Build a buffer from a decoded raster.

        ``image`` is ``(H, W)`` grayscale or ``(H, W, 3|4)`` RGB(A); alpha is
        dropped. A GRAYSCALE buffer holds the channel average.
        """
        kind = _as_kind(kind)
        img = np.asarray(image, dtype=np.float64)
        if img.ndim == 2:
            rgb = np.repeat(img[:, :, np.newaxis], 3, axis=2)
        elif img.ndim == 3 and img.shape[2] in (3, 4):
            rgb = img[:, :, :3]
        else:
            raise UnsupportedImageKind(f"Cannot interpret raster of shape {img.shape}")
        if kind is ImageKind.GRAYSCALE:
            return cls.from_array(rgb.mean(axis=2))
        return cls.from_array(rgb)

    def to_array(self) -> np.ndarray:
        return self.matrix.copy()

    def to_image(self, alpha: bool = False) -> np.ndarray:
        """Return a ``uint8`` RGB (or RGBA) raster; grayscale is broadcast to R, G and B."""
        values = np.clip(np.rint(self.matrix), 0, 255).astype(np.uint8)
        if self.kind is ImageKind.GRAYSCALE:
            values = np.repeat(values, 3, axis=2)
        if alpha:
            opaque = np.full(values.shape[:2] + (1,), 255, dtype=np.uint8)
            values = np.concatenate([values, opaque], axis=2)
        return values

    def clone(self) -> "PixelBuffer":
        buf = PixelBuffer.__new__(PixelBuffer)
        buf.kind = self.kind
        buf.matrix = self.matrix.copy()
        return buf

    # -----------------------------
    # Pixel access
    # -----------------------------

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBounds(f"Pixel ({x}, {y}) outside of {self.width}x{self.height} buffer")

    def get(self, x: int, y: int) -> np.ndarray:
        self._check_bounds(x, y)
        return self.matrix[y, x].copy()

    def set(self, x: int, y: int, value: Union[float, Sequence[float]]) -> None:
        self._check_bounds(x, y)
        vec = np.atleast_1d(np.asarray(value, dtype=np.float64))
        if vec.shape != (self.channels,):
            raise UnsupportedImageKind(
                f"{self.kind.value} pixels have {self.channels} component(s), got {vec.size}"
            )
        self.matrix[y, x] = vec

    def for_each_pixel(self, callback: Callable[[np.ndarray, int, int], None]) -> None:
        for y in range(self.height):
            for x in range(self.width):
                callback(self.matrix[y, x], x, y)

    # -----------------------------
    # Borders
    # -----------------------------

    def pad(
        self,
        margin_x: int,
        margin_y: int,
        policy: Union[PaddingType, str] = PaddingType.CONSTANT,
        constant_value: Union[float, Sequence[float]] = 0.0,
    ) -> None:
        """Grow the buffer in place by ``margin_x``/``margin_y`` pixels on each side.

        A scalar ``constant_value`` is broadcast to every channel.
        """
        policy = as_padding_type(policy)
        self.matrix = extend(self.matrix, margin_x, margin_y, policy, constant_value).astype(np.float64, copy=False)

    def trim(self, margin: int) -> None:
        """Remove ``margin`` pixels from every side, in place."""
        margin = int(margin)
        new_width = self.width - 2 * margin
        new_height = self.height - 2 * margin
        if margin < 0 or new_width <= 0 or new_height <= 0:
            raise InvalidDimensions(
                f"Cannot trim {margin} pixel(s) from a {self.width}x{self.height} buffer"
            )
        self.matrix = self.matrix[margin:margin + new_height, margin:margin + new_width].copy()

    # -----------------------------
    # Statistics
    # -----------------------------

    def grey_values(self) -> np.ndarray:
        """Return the ``(H, W)`` grey level of every pixel (channel average for RGB)."""
        if self.kind is ImageKind.GRAYSCALE:
            return self.matrix[:, :, 0]
        return self.matrix.mean(axis=2)

    def average_grey_level(self) -> float:
        return float(self.grey_values().mean())

    def variance(self) -> float:
        return float(self.grey_values().var())

    @staticmethod
    def pixel_magnitude(pixel: Sequence[float], sqrt: bool = False) -> float:
        """Sum of squares of ``pixel`` (its Euclidean norm if ``sqrt``)."""
        total = float(np.sum(np.square(np.asarray(pixel, dtype=np.float64))))
        return float(np.sqrt(total)) if sqrt else total

    def find_max_pixel(self) -> np.ndarray:
        magnitudes = np.sum(np.square(self.matrix), axis=2)
        y, x = np.unravel_index(np.argmax(magnitudes), magnitudes.shape)
        return self.matrix[y, x].copy()

    def find_min_pixel(self) -> np.ndarray:
        magnitudes = np.sum(np.square(self.matrix), axis=2)
        y, x = np.unravel_index(np.argmin(magnitudes), magnitudes.shape)
        return self.matrix[y, x].copy()


def _as_kind(kind: Union[ImageKind, str]) -> ImageKind:
    if isinstance(kind, ImageKind):
        return kind
    try:
        return ImageKind(str(kind).upper())
    except ValueError:
        raise UnsupportedImageKind(f"Unsupported image kind: {kind!r}") from None


def random_buffer(
    width: int,
    height: int,
    kind: Union[ImageKind, str] = ImageKind.GRAYSCALE,
    rng: Optional[np.random.Generator] = None,
) -> PixelBuffer:
    """Buffer of random integer intensities in ``[0, 255]``, used for testing."""
    kind = _as_kind(kind)
    rng = rng if rng is not None else np.random.default_rng()
    values = rng.integers(0, 256, size=(height, width, kind.channels))
    return PixelBuffer.from_array(values)
