from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import cv2

from .errors import InvalidDimensions
from .pixel_buffer import ImageKind, PixelBuffer


SUPPORTED_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".webp"}


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def is_image_file(p: Path) -> bool:
    return p.is_file() and (p.suffix.lower() in SUPPORTED_EXTS)


def discover_images(root: Path) -> List[Path]:
    images: List[Path] = []
    for ext in SUPPORTED_EXTS:
        images.extend(root.rglob(f"*{ext}"))
        images.extend(root.rglob(f"*{ext.upper()}"))
    # Deduplicate (case-insensitive filesystems match both globs), keep a stable order
    seen = set()
    uniq: List[Path] = []
    for p in sorted(images):
        if p not in seen:
            uniq.append(p)
            seen.add(p)
    return uniq


def make_output_path(inp: Path, input_root: Path, output_dir: Path, keep_structure: bool, suffix: str) -> Path:
    out_name = f"{inp.stem}_{suffix}{inp.suffix.lower()}"
    if keep_structure:
        try:
            rel = inp.parent.relative_to(input_root)
        except ValueError:
            rel = Path(".")
        return output_dir / rel / out_name
    return output_dir / out_name


def load_image_cv2(path: str) -> np.ndarray:
    """Load an image as an RGB ``float64`` array with intensities in [0, 255]."""
    bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if bgr is None:
        raise FileNotFoundError(f"Cannot read image file: {path}")
    rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
    return rgb.astype(np.float64)


def save_image(path: Path, image: np.ndarray) -> None:
    """Write an RGB (or single channel) raster with intensities in [0, 255]."""
    img_u8 = np.clip(np.rint(image), 0, 255).astype(np.uint8)
    ensure_dir(path.parent)
    if img_u8.ndim == 3:
        bgr = cv2.cvtColor(img_u8, cv2.COLOR_RGB2BGR)
    else:
        bgr = img_u8
    ok = cv2.imwrite(str(path), bgr)
    if not ok:
        raise IOError(f"Failed to write image: {path}")


def load_buffer(path: str, kind: ImageKind = ImageKind.GRAYSCALE) -> PixelBuffer:
    return PixelBuffer.from_image(load_image_cv2(path), kind)


def load_mask(path: str, shape: Optional[Tuple[int, int]] = None) -> PixelBuffer:
    """Load an inpainting mask.

    Painted (non-zero) pixels mark the region to reconstruct and become 0;
    every other pixel is known data and becomes 1. ``shape`` is the expected
    ``(width, height)``.
    """
    gray = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
    if gray is None:
        raise FileNotFoundError(f"Cannot read mask file: {path}")
    if shape is not None and (gray.shape[1], gray.shape[0]) != tuple(shape):
        raise InvalidDimensions(
            f"Mask {path} is {gray.shape[1]}x{gray.shape[0]}, expected {shape[0]}x{shape[1]}"
        )
    return PixelBuffer.from_array((gray == 0).astype(np.float64))
