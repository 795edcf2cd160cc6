"""Image export utilities for rendered frames.

The frame driver already produces display-ready 8-bit data, so export is a
thin layer over Pillow that validates the buffer layout before writing.

Supported formats:
    - PNG (8-bit RGB or grayscale via Pillow)

Example:
    >>> from glimmer.core.renderer import render
    >>> from glimmer.preview.export import save_png
    >>> pixels = render(scene, 640, 480)
    >>> save_png(pixels, "frame.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def to_pil_image(pixels: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap a rendered buffer in a Pillow image.

    Args:
        pixels: Either an RGB buffer of shape (H, W, 3) or a grayscale
            buffer of shape (H, W), dtype uint8.

    Returns:
        A Pillow image in "RGB" or "L" mode.

    Raises:
        ValueError: If the array has the wrong dtype or shape.
    """
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 buffer, got {pixels.dtype}")
    if not (pixels.ndim == 2 or (pixels.ndim == 3 and pixels.shape[2] == 3)):
        raise ValueError(f"Expected shape (H, W, 3) or (H, W), got {pixels.shape}")
    # uint8 (H, W, 3) becomes "RGB", uint8 (H, W) becomes "L"
    return PILImage.fromarray(np.ascontiguousarray(pixels))


def save_png(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> Path:
    """Save a rendered buffer as a PNG file.

    Args:
        pixels: RGB (H, W, 3) or grayscale (H, W) uint8 buffer.
        filepath: Output file path (should end in .png).

    Returns:
        The path written.

    Raises:
        ValueError: If the array has the wrong dtype or shape.
    """
    path = Path(filepath)
    to_pil_image(pixels).save(path, format="PNG")
    logger.info("Saved %dx%d image to %s", pixels.shape[1], pixels.shape[0], path)
    return path
