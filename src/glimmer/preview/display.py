"""Matplotlib-based preview display for rendered frames.

Example:
    >>> from glimmer.core.renderer import render
    >>> from glimmer.preview.display import show_preview
    >>> pixels = render(scene, 320, 240)
    >>> show_preview(pixels, title="Demo scene")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def show_preview(
    pixels: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
):
    """Display a rendered buffer in a Matplotlib figure.

    Args:
        pixels: RGB (H, W, 3) or grayscale (H, W) uint8 buffer.
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.

    Returns:
        The Matplotlib figure.

    Raises:
        ValueError: If the array is not 2-D or 3-channel.
    """
    import matplotlib.pyplot as plt

    if pixels.ndim not in (2, 3) or (pixels.ndim == 3 and pixels.shape[2] != 3):
        raise ValueError(f"Expected shape (H, W, 3) or (H, W), got {pixels.shape}")

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    if pixels.ndim == 2:
        ax.imshow(pixels, cmap="gray", vmin=0, vmax=255)
    else:
        ax.imshow(pixels)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {pixels.shape[1]}x{pixels.shape[0]}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
    return fig
