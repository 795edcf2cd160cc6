"""Preview module for output and visualization.

Components:
    export: PNG export via Pillow
    display: Matplotlib preview window

Example:
    >>> from glimmer.preview import save_png, show_preview
    >>> pixels = render(scene, 320, 240)
    >>> save_png(pixels, "frame.png")
    >>> show_preview(pixels)
"""

from glimmer.preview.display import show_preview
from glimmer.preview.export import save_png, to_pil_image

__all__ = [
    "show_preview",
    "save_png",
    "to_pil_image",
]
