"""Pinhole camera model for primary ray generation.

The camera sits at a fixed position and looks down +z. A pixel coordinate
(x, y) is mapped to a direction on the z = 1 image plane:

    t  = min(width, height)
    xt = (x - width / 2) / t
    yt = (y - height / 2) / t
    direction = normalize(xt, yt, 1)

Dividing by the shorter image side keeps the aspect ratio and gives roughly
the same field of view at any resolution. Row 0 of the image has the most
negative yt, so world +y points down the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.camera.pinhole import PinholeCamera, setup_camera
    >>> setup_camera(PinholeCamera(position=(0.0, 0.0, 0.0)))
    >>> # Inside a kernel:
    >>> # ray = get_primary_ray(x + 0.25, y + 0.25, width, height)
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from glimmer.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        position: Camera position in world space (x, y, z). The camera
            always looks down +z.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)


# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Write the camera configuration to the Taichi fields.

    Args:
        camera: The camera configuration.

    Raises:
        ValueError: If the position is not three finite numbers.
    """
    if len(camera.position) != 3 or not all(math.isfinite(c) for c in camera.position):
        raise ValueError(f"Camera position must be three finite numbers, got {camera.position}")
    _camera_origin[None] = [float(c) for c in camera.position]


def get_camera_position() -> tuple[float, float, float]:
    """Get the configured camera position from Python."""
    origin = _camera_origin[None]
    return (float(origin[0]), float(origin[1]), float(origin[2]))


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_primary_ray(px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through an image-plane position.

    Args:
        px: Horizontal pixel coordinate, including any sub-pixel offset.
        py: Vertical pixel coordinate, including any sub-pixel offset.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera position with a unit direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    t = ti.min(w, h)
    xt = (px - w * 0.5) / t
    yt = (py - h * 0.5) / t
    return make_ray(_camera_origin[None], tm.normalize(vec3(xt, yt, 1.0)))
