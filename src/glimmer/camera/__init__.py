"""Camera module for primary ray generation.

Components:
    pinhole: Fixed-orientation pinhole camera looking down +z

Ray generation maps pixel coordinates (plus a sub-pixel offset) onto the
z = 1 image plane, scaled by the shorter image side.
"""

from .pinhole import PinholeCamera, get_camera_position, get_primary_ray, setup_camera

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_camera_position",
    "get_primary_ray",
]
