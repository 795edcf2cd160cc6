"""Geometry module for shape primitives.

This module provides the two primitive kinds the renderer supports:

Components:
    sphere: Sphere primitive, the shared HitRecord, spherical uv mapping
    plane: Infinite plane primitive with planar uv mapping

The primitive set is closed, so the scene stores each kind in its own
Taichi fields and the nearest-hit query scans them kind by kind instead of
dispatching through a common interface.

Ray-object intersection follows the pattern:
    record = hit_shape(ray_origin, ray_direction, shape)
"""

from .plane import PLANE_UV_SCALE, Plane, hit_plane, make_plane, plane_uv
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_hit, make_sphere, sphere_uv

__all__ = [
    "HitRecord",
    "make_miss_hit",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "sphere_uv",
    "Plane",
    "hit_plane",
    "make_plane",
    "plane_uv",
    "PLANE_UV_SCALE",
]
