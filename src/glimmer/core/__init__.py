"""Core rendering module.

This module contains the building blocks of the ray tracer:

Components:
    ray: Ray data structure and vector utilities
    integrator: Whitted-style shading (ambient, diffuse, shadows, reflection)
    renderer: Frame driver running the per-pixel kernel in parallel

All compute-intensive operations use Taichi kernels, which run on the CPU
thread pool or the GPU depending on how Taichi was initialized.
"""

from .ray import (
    Ray,
    distance_squared,
    length_squared,
    make_ray,
    normalize_tuple,
    offset_origin,
    ray_at,
    reflect_view,
    vec2,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from glimmer.core.integrator or glimmer.core.renderer when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec2",
    "vec3",
    "length_squared",
    "distance_squared",
    "reflect_view",
    "offset_origin",
    "normalize_tuple",
]
