"""Ray data structure and vector utilities for the Taichi ray tracer.

This module provides the Ray dataclass and the small set of vector helpers
the geometry and shading code needs. All helpers are Taichi functions so
they can be called from inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> # Inside a kernel:
    >>> # ray = make_ray(origin, direction)
    >>> # point = ray_at(ray, 5.0)
"""

import math

import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Every creation site in
            the renderer normalizes it, and the intersection routines rely
            on it having unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at distance t.

    Args:
        ray: The ray to evaluate.
        t: Distance along the ray. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and a (unit) direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than a length when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def distance_squared(a: vec3, b: vec3) -> ti.f32:
    """Compute the squared Euclidean distance between two points."""
    d = a - b
    return tm.dot(d, d)


@ti.func
def reflect_view(view: vec3, normal: vec3) -> vec3:
    """Mirror a view vector about a surface normal.

    Unlike the usual incident-direction formulation, ``view`` points from
    the surface back toward the viewer, so the result is
    ``normalize(2 * dot(N, V) * N - V)``.

    Args:
        view: Vector from the surface point toward the ray origin.
        normal: Unit surface normal.

    Returns:
        The unit reflected direction.
    """
    return tm.normalize(2.0 * tm.dot(normal, view) * normal - view)


@ti.func
def offset_origin(point: vec3, direction: vec3, bias: ti.f32) -> vec3:
    """Push a secondary ray origin along its own direction.

    Used for shadow and reflection rays so they do not immediately re-hit
    the surface they start on.

    Args:
        point: The surface point the ray leaves from.
        direction: The unit direction of the secondary ray.
        bias: Offset distance along the direction.

    Returns:
        The biased origin.
    """
    return point + direction * bias


# =============================================================================
# Python-side Helpers
# =============================================================================


def normalize_tuple(v: tuple[float, float, float], what: str = "vector") -> tuple[float, float, float]:
    """Normalize a 3-tuple outside of Taichi scope.

    Args:
        v: The vector to normalize.
        what: Name used in the error message.

    Returns:
        The unit-length vector.

    Raises:
        ValueError: If the vector has zero length or non-finite components.
    """
    if len(v) != 3:
        raise ValueError(f"{what} must have 3 components, got {len(v)}")
    norm = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    if norm == 0.0 or not math.isfinite(norm):
        raise ValueError(f"{what} {tuple(v)} cannot be normalized")
    return (v[0] / norm, v[1] / norm, v[2] / norm)
