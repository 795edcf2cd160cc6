"""Infinite plane primitive with ray-plane intersection and planar uv mapping.

A plane is defined by:
- point: Any point lying on the plane
- normal: The unit plane normal

Ray-plane intersection is the parametric test:
1. denom = dot(D, N); a zero denominator means the ray is parallel to the
   plane (a ray lying inside the plane counts as parallel, not a hit)
2. t = dot(P - O, N) / denom; negative t means the plane is behind the ray
3. The hit distance is t itself since D is unit length

The plane is two-sided: it reports hits from either side and always returns
its stored normal unchanged.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.geometry.plane import Plane, hit_plane
    >>> floor = Plane(point=ti.math.vec3(0, 1, 0), normal=ti.math.vec3(0, -1, 0))
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from glimmer.core.ray import length_squared, make_ray, ray_at

from .sphere import HitRecord, make_miss_hit

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3

# Texture tiling factor for planar uv coordinates
PLANE_UV_SCALE = 1.0 / 8.0

# Squared tangent length below which the x reference axis is degenerate
_DEGENERATE_TANGENT = 1e-12


@ti.dataclass
class Plane:
    """An infinite plane defined by a point on it and its unit normal.

    Attributes:
        point: A point lying on the plane (vec3).
        normal: The unit plane normal (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def plane_uv(position: vec3, normal: vec3) -> vec2:
    """Project a hit position onto a tangent basis built from the normal.

    The basis is v1 = N x X and v2 = N x v1 with X = (1, 0, 0). When the
    normal is parallel to X the tangent collapses, so Y = (0, 1, 0) is used
    as the reference axis instead.

    Args:
        position: World-space hit position.
        normal: Unit plane normal.

    Returns:
        The (u, v) texture coordinate, scaled by PLANE_UV_SCALE.
    """
    v1 = tm.cross(normal, vec3(1.0, 0.0, 0.0))
    if length_squared(v1) < _DEGENERATE_TANGENT:
        v1 = tm.cross(normal, vec3(0.0, 1.0, 0.0))
    v2 = tm.cross(normal, v1)
    return vec2(tm.dot(v1, position), tm.dot(v2, position)) * PLANE_UV_SCALE


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        plane: The plane to test intersection against.

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine whether an intersection occurred.
    """
    result = make_miss_hit()

    denom = tm.dot(ray_direction, plane.normal)
    if denom != 0.0:
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom
        if t >= 0.0:
            point = ray_at(make_ray(ray_origin, ray_direction), t)
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=plane.normal,
                uv=plane_uv(point, plane.normal),
            )

    return result


@ti.func
def make_plane(point: vec3, normal: vec3) -> Plane:
    """Create a plane inside a Taichi kernel. The normal must be unit length."""
    return Plane(point=point, normal=normal)
