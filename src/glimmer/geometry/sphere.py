"""Sphere primitive with ray-sphere intersection and spherical uv mapping.

The intersection uses the closest-approach formulation rather than solving
the quadratic directly:

    p   = O - C
    p_d = dot(p, D)               (D is unit length)
    a   = p - p_d * D             (perpendicular from the center to the ray)
    h   = sqrt(r^2 - dot(a, a))
    i   = a - h * D               (hit point relative to the center)

Rays whose origin lies on the far side of the center plane (``p_d > 0``) are
rejected before anything else. That makes a sphere invisible to rays that
leave its front surface outward, which is what lets shadow and reflection
rays start on a sphere without re-hitting it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 3), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from glimmer.core.ray import length_squared

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Shared by every primitive type so the scene query can compare them.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: Distance from the ray origin to the hit point. Only valid if
            hit == 1.
        point: The world-space hit position. Only valid if hit == 1.
        normal: The unit surface normal at the hit point. Only valid if
            hit == 1.
        uv: Surface parameterization used for texture lookup. Only valid if
            hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    uv: vec2


@ti.func
def make_miss_hit() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        uv=vec2(0.0, 0.0),
    )


@ti.func
def sphere_uv(normal: vec3) -> vec2:
    """Map a unit sphere normal to spherical (u, v) coordinates.

    u = 0.5 + atan2(n.z, n.x) / (2 * pi)
    v = 0.5 - asin(n.y) / pi

    Args:
        normal: Unit outward normal at the hit point.

    Returns:
        The (u, v) texture coordinate, each component in [0, 1].
    """
    u = 0.5 + ti.atan2(normal.z, normal.x) / (2.0 * tm.pi)
    # Rounding can push |n.y| a hair past 1
    v = 0.5 - ti.asin(tm.clamp(normal.y, -1.0, 1.0)) / tm.pi
    return vec2(u, v)


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.

    Returns:
        A HitRecord for the near-side intersection. Check the hit field to
        determine whether an intersection occurred.
    """
    result = make_miss_hit()

    p = ray_origin - sphere.center
    p_d = tm.dot(p, ray_direction)

    if p_d <= 0.0:
        r_squared = sphere.radius * sphere.radius
        a = p - p_d * ray_direction
        a_squared = length_squared(a)

        if a_squared <= r_squared:
            h = ti.sqrt(r_squared - a_squared)
            i = a - h * ray_direction
            point = sphere.center + i
            normal = i / sphere.radius

            result = HitRecord(
                hit=1,
                t=tm.length(point - ray_origin),
                point=point,
                normal=normal,
                uv=sphere_uv(normal),
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
