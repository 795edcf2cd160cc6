"""Scene-level primitive intersection testing.

This module stores the scene's spheres and planes in Taichi fields and
answers nearest-hit queries against them. The query is a linear scan: each
primitive kind is scanned for its nearest hit, then the two candidates are
compared. When a plane and a sphere report the same distance the plane
wins (``plane_t <= sphere_t``); shading at grazing contacts depends on this.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.scene.intersection import (
    ...     add_sphere, add_plane, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, 3), 1.0, material_id=0)
    >>> add_plane(vec3(0, 1, 0), vec3(0, -1, 0), material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from glimmer.core.ray import normalize_tuple
from glimmer.geometry.plane import hit_plane, make_plane
from glimmer.geometry.sphere import HitRecord, hit_sphere, make_sphere

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Distance from the ray origin to the hit point.
            Only valid if hit == 1.
        point: The world-space hit position. Only valid if hit == 1.
        normal: The unit surface normal at the hit position.
            Only valid if hit == 1.
        uv: Surface texture coordinate. Only valid if hit == 1.
        material_id: The material id of the hit primitive.
            -1 when nothing was hit.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    uv: vec2
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_PLANES = 256

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage: Structure of Arrays layout
plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_spheres[None] = 0
    num_planes[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene storage.

    No geometric validation happens here; SceneManager validates before
    calling.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The material id to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_plane(point: vec3, normal: vec3, material_id: int = 0) -> int:
    """Add a plane to the scene storage.

    Args:
        point: A point on the plane.
        normal: The unit plane normal.
        material_id: The material id to associate with this plane.

    Returns:
        The index of the added plane.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_points[idx] = point
    plane_normals[idx] = normal
    plane_material_ids[idx] = material_id
    num_planes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Attach a material id to a primitive hit record."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        uv=rec.uv,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        uv=vec2(0.0, 0.0),
        material_id=-1,
    )


@ti.func
def _nearest_sphere(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Nearest sphere hit along the ray, or a miss record."""
    result = _make_miss_record()
    for i in range(num_spheres[None]):
        sphere = make_sphere(sphere_centers[i], sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere)
        if rec.hit == 1 and (result.hit == 0 or rec.t < result.t):
            result = _to_scene_hit_record(rec, sphere_material_ids[i])
    return result


@ti.func
def _nearest_plane(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Nearest plane hit along the ray, or a miss record."""
    result = _make_miss_record()
    for i in range(num_planes[None]):
        plane = make_plane(plane_points[i], plane_normals[i])
        rec = hit_plane(ray_origin, ray_direction, plane)
        if rec.hit == 1 and (result.hit == 0 or rec.t < result.t):
            result = _to_scene_hit_record(rec, plane_material_ids[i])
    return result


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord for the closest hit across all primitives, or a
        miss record. On equal distances the plane hit is returned.
    """
    sphere_rec = _nearest_sphere(ray_origin, ray_direction)
    plane_rec = _nearest_plane(ray_origin, ray_direction)

    result = sphere_rec
    if plane_rec.hit == 1 and (sphere_rec.hit == 0 or plane_rec.t <= sphere_rec.t):
        result = plane_rec
    return result


# =============================================================================
# Python-side Query (diagnostics and tests)
# =============================================================================


@dataclass(frozen=True)
class Intersection:
    """A nearest-hit result returned to Python.

    Attributes:
        material_id: The material id of the hit primitive.
        position: The world-space hit position.
        distance: Distance from the ray origin to the hit.
        normal: The unit surface normal.
        uv: The surface texture coordinate.
    """

    material_id: int
    position: tuple[float, float, float]
    distance: float
    normal: tuple[float, float, float]
    uv: tuple[float, float]


_probe_hit = ti.field(dtype=ti.i32, shape=())
_probe_t = ti.field(dtype=ti.f32, shape=())
_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_uv = ti.Vector.field(2, dtype=ti.f32, shape=())
_probe_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _probe_scene(origin: vec3, direction: vec3):
    """Run one nearest-hit query and store the record in the probe fields."""
    rec = intersect_scene(origin, direction)
    _probe_hit[None] = rec.hit
    _probe_t[None] = rec.t
    _probe_point[None] = rec.point
    _probe_normal[None] = rec.normal
    _probe_uv[None] = rec.uv
    _probe_material_id[None] = rec.material_id


def _vec_to_tuple(v) -> tuple:
    return tuple(float(c) for c in v.to_numpy())


def cast_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> Intersection | None:
    """Find the nearest intersection against the currently stored primitives.

    Args:
        origin: The ray origin.
        direction: The ray direction (normalized here).

    Returns:
        The nearest Intersection, or None if the ray hits nothing.

    Raises:
        ValueError: If the direction cannot be normalized.
    """
    unit = normalize_tuple(direction, "Ray direction")
    _probe_scene(vec3(origin[0], origin[1], origin[2]), vec3(unit[0], unit[1], unit[2]))

    if _probe_hit[None] == 0:
        return None
    return Intersection(
        material_id=int(_probe_material_id[None]),
        position=_vec_to_tuple(_probe_point[None]),
        distance=float(_probe_t[None]),
        normal=_vec_to_tuple(_probe_normal[None]),
        uv=_vec_to_tuple(_probe_uv[None]),
    )
