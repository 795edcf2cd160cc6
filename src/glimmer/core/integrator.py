"""Whitted-style shading integrator.

This module evaluates the color seen along a ray: an ambient term, one
Lambertian term per unoccluded point light, and a bounded chain of mirror
reflections. In recursive form:

    shade(ray, depth):
        hit = nearest hit of ray          (none -> background)
        base = texture(hit.uv)
        c = base * ambient
        for each light:
            if the shadow ray toward the light is unoccluded:
                c += dot(L, N) * base * diffuse * light.color
        if depth < max_depth and reflectivity != 0:
            c += reflectivity * shade(reflected ray, depth + 1)
        return c

Taichi functions cannot recurse, so shade() walks the same chain with a loop
that carries the product of the reflectivities seen so far. The color is
returned unclamped; clamping happens when the frame driver writes pixels.

Rendering parameters (ambient strength, depth cap, self-intersection bias,
background, diffuse clamping) are read from 0-d Taichi fields written by
apply_settings(), so they can change between renders without recompiling.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.core.integrator import RenderSettings, apply_settings
    >>> apply_settings(RenderSettings(max_depth=2, bias=1e-4))
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from glimmer.core.ray import (
    Ray,
    distance_squared,
    make_ray,
    normalize_tuple,
    offset_origin,
    reflect_view,
)
from glimmer.materials.material import get_material
from glimmer.materials.texture import sample_texture
from glimmer.scene.intersection import SceneHitRecord, intersect_scene
from glimmer.scene.lights import get_light, num_lights

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Fraction of the surface color added regardless of lighting
AMBIENT = 0.05

# Maximum number of reflection bounces after the primary hit
MAX_DEPTH = 3

# Upper bound accepted for a configured depth cap
MAX_DEPTH_LIMIT = 16

# Offset applied to shadow and reflection ray origins
RAY_BIAS = 1e-3

# Color returned by rays that escape the scene
BACKGROUND_COLOR = (0.0, 0.0, 0.0)


@dataclass
class RenderSettings:
    """Tunable shading parameters.

    Attributes:
        ambient: Ambient strength multiplied into the surface color.
        max_depth: Maximum number of reflection bounces.
        bias: Distance secondary rays are pushed along their direction to
            avoid re-hitting the surface they leave.
        background: Color of rays that hit nothing.
        clamp_diffuse: Clamp the light/normal cosine to be non-negative.
            Off by default, which lets lights behind a surface darken it.
    """

    ambient: float = AMBIENT
    max_depth: int = MAX_DEPTH
    bias: float = RAY_BIAS
    background: tuple[float, float, float] = BACKGROUND_COLOR
    clamp_diffuse: bool = False

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not math.isfinite(self.ambient) or self.ambient < 0.0:
            raise ValueError(f"ambient must be a non-negative number, got {self.ambient}")
        if not 0 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be in [0, {MAX_DEPTH_LIMIT}], got {self.max_depth}")
        if not math.isfinite(self.bias) or self.bias <= 0.0:
            raise ValueError(f"bias must be positive, got {self.bias}")
        if len(self.background) != 3:
            raise ValueError("background must have 3 components")


# =============================================================================
# Settings Fields (GPU-accessible)
# =============================================================================

_ambient = ti.field(dtype=ti.f32, shape=())
_max_depth = ti.field(dtype=ti.i32, shape=())
_bias = ti.field(dtype=ti.f32, shape=())
_background = ti.Vector.field(3, dtype=ti.f32, shape=())
_clamp_diffuse = ti.field(dtype=ti.i32, shape=())


def apply_settings(settings: RenderSettings) -> None:
    """Validate settings and write them to the Taichi fields.

    Args:
        settings: The settings to use for subsequent kernel launches.

    Raises:
        ValueError: If the settings are invalid.
    """
    settings.validate()
    _ambient[None] = settings.ambient
    _max_depth[None] = settings.max_depth
    _bias[None] = settings.bias
    _background[None] = vec3(settings.background[0], settings.background[1], settings.background[2])
    _clamp_diffuse[None] = 1 if settings.clamp_diffuse else 0


# =============================================================================
# Shading Core
# =============================================================================


@ti.func
def direct_lighting(rec: SceneHitRecord, base_color: vec3, diffuse: ti.f32) -> vec3:
    """Sum the Lambertian contribution of every unoccluded point light.

    A light is occluded when the shadow ray toward it hits something whose
    squared distance is strictly less than the light's squared distance.

    Args:
        rec: The surface hit being shaded.
        base_color: The texture color at the hit.
        diffuse: The material's diffuse coefficient.

    Returns:
        The summed diffuse radiance.
    """
    color = vec3(0.0, 0.0, 0.0)
    bias = _bias[None]

    for i in range(num_lights[None]):
        light = get_light(i)
        to_light = light.position - rec.point
        light_distance2 = distance_squared(light.position, rec.point)
        light_dir = tm.normalize(to_light)

        shadow = intersect_scene(offset_origin(rec.point, light_dir, bias), light_dir)
        visible = 1
        if shadow.hit == 1:
            if shadow.t * shadow.t < light_distance2:
                visible = 0

        if visible == 1:
            cos_theta = tm.dot(light_dir, rec.normal)
            if _clamp_diffuse[None] == 1:
                cos_theta = ti.max(cos_theta, 0.0)
            color += cos_theta * base_color * diffuse * light.color

    return color


@ti.func
def shade(ray: Ray):
    """Compute the color seen along a ray.

    Args:
        ray: The ray to shade (unit direction).

    Returns:
        A tuple of (color, invocations) where:
        - color: The unclamped RGB color.
        - invocations: How many shading steps ran, counting the primary ray
          and every reflection ray, including one that escapes the scene.
    """
    current = make_ray(ray.origin, ray.direction)

    color = vec3(0.0, 0.0, 0.0)
    weight = 1.0
    invocations = 0

    # Active flag for continuing the reflection chain
    active = 1
    max_depth = _max_depth[None]

    for depth in range(max_depth + 1):
        if active == 1:
            invocations += 1
            rec = intersect_scene(current.origin, current.direction)

            if rec.hit == 0:
                color += weight * _background[None]
                active = 0
            else:
                material = get_material(rec.material_id)
                base_color = sample_texture(material.texture_kind, material.color, rec.uv)

                local = base_color * _ambient[None]
                local += direct_lighting(rec, base_color, material.diffuse)
                color += weight * local

                if depth < max_depth and material.reflectivity != 0.0:
                    reflected = reflect_view(current.origin - rec.point, rec.normal)
                    current = make_ray(offset_origin(rec.point, reflected, _bias[None]), reflected)
                    weight *= material.reflectivity
                else:
                    active = 0

    return color, invocations


# =============================================================================
# Diagnostic Kernels
# =============================================================================

_last_invocations = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _shade_single_ray(origin: vec3, direction: vec3) -> vec3:
    """Shade one ray and record how many shading steps it took."""
    color, invocations = shade(Ray(origin=origin, direction=direction))
    _last_invocations[None] = invocations
    return color


def shade_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[tuple[float, float, float], int]:
    """Shade a single ray against whatever scene is currently uploaded.

    Settings must have been applied with apply_settings() first. For a
    scene-aware wrapper use glimmer.core.renderer.trace().

    Args:
        origin: The ray origin.
        direction: The ray direction (normalized here).

    Returns:
        Tuple of ((R, G, B), invocations).

    Raises:
        ValueError: If the direction has zero length.
    """
    unit = normalize_tuple(direction, "Ray direction")
    color = _shade_single_ray(vec3(origin[0], origin[1], origin[2]), vec3(unit[0], unit[1], unit[2]))
    return (float(color[0]), float(color[1]), float(color[2])), int(_last_invocations[None])
