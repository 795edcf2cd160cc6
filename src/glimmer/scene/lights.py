"""Point light storage.

Point lights are ideal zero-size emitters with an RGB color. They have no
distance falloff; only shadow occlusion and the Lambertian cosine term
modulate their contribution.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class PointLight:
    """A point light.

    Attributes:
        position: World-space position of the light.
        color: RGB intensity of the light.
    """

    position: vec3
    color: vec3


# Maximum number of point lights in the scene
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights."""
    num_lights[None] = 0


def add_light(position: vec3, color: vec3) -> int:
    """Add a point light.

    Args:
        position: World-space position of the light.
        color: RGB intensity of the light.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = position
    light_colors[idx] = color
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_light(index: ti.i32) -> PointLight:
    """Fetch a light by index inside a Taichi kernel."""
    return PointLight(position=light_positions[index], color=light_colors[index])
