"""Material arena shared by all primitives.

A material is a texture plus two scalar coefficients:

    diffuse:      weight of the Lambertian term, in [0, 1]
    reflectivity: weight of the mirror-reflection term, in [0, 1]

Materials live in Taichi fields indexed by material id. Primitives store
only the id, so any number of them can share one material. Entries are
written once by add_material() and never modified afterwards.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.materials.material import add_material
    >>> from glimmer.materials.texture import solid_texture
    >>> red = add_material(solid_texture((1.0, 0.0, 0.0)), diffuse=0.8)
"""

import math

import taichi as ti
import taichi.math as tm

from .texture import Texture, TextureKind

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class Material:
    """Material properties as seen by the shading code.

    Attributes:
        texture_kind: The TextureKind operation code.
        color: The solid texture color (unused by procedural kinds).
        diffuse: The Lambertian coefficient in [0, 1].
        reflectivity: The mirror-reflection weight in [0, 1].
    """

    texture_kind: ti.i32
    color: vec3
    diffuse: ti.f32
    reflectivity: ti.f32


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 256

material_texture_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuse = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_reflectivity = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _validate_unit_interval(name: str, value: float) -> None:
    if not math.isfinite(value) or value < 0.0 or value > 1.0:
        raise ValueError(f"{name} = {value} is outside [0, 1]")


def validate_material(texture: Texture, diffuse: float, reflectivity: float) -> None:
    """Check material parameters without storing them.

    Raises:
        ValueError: If a coefficient is outside [0, 1] or a solid color
            component is negative or not finite.
    """
    _validate_unit_interval("diffuse", diffuse)
    _validate_unit_interval("reflectivity", reflectivity)
    if texture.kind == TextureKind.SOLID:
        for i, component in enumerate(texture.color):
            if not math.isfinite(component) or component < 0.0:
                raise ValueError(f"Texture color component {i} = {component} is invalid")


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(texture: Texture, diffuse: float = 1.0, reflectivity: float = 0.0) -> int:
    """Add a material to the arena.

    Args:
        texture: The surface texture.
        diffuse: The Lambertian coefficient in [0, 1].
        reflectivity: The mirror-reflection weight in [0, 1].

    Returns:
        The material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any parameter is invalid.
    """
    validate_material(texture, diffuse, reflectivity)

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_texture_kinds[idx] = int(texture.kind)
    material_colors[idx] = vec3(texture.color[0], texture.color[1], texture.color[2])
    material_diffuse[idx] = diffuse
    material_reflectivity[idx] = reflectivity
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the arena."""
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> Material:
    """Fetch a material by id inside a Taichi kernel."""
    return Material(
        texture_kind=material_texture_kinds[material_id],
        color=material_colors[material_id],
        diffuse=material_diffuse[material_id],
        reflectivity=material_reflectivity[material_id],
    )
