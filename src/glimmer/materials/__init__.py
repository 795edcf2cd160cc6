"""Materials module: textures and the material arena.

Components:
    texture: Solid colors and the procedural texture table (XOR, hash noise)
    material: Material storage shared by reference (id) across primitives

Each material provides:
    - A texture evaluated at the hit's (u, v)
    - A diffuse coefficient scaling the Lambertian term
    - A reflectivity scaling the mirror-reflection term
"""

from .material import (
    MAX_MATERIALS,
    Material,
    add_material,
    clear_materials,
    get_material,
    get_material_count,
    validate_material,
)
from .texture import (
    NOISE_TEXTURE,
    XOR_TEXTURE,
    Texture,
    TextureKind,
    noise_hash,
    noise_texture,
    sample_texture,
    solid_texture,
    texture_from_name,
    xor_texture,
)

__all__ = [
    # Textures
    "Texture",
    "TextureKind",
    "solid_texture",
    "texture_from_name",
    "XOR_TEXTURE",
    "NOISE_TEXTURE",
    "sample_texture",
    "xor_texture",
    "noise_texture",
    "noise_hash",
    # Materials
    "Material",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "validate_material",
]
