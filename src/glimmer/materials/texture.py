"""Surface textures: solid colors and procedural patterns.

A texture is either a fixed color or one of a small, closed table of
procedural functions of the surface (u, v) coordinate. Procedural textures
are selected by an integer operation code so the kernel can dispatch them
without function values:

    TextureKind.SOLID  -> the stored color
    TextureKind.XOR    -> XOR of the two 8-bit lattice coordinates
    TextureKind.NOISE  -> integer hash of a 16x16 lattice cell

Both procedural patterns are pure functions of (u, v); they carry no state
and produce identical results on every evaluation.

Example:
    >>> from glimmer.materials.texture import NOISE_TEXTURE, solid_texture
    >>> red = solid_texture((1.0, 0.0, 0.0))
    >>> floor = NOISE_TEXTURE
"""

from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3

# Lattice resolution of the hash noise pattern
NOISE_LATTICE = 16.0

# Odd multiplier applied to the cell seed before the xorshift steps
NOISE_MULTIPLIER = 2364275237

# The same multiplier as a signed 32-bit literal; kernels cast it to u32,
# which keeps the bit pattern, since integer literals default to i32
_NOISE_MULTIPLIER_I32 = NOISE_MULTIPLIER - (1 << 32)


class TextureKind(IntEnum):
    """Operation codes for texture dispatch."""

    SOLID = 0
    XOR = 1
    NOISE = 2


@dataclass(frozen=True)
class Texture:
    """A texture description.

    Attributes:
        kind: Which texture function to evaluate.
        color: The RGB color for SOLID textures. Ignored by procedural kinds.
    """

    kind: TextureKind
    color: tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def name(self) -> str:
        """Lower-case name used in scene configuration files."""
        return self.kind.name.lower()


def solid_texture(color: tuple[float, float, float]) -> Texture:
    """Create a solid color texture.

    Raises:
        ValueError: If the color does not have exactly three components.
    """
    if len(color) != 3:
        raise ValueError(f"Texture color must have 3 components, got {len(color)}")
    return Texture(TextureKind.SOLID, (float(color[0]), float(color[1]), float(color[2])))


XOR_TEXTURE = Texture(TextureKind.XOR)
NOISE_TEXTURE = Texture(TextureKind.NOISE)


def texture_from_name(name: str, color: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> Texture:
    """Look up a texture by its configuration name.

    Args:
        name: One of "solid", "xor", "noise" (case-insensitive).
        color: The color used when name is "solid".

    Returns:
        The matching Texture.

    Raises:
        ValueError: If the name is not a known texture kind.
    """
    key = name.lower()
    if key == "solid":
        return solid_texture(color)
    if key == "xor":
        return XOR_TEXTURE
    if key == "noise":
        return NOISE_TEXTURE
    raise ValueError(f"Unknown texture type: {name}")


# =============================================================================
# Texture Evaluation (Taichi-compatible)
# =============================================================================


@ti.func
def xor_texture(uv: vec2) -> vec3:
    """XOR pattern over an 8-bit lattice.

    Each coordinate is scaled to [0, 255], truncated to an integer
    (saturating outside the range), and the two integers are XORed.

    Args:
        uv: The surface coordinate.

    Returns:
        A gray color with value (x ^ y) / 255.
    """
    x = ti.cast(tm.clamp(uv.x * 255.0, 0.0, 255.0), ti.i32)
    y = ti.cast(tm.clamp(uv.y * 255.0, 0.0, 255.0), ti.i32)
    c = ti.cast(x ^ y, ti.f32) / 255.0
    return vec3(c, c, c)


@ti.func
def noise_hash(x: ti.u32, y: ti.u32) -> ti.u32:
    """Hash a lattice cell into 32 bits.

    seed = (x * 3) ^ (y * 7), multiplied by NOISE_MULTIPLIER, followed by a
    13/17/5 xorshift. All arithmetic wraps modulo 2**32 and the right shift
    is logical.
    """
    seed = (x * ti.u32(3)) ^ (y * ti.u32(7))
    seed = seed * ti.cast(_NOISE_MULTIPLIER_I32, ti.u32)
    seed = seed ^ (seed << ti.u32(13))
    seed = seed ^ ti.bit_shr(seed, ti.u32(17))
    seed = seed ^ (seed << ti.u32(5))
    return seed


@ti.func
def noise_texture(uv: vec2) -> vec3:
    """Blocky value noise from a per-cell integer hash.

    Args:
        uv: The surface coordinate. Negative coordinates map to cell 0.

    Returns:
        A gray color from the low 8 bits of the cell hash, in [0, 1].
    """
    x = ti.cast(ti.max(uv.x * NOISE_LATTICE, 0.0), ti.u32)
    y = ti.cast(ti.max(uv.y * NOISE_LATTICE, 0.0), ti.u32)
    seed = noise_hash(x, y)
    c = ti.cast(seed & ti.u32(0xFF), ti.f32) / 255.0
    return vec3(c, c, c)


@ti.func
def sample_texture(kind: ti.i32, color: vec3, uv: vec2) -> vec3:
    """Evaluate a texture at a surface coordinate.

    Args:
        kind: The TextureKind operation code.
        color: The stored color (used by SOLID only).
        uv: The surface coordinate.

    Returns:
        The base surface color.
    """
    result = color
    if kind == int(TextureKind.XOR):
        result = xor_texture(uv)
    elif kind == int(TextureKind.NOISE):
        result = noise_texture(uv)
    return result
