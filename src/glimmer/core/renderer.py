"""Frame driver: parallel per-pixel evaluation into an RGB byte buffer.

For every pixel the driver builds one primary ray per antialiasing sample,
shades it, takes the weighted sum of the sample colors and writes the
clamped result. The frame kernel's outer ``ti.ndrange`` loop is spread by
Taichi across CPU threads or GPU lanes. Each iteration owns exactly one
pixel of the output field, so no two iterations write the same slot and no
synchronization is involved. Scene fields are only read during the kernel.

The output buffers are preallocated at MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT so
that changing the resolution does not trigger kernel recompilation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.core.renderer import AntialiasConfig, render
    >>> from glimmer.scene.demo import create_demo_scene
    >>> scene, camera = create_demo_scene()
    >>> pixels = render(scene, 320, 240, AntialiasConfig.grid(), camera=camera)
    >>> pixels.shape
    (240, 320, 3)
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from glimmer.camera.pinhole import PinholeCamera, get_primary_ray, setup_camera
from glimmer.core.integrator import RenderSettings, apply_settings, shade, shade_ray
from glimmer.scene.intersection import intersect_scene

if TYPE_CHECKING:
    from glimmer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Type aliases for vectors
vec2 = tm.vec2
vec3 = tm.vec3

# =============================================================================
# Render Target (Image Buffers)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Maximum number of antialiasing samples per pixel
MAX_AA_SAMPLES = 16

# Gray levels lost per unit of distance in depth renders
DEPTH_FALLOFF = 10.0

_pixels = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_depth = ti.field(dtype=ti.u8, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_aa_offsets = ti.Vector.field(2, dtype=ti.f32, shape=MAX_AA_SAMPLES)
_aa_weights = ti.field(dtype=ti.f32, shape=MAX_AA_SAMPLES)
_aa_count = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Antialiasing Configuration
# =============================================================================


@dataclass
class AntialiasConfig:
    """Fixed sub-pixel sampling kernel.

    Attributes:
        offsets: Sub-pixel (dx, dy) offsets added to the pixel coordinate.
        weights: Weight of each sample. Normalized by their sum when applied.
    """

    offsets: list[tuple[float, float]] = field(default_factory=lambda: [(0.0, 0.0)])
    weights: list[float] = field(default_factory=lambda: [1.0])

    @classmethod
    def none(cls) -> "AntialiasConfig":
        """A single sample at the pixel coordinate."""
        return cls()

    @classmethod
    def grid(cls, spread: float = 0.25) -> "AntialiasConfig":
        """Two symmetric offsets per axis with equal weight (4 samples)."""
        offsets = [(dx, dy) for dy in (-spread, spread) for dx in (-spread, spread)]
        return cls(offsets=offsets, weights=[0.25] * 4)

    @property
    def sample_count(self) -> int:
        """Number of samples per pixel."""
        return len(self.offsets)

    def normalized_weights(self) -> list[float]:
        """Weights scaled to sum to one.

        Raises:
            ValueError: If the configuration is malformed.
        """
        if not 1 <= len(self.offsets) <= MAX_AA_SAMPLES:
            raise ValueError(f"Antialiasing needs 1 to {MAX_AA_SAMPLES} samples, got {len(self.offsets)}")
        if len(self.weights) != len(self.offsets):
            raise ValueError(
                f"Got {len(self.weights)} weights for {len(self.offsets)} antialiasing offsets"
            )
        if any(not math.isfinite(w) or w < 0.0 for w in self.weights):
            raise ValueError("Antialiasing weights must be non-negative")
        total = sum(self.weights)
        if total <= 0.0:
            raise ValueError("Antialiasing weights must not sum to zero")
        return [w / total for w in self.weights]


def _apply_antialiasing(config: AntialiasConfig) -> None:
    """Write the sampling kernel to the Taichi fields."""
    weights = config.normalized_weights()
    for i, ((dx, dy), w) in enumerate(zip(config.offsets, weights)):
        _aa_offsets[i] = vec2(dx, dy)
        _aa_weights[i] = w
    _aa_count[None] = config.sample_count


def _check_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )


def _prepare(
    scene: "SceneManager",
    antialiasing: AntialiasConfig | None,
    settings: RenderSettings | None,
    camera: PinholeCamera | None,
) -> None:
    """Upload the scene and every per-render parameter before a kernel launch."""
    scene.sync()
    apply_settings(settings if settings is not None else RenderSettings())
    _apply_antialiasing(antialiasing if antialiasing is not None else AntialiasConfig.none())
    setup_camera(camera if camera is not None else PinholeCamera())


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _sample_pixel(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    """Weighted sum of the shaded antialiasing samples of one pixel."""
    color = vec3(0.0, 0.0, 0.0)
    for s in range(_aa_count[None]):
        offset = _aa_offsets[s]
        ray = get_primary_ray(
            ti.cast(x, ti.f32) + offset.x,
            ti.cast(y, ti.f32) + offset.y,
            width,
            height,
        )
        sample_color, _ = shade(ray)
        color += _aa_weights[s] * sample_color
    return color


@ti.func
def to_rgb8(color: vec3):
    """Clamp a color to the displayable range and truncate to bytes."""
    return ti.cast(tm.clamp(color * 255.0, 0.0, 255.0), ti.u8)


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32):
    """Shade every pixel; each iteration writes only its own pixel."""
    for y, x in ti.ndrange(height, width):
        _pixels[x, y] = to_rgb8(_sample_pixel(x, y, width, height))


@ti.kernel
def _render_depth_frame(width: ti.i32, height: ti.i32):
    """Write a grayscale distance image: near is bright, misses are black."""
    for y, x in ti.ndrange(height, width):
        ray = get_primary_ray(ti.cast(x, ti.f32), ti.cast(y, ti.f32), width, height)
        rec = intersect_scene(ray.origin, ray.direction)
        value = 0.0
        if rec.hit == 1:
            value = tm.clamp(255.0 - rec.t * DEPTH_FALLOFF, 0.0, 255.0)
        _depth[x, y] = ti.cast(value, ti.u8)


@ti.kernel
def _render_single_pixel(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    """Shade one pixel and return its unclamped color."""
    return _sample_pixel(x, y, width, height)


# =============================================================================
# Public Rendering API
# =============================================================================


def render(
    scene: "SceneManager",
    width: int,
    height: int,
    antialiasing: AntialiasConfig | None = None,
    settings: RenderSettings | None = None,
    camera: PinholeCamera | None = None,
) -> npt.NDArray[np.uint8]:
    """Render the scene into an RGB byte buffer.

    Args:
        scene: The scene to render.
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        antialiasing: Sub-pixel sampling kernel. Defaults to one sample.
        settings: Shading parameters. Defaults to RenderSettings().
        camera: Camera configuration. Defaults to a camera at the origin.

    Returns:
        Array of shape (height, width, 3) with dtype uint8. Row 0 is the
        first image row (y = 0).

    Raises:
        ValueError: If the dimensions or any configuration is invalid.
    """
    _check_dimensions(width, height)
    _prepare(scene, antialiasing, settings, camera)

    samples = int(_aa_count[None])
    logger.info("Rendering %dx%d with %d sample(s) per pixel", width, height, samples)
    start = time.perf_counter()

    _render_frame(width, height)
    image = _pixels.to_numpy()[:width, :height, :]

    logger.info("Rendered %dx%d in %.3fs", width, height, time.perf_counter() - start)
    # (width, height, 3) -> (height, width, 3)
    return np.ascontiguousarray(np.transpose(image, (1, 0, 2)))


def render_depth(
    scene: "SceneManager",
    width: int,
    height: int,
    camera: PinholeCamera | None = None,
) -> npt.NDArray[np.uint8]:
    """Render a grayscale distance preview of the scene.

    Each hit pixel gets ``255 - DEPTH_FALLOFF * distance`` (saturating at 0);
    pixels whose primary ray misses are 0. Lighting and materials are ignored.

    Args:
        scene: The scene to render.
        width: Image width in pixels.
        height: Image height in pixels.
        camera: Camera configuration. Defaults to a camera at the origin.

    Returns:
        Array of shape (height, width) with dtype uint8.

    Raises:
        ValueError: If the dimensions are invalid.
    """
    _check_dimensions(width, height)
    scene.sync()
    setup_camera(camera if camera is not None else PinholeCamera())

    _render_depth_frame(width, height)
    image = _depth.to_numpy()[:width, :height]
    return np.ascontiguousarray(image.T)


def render_pixel(
    scene: "SceneManager",
    x: int,
    y: int,
    width: int,
    height: int,
    antialiasing: AntialiasConfig | None = None,
    settings: RenderSettings | None = None,
    camera: PinholeCamera | None = None,
) -> tuple[float, float, float]:
    """Render one pixel and return its unclamped color.

    Useful for testing and debugging; full frames should use render().

    Args:
        scene: The scene to render.
        x: Pixel column.
        y: Pixel row.
        width: Image width in pixels.
        height: Image height in pixels.
        antialiasing: Sub-pixel sampling kernel. Defaults to one sample.
        settings: Shading parameters. Defaults to RenderSettings().
        camera: Camera configuration. Defaults to a camera at the origin.

    Returns:
        Tuple of (R, G, B) color values before clamping.

    Raises:
        ValueError: If the pixel is outside the image or any configuration
            is invalid.
    """
    _check_dimensions(width, height)
    if not (0 <= x < width and 0 <= y < height):
        raise ValueError(f"Pixel ({x}, {y}) is outside a {width}x{height} image")
    _prepare(scene, antialiasing, settings, camera)

    color = _render_single_pixel(x, y, width, height)
    return (float(color[0]), float(color[1]), float(color[2]))


def trace(
    scene: "SceneManager",
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    settings: RenderSettings | None = None,
) -> tuple[tuple[float, float, float], int]:
    """Shade an arbitrary ray against the scene.

    Args:
        scene: The scene to query.
        origin: The ray origin.
        direction: The ray direction (normalized here).
        settings: Shading parameters. Defaults to RenderSettings().

    Returns:
        Tuple of ((R, G, B), invocations), where invocations counts the
        shading steps taken by the primary ray and its reflections.

    Raises:
        ValueError: If the direction cannot be normalized or the settings
            are invalid.
    """
    scene.sync()
    apply_settings(settings if settings is not None else RenderSettings())
    return shade_ray(origin, direction)
