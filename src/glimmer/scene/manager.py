"""Scene manager coordinating materials, primitives and lights.

This module provides the high-level scene building API. A SceneManager
validates everything at construction time and keeps Python-side records of
what was added. The kernels read from module-level Taichi fields, so before
a render or query the manager uploads its records into those fields with
sync(). Only one scene is resident in the fields at a time; syncing a
different manager replaces it.

The SceneManager maintains:
- A material id space shared by spheres and planes
- Separate add_sphere / add_plane / add_light entry points
- Scene serialization to and from plain dictionaries (JSON-friendly)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.materials.texture import solid_texture
    >>> from glimmer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_material(solid_texture((1.0, 0.0, 0.0)), diffuse=0.8)
    >>> scene.add_sphere((0, 0, 3), 1.0, red)
    >>> scene.add_light((-2, -2, -1), (1, 1, 1))
    >>> hit = scene.cast_ray((0, 0, 0), (0, 0, 1))
"""

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import taichi.math as tm

from glimmer.core.ray import normalize_tuple
from glimmer.materials.material import (
    MAX_MATERIALS,
    add_material,
    clear_materials,
    validate_material,
)
from glimmer.materials.texture import Texture, texture_from_name
from glimmer.scene.intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    Intersection,
    add_plane,
    add_sphere,
    cast_ray,
    clear_scene,
)
from glimmer.scene.lights import MAX_LIGHTS, add_light, clear_lights

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

Vec3Tuple = tuple[float, float, float]

# Token of the scene currently uploaded into the Taichi fields
_resident_token: object | None = None


def invalidate_resident_scene() -> None:
    """Forget which scene is uploaded, forcing the next sync() to upload."""
    global _resident_token
    _resident_token = None


def _as_vec3_tuple(name: str, value: Any) -> Vec3Tuple:
    """Convert a 3-sequence to a float tuple, rejecting non-finite values."""
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    result = (float(value[0]), float(value[1]), float(value[2]))
    if not all(math.isfinite(c) for c in result):
        raise ValueError(f"{name} {result} has non-finite components")
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material id.
        texture: The surface texture.
        diffuse: The Lambertian coefficient.
        reflectivity: The mirror-reflection weight.
    """

    material_id: int
    texture: Texture
    diffuse: float
    reflectivity: float


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material id assigned to the sphere.
    """

    sphere_index: int
    center: Vec3Tuple
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        plane_index: The index in the plane storage arrays.
        point: A point on the plane.
        normal: The unit plane normal.
        material_id: The material id assigned to the plane.
    """

    plane_index: int
    point: Vec3Tuple
    normal: Vec3Tuple
    material_id: int


@dataclass
class LightInfo:
    """Information about a point light.

    Attributes:
        light_index: The index in the light storage arrays.
        position: World-space position.
        color: RGB intensity.
    """

    light_index: int
    position: Vec3Tuple
    color: Vec3Tuple


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        planes: List of plane configurations.
        lights: List of light configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Scene builder and owner of the scene's materials, primitives and lights.

    Construction is not thread-safe and must finish before rendering. Once
    uploaded, the Taichi fields are only read by kernels.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.
        planes: List of PlaneInfo for all planes in the scene.
        lights: List of LightInfo for all point lights.

    Example:
        >>> scene = SceneManager()
        >>> mirror = scene.add_material(solid_texture((0.9, 0.9, 0.9)), 0.2, 0.8)
        >>> floor = scene.add_material(NOISE_TEXTURE, diffuse=0.9)
        >>> scene.add_sphere((0, 0, 3), 1.0, mirror)
        >>> scene.add_plane((0, 1, 0), (0, -1, 0), floor)
        >>> scene.add_light((-2, -2, -1), (1.0, 1.0, 1.0))
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self.lights: list[LightInfo] = []
        self._token = object()
        self._dirty = True

    def clear(self) -> None:
        """Remove all materials, primitives and lights."""
        self.materials.clear()
        self.spheres.clear()
        self.planes.clear()
        self.lights.clear()
        self._dirty = True

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, texture: Texture, diffuse: float = 1.0, reflectivity: float = 0.0) -> int:
        """Add a material to the scene.

        Args:
            texture: The surface texture.
            diffuse: The Lambertian coefficient in [0, 1].
            reflectivity: The mirror-reflection weight in [0, 1].

        Returns:
            The material id, usable by any number of primitives.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any parameter is invalid.
        """
        validate_material(texture, diffuse, reflectivity)
        if len(self.materials) >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_id = len(self.materials)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                texture=texture,
                diffuse=float(diffuse),
                reflectivity=float(reflectivity),
            )
        )
        self._dirty = True
        return material_id

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by id, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material_id(self, material_id: int) -> None:
        if not 0 <= material_id < len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(self, center: Vec3Tuple, radius: float, material_id: int) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The material id from add_material().

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If the geometry or material_id is invalid.
        """
        center = _as_vec3_tuple("Sphere center", center)
        if not math.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self._check_material_id(material_id)
        if len(self.spheres) >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        sphere_index = len(self.spheres)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=float(radius),
                material_id=material_id,
            )
        )
        self._dirty = True
        logger.debug("Added sphere %d at %s (r=%g)", sphere_index, center, radius)
        return sphere_index

    def add_plane(self, point: Vec3Tuple, normal: Vec3Tuple, material_id: int) -> int:
        """Add an infinite plane to the scene.

        Args:
            point: Any point on the plane as (x, y, z).
            normal: The plane normal; normalized here.
            material_id: The material id from add_material().

        Returns:
            The index of the added plane.

        Raises:
            RuntimeError: If the maximum number of planes is exceeded.
            ValueError: If the geometry or material_id is invalid.
        """
        point = _as_vec3_tuple("Plane point", point)
        unit_normal = normalize_tuple(_as_vec3_tuple("Plane normal", normal), "Plane normal")
        self._check_material_id(material_id)
        if len(self.planes) >= MAX_PLANES:
            raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")

        plane_index = len(self.planes)
        self.planes.append(
            PlaneInfo(
                plane_index=plane_index,
                point=point,
                normal=unit_normal,
                material_id=material_id,
            )
        )
        self._dirty = True
        logger.debug("Added plane %d through %s, normal %s", plane_index, point, unit_normal)
        return plane_index

    def add_light(self, position: Vec3Tuple, color: Vec3Tuple = (1.0, 1.0, 1.0)) -> int:
        """Add a point light to the scene.

        Args:
            position: World-space position as (x, y, z).
            color: RGB intensity; components must be non-negative.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If the position or color is invalid.
        """
        position = _as_vec3_tuple("Light position", position)
        color = _as_vec3_tuple("Light color", color)
        if any(c < 0.0 for c in color):
            raise ValueError(f"Light color components must be non-negative, got {color}")
        if len(self.lights) >= MAX_LIGHTS:
            raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

        light_index = len(self.lights)
        self.lights.append(LightInfo(light_index=light_index, position=position, color=color))
        self._dirty = True
        return light_index

    # =========================================================================
    # Upload and Queries
    # =========================================================================

    @property
    def is_resident(self) -> bool:
        """Whether the Taichi fields currently hold this scene's data."""
        return _resident_token is self._token and not self._dirty

    def sync(self) -> None:
        """Upload the scene into the Taichi fields if they hold anything else.

        Called automatically by cast_ray() and the render functions.
        """
        global _resident_token
        if self.is_resident:
            return

        clear_scene()
        clear_materials()
        clear_lights()

        for mat in self.materials:
            add_material(mat.texture, mat.diffuse, mat.reflectivity)
        for sphere in self.spheres:
            add_sphere(vec3(*sphere.center), sphere.radius, sphere.material_id)
        for plane in self.planes:
            add_plane(vec3(*plane.point), vec3(*plane.normal), plane.material_id)
        for light in self.lights:
            add_light(vec3(*light.position), vec3(*light.color))

        _resident_token = self._token
        self._dirty = False
        logger.debug(
            "Uploaded scene: %d materials, %d spheres, %d planes, %d lights",
            len(self.materials),
            len(self.spheres),
            len(self.planes),
            len(self.lights),
        )

    def cast_ray(self, origin: Vec3Tuple, direction: Vec3Tuple) -> Intersection | None:
        """Find the nearest intersection of a ray with the scene.

        Args:
            origin: The ray origin.
            direction: The ray direction (normalized here).

        Returns:
            The nearest Intersection, or None when nothing is hit.

        Raises:
            ValueError: If the direction cannot be normalized.
        """
        self.sync()
        return cast_ray(origin, direction)

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return len(self.spheres)

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return len(self.planes)

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return len(self.lights)

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_plane_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append(
                {
                    "texture": mat.texture.name,
                    "color": list(mat.texture.color),
                    "diffuse": mat.diffuse,
                    "reflectivity": mat.reflectivity,
                }
            )

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for plane in self.planes:
            config.planes.append(
                {
                    "point": list(plane.point),
                    "normal": list(plane.normal),
                    "material_id": plane.material_id,
                }
            )

        for light in self.lights:
            config.lights.append({"position": list(light.position), "color": list(light.color)})

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        The configuration is validated in full before the current scene is
        replaced. If any entry is invalid the scene is left unchanged.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
            RuntimeError: If the configuration exceeds a capacity limit.
        """
        staged = SceneManager()

        # Materials first, primitives refer to them by id
        for mat_config in config.materials:
            texture = texture_from_name(
                mat_config.get("texture", "solid"),
                tuple(mat_config.get("color", [1.0, 1.0, 1.0])),
            )
            staged.add_material(
                texture,
                diffuse=mat_config.get("diffuse", 1.0),
                reflectivity=mat_config.get("reflectivity", 0.0),
            )

        for sphere_config in config.spheres:
            staged.add_sphere(
                sphere_config.get("center", [0.0, 0.0, 0.0]),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

        for plane_config in config.planes:
            staged.add_plane(
                plane_config.get("point", [0.0, 0.0, 0.0]),
                plane_config.get("normal", [0.0, -1.0, 0.0]),
                plane_config.get("material_id", 0),
            )

        for light_config in config.lights:
            staged.add_light(
                light_config.get("position", [0.0, 0.0, 0.0]),
                light_config.get("color", [1.0, 1.0, 1.0]),
            )

        self.materials = staged.materials
        self.spheres = staged.spheres
        self.planes = staged.planes
        self.lights = staged.lights
        self._dirty = True

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "planes": config.planes,
            "lights": config.lights,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres', 'planes' and
                'lights' keys. Missing keys are treated as empty.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            planes=data.get("planes", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "SceneManager":
        """Build a scene from a JSON description file.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If the file is not valid JSON or describes an
                invalid scene.
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        scene = cls()
        scene.from_dict(data)
        logger.info("Loaded scene from %s (%d primitives)", path, scene.get_primitive_count())
        return scene
