"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Primitive storage and the nearest-hit query
    lights: Point light storage
    manager: SceneManager, the validated scene builder and uploader
    demo: A ready-made example scene

Scene data is organized for kernel access:
    - Structure-of-Arrays fields for spheres and planes
    - Material ids shared across primitives
    - A flat point light list
"""

from .demo import create_demo_scene
from .intersection import (
    MAX_PLANES,
    MAX_SPHERES,
    Intersection,
    SceneHitRecord,
    add_plane,
    add_sphere,
    cast_ray,
    clear_scene,
    get_plane_count,
    get_sphere_count,
    intersect_scene,
)
from .lights import MAX_LIGHTS, PointLight, add_light, clear_lights, get_light_count
from .manager import (
    LightInfo,
    MaterialInfo,
    PlaneInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    invalidate_resident_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "Intersection",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "intersect_scene",
    "cast_ray",
    "MAX_SPHERES",
    "MAX_PLANES",
    # Lights module
    "PointLight",
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "SphereInfo",
    "PlaneInfo",
    "LightInfo",
    "invalidate_resident_scene",
    # Demo scene
    "create_demo_scene",
]
