"""Demo scene: a row of textured spheres over a noise-textured floor.

Scene layout (camera at the origin looking down +z, +y pointing down the
image):
    - Four unit spheres receding to the right: solid red, XOR pattern,
      hash noise, and a mirror
    - A reflective noise floor one unit below the sphere centers
    - A white key light up and to the left, a dim blue fill light on the right

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glimmer.scene.demo import create_demo_scene
    >>> scene, camera = create_demo_scene()
"""

from glimmer.camera.pinhole import PinholeCamera
from glimmer.materials.texture import NOISE_TEXTURE, XOR_TEXTURE, solid_texture
from glimmer.scene.manager import SceneManager

# Sphere centers, nearest first
SPHERE_CENTERS: list[tuple[float, float, float]] = [
    (-1.5, 0.0, 1.0),
    (0.0, 0.0, 3.0),
    (1.5, 0.0, 5.0),
    (3.0, 0.0, 7.0),
]

SPHERE_RADIUS = 1.0

# The floor touches the bottom of every sphere
FLOOR_Y = 1.0

KEY_LIGHT = ((-2.0, -2.0, -1.0), (1.0, 1.0, 1.0))
FILL_LIGHT = ((4.0, -3.0, 2.0), (0.3, 0.3, 0.45))


def create_demo_scene() -> tuple[SceneManager, PinholeCamera]:
    """Build the demo scene.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager()

    red = scene.add_material(solid_texture((1.0, 0.0, 0.0)), diffuse=0.8)
    xor = scene.add_material(XOR_TEXTURE, diffuse=0.9)
    noise = scene.add_material(NOISE_TEXTURE, diffuse=0.9, reflectivity=0.1)
    mirror = scene.add_material(solid_texture((0.9, 0.9, 0.9)), diffuse=0.1, reflectivity=0.8)
    floor = scene.add_material(NOISE_TEXTURE, diffuse=0.7, reflectivity=0.2)

    for center, material_id in zip(SPHERE_CENTERS, (red, xor, noise, mirror)):
        scene.add_sphere(center, SPHERE_RADIUS, material_id)

    scene.add_plane((0.0, FLOOR_Y, 0.0), (0.0, -1.0, 0.0), floor)

    scene.add_light(*KEY_LIGHT)
    scene.add_light(*FILL_LIGHT)

    return scene, PinholeCamera(position=(0.0, 0.0, 0.0))
