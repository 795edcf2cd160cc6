"""Taichi-based Whitted-style ray tracer.

This package renders static scenes of spheres, planes and point lights with:
- Ambient plus Lambertian diffuse lighting from point lights
- Hard shadows via shadow rays
- Bounded mirror reflection
- Solid and procedural (XOR, hash noise) textures
- Fixed-kernel antialiasing over a data-parallel pixel loop

Subpackages:
    core: Ray helpers, shading integrator, and the frame driver
    geometry: Sphere and plane primitives with intersection and uv mapping
    materials: Texture table and the shared material arena
    scene: Primitive storage, nearest-hit query, lights, scene manager
    camera: Pinhole primary ray generation
    preview: PNG export and matplotlib preview
"""

__version__ = "0.1.0"
