"""Tests for the Whitted shading integrator.

This module tests the shading core including:
- Render settings validation and upload
- Ambient and Lambertian terms
- Hard shadows from occluders between surface and light
- Mirror reflection weighting and the bounce cap
- Diffuse cosine clamping option

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run, so module-level
imports of modules containing ti.field() declarations would fail.
"""

import math

import pytest


def _lit_sphere_scene(occluder: bool = False, light=(0.0, -3.0, -1.0)):
    """White diffuse sphere at z=3 lit from above the camera."""
    from glimmer.materials.texture import solid_texture
    from glimmer.scene.manager import SceneManager

    scene = SceneManager()
    white = scene.add_material(solid_texture((1.0, 1.0, 1.0)), diffuse=1.0)
    scene.add_sphere((0.0, 0.0, 3.0), 1.0, white)
    if occluder:
        # Sits on the segment from the near pole (0, 0, 2) to the light
        scene.add_sphere((0.0, -1.5, 0.5), 0.3, white)
    scene.add_light(light, (1.0, 1.0, 1.0))
    return scene


def _mirror_corridor(max_depth: int):
    """Two facing mirror planes with the camera between them."""
    from glimmer.core.integrator import RenderSettings
    from glimmer.materials.texture import solid_texture
    from glimmer.scene.manager import SceneManager

    scene = SceneManager()
    mirror = scene.add_material(solid_texture((0.5, 0.5, 0.5)), diffuse=0.0, reflectivity=1.0)
    scene.add_plane((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), mirror)
    scene.add_plane((0.0, 0.0, -5.0), (0.0, 0.0, 1.0), mirror)
    return scene, RenderSettings(max_depth=max_depth)


class TestRenderSettings:
    """Test settings validation and defaults."""

    def test_defaults(self):
        """Test the default shading constants."""
        from glimmer.core.integrator import AMBIENT, MAX_DEPTH, RAY_BIAS, RenderSettings

        settings = RenderSettings()
        assert settings.ambient == AMBIENT == 0.05
        assert settings.max_depth == MAX_DEPTH == 3
        assert settings.bias == RAY_BIAS
        assert settings.background == (0.0, 0.0, 0.0)
        assert settings.clamp_diffuse is False
        settings.validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"ambient": -0.1},
            {"max_depth": -1},
            {"max_depth": 100},
            {"bias": 0.0},
            {"bias": float("nan")},
            {"background": (0.0, 0.0)},
        ],
    )
    def test_invalid_settings(self, kwargs):
        """Test out-of-range settings are rejected by apply_settings."""
        from glimmer.core.integrator import RenderSettings, apply_settings

        with pytest.raises(ValueError):
            apply_settings(RenderSettings(**kwargs))


class TestDirectLighting:
    """Test ambient, diffuse and shadow terms."""

    def test_background_on_miss(self):
        """Test a ray that hits nothing returns the background in one step."""
        from glimmer.core.integrator import RenderSettings
        from glimmer.core.renderer import trace

        scene = _lit_sphere_scene()
        color, invocations = trace(
            scene, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), RenderSettings(background=(0.1, 0.2, 0.3))
        )
        assert color == pytest.approx((0.1, 0.2, 0.3), abs=1e-6)
        assert invocations == 1

    def test_ambient_plus_lambert(self):
        """Test the lit near pole gets ambient + cos(theta) * diffuse."""
        from glimmer.core.renderer import trace

        scene = _lit_sphere_scene()
        color, invocations = trace(scene, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))

        # Light direction from (0, 0, 2) is normalize(0, -3, -3)
        expected = 0.05 + 1.0 / math.sqrt(2.0)
        assert color == pytest.approx((expected, expected, expected), abs=1e-4)
        assert invocations == 1

    def test_occluder_blocks_light(self):
        """Test an object between surface and light leaves only ambient."""
        from glimmer.core.renderer import trace

        scene = _lit_sphere_scene(occluder=True)
        color, _ = trace(scene, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert color == pytest.approx((0.05, 0.05, 0.05), abs=1e-5)

    def test_removing_occluder_restores_light(self):
        """Test the same geometry without the occluder is lit again."""
        from glimmer.core.renderer import trace

        shadowed, _ = trace(_lit_sphere_scene(occluder=True), (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        lit, _ = trace(_lit_sphere_scene(occluder=False), (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert lit[0] > shadowed[0] + 0.5

    def test_object_beyond_light_does_not_shadow(self):
        """Test only hits closer than the light occlude it."""
        from glimmer.core.renderer import trace
        from glimmer.materials.texture import solid_texture
        from glimmer.scene.manager import SceneManager

        scene = SceneManager()
        white = scene.add_material(solid_texture((1.0, 1.0, 1.0)))
        scene.add_plane((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), white)
        # Ceiling behind the light as seen from the floor
        scene.add_plane((0.0, -10.0, 0.0), (0.0, 1.0, 0.0), white)
        scene.add_light((0.0, -2.0, 2.0))

        s = 1.0 / math.sqrt(2.0)
        color, _ = trace(scene, (0.0, 0.0, 1.0), (0.0, s, s))
        # Floor hit at (0, 1, 2), light straight above it
        assert color[0] == pytest.approx(1.05, abs=1e-4)

    def test_light_color_and_diffuse_scale(self):
        """Test the diffuse term is base * diffuse * light color."""
        from glimmer.core.renderer import trace
        from glimmer.materials.texture import solid_texture
        from glimmer.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_material(solid_texture((1.0, 0.5, 0.25)), diffuse=0.5)
        scene.add_sphere((0.0, 0.0, 3.0), 1.0, mat)
        scene.add_light((0.0, 0.0, -1.0), (2.0, 1.0, 0.0))

        color, _ = trace(scene, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        # cos = 1 at the near pole
        assert color == pytest.approx(
            (1.0 * 0.05 + 1.0 * 0.5 * 2.0, 0.5 * 0.05 + 0.5 * 0.5 * 1.0, 0.25 * 0.05),
            abs=1e-4,
        )

    def test_multiple_lights_add(self):
        """Test contributions from several lights are summed."""
        from glimmer.core.renderer import trace
        from glimmer.materials.texture import solid_texture
        from glimmer.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_material(solid_texture((1.0, 1.0, 1.0)))
        scene.add_sphere((0.0, 0.0, 3.0), 1.0, mat)
        scene.add_light((0.0, 0.0, -1.0), (0.25, 0.25, 0.25))
        scene.add_light((0.0, 0.0, -4.0), (0.5, 0.5, 0.5))

        color, _ = trace(scene, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert color[0] == pytest.approx(0.05 + 0.75, abs=1e-4)


class TestDiffuseClamp:
    """Test the signed and clamped diffuse cosine."""

    def _floor_lit_from_below(self):
        from glimmer.materials.texture import solid_texture
        from glimmer.scene.manager import SceneManager

        # Plane normal points toward -y; the light is on the +y side
        scene = SceneManager()
        mat = scene.add_material(solid_texture((1.0, 1.0, 1.0)))
        scene.add_plane((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), mat)
        scene.add_light((0.0, 3.0, 2.0))
        return scene

    def test_unclamped_by_default(self):
        """Test a light behind the surface subtracts light by default."""
        from glimmer.core.renderer import trace

        s = 1.0 / math.sqrt(2.0)
        color, _ = trace(self._floor_lit_from_below(), (0.0, 0.0, 1.0), (0.0, s, s))
        assert color[0] == pytest.approx(0.05 - 1.0, abs=1e-4)

    def test_clamped_when_enabled(self):
        """Test clamp_diffuse removes the negative contribution."""
        from glimmer.core.integrator import RenderSettings
        from glimmer.core.renderer import trace

        s = 1.0 / math.sqrt(2.0)
        color, _ = trace(
            self._floor_lit_from_below(),
            (0.0, 0.0, 1.0),
            (0.0, s, s),
            RenderSettings(clamp_diffuse=True),
        )
        assert color[0] == pytest.approx(0.05, abs=1e-5)


class TestReflection:
    """Test mirror reflection and the bounce cap."""

    def test_bounce_cap_between_mirrors(self):
        """Test two facing mirrors stop after the primary ray plus max_depth bounces."""
        from glimmer.core.renderer import trace

        scene, settings = _mirror_corridor(max_depth=3)
        color, invocations = trace(scene, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0), settings)

        assert invocations == 4
        # Each of the four hits adds ambient * base at full reflectivity
        assert color == pytest.approx((0.1, 0.1, 0.1), abs=1e-5)

    @pytest.mark.parametrize("max_depth", [0, 1, 5])
    def test_bounce_cap_follows_setting(self, max_depth):
        """Test the cap is configurable."""
        from glimmer.core.renderer import trace

        scene, settings = _mirror_corridor(max_depth=max_depth)
        _, invocations = trace(scene, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0), settings)
        assert invocations == max_depth + 1

    def test_reflection_ray_escaping_counts_once(self):
        """Test a reflection that escapes the scene ends the chain with background."""
        from glimmer.core.integrator import RenderSettings
        from glimmer.core.renderer import trace
        from glimmer.materials.texture import solid_texture
        from glimmer.scene.manager import SceneManager

        scene = SceneManager()
        mirror = scene.add_material(solid_texture((0.0, 0.0, 0.0)), diffuse=0.0, reflectivity=0.5)
        scene.add_sphere((0.0, 0.0, 3.0), 1.0, mirror)

        color, invocations = trace(
            scene,
            (0.0, 0.0, 0.0),
            (0.0, 0.0, 1.0),
            RenderSettings(background=(1.0, 1.0, 1.0)),
        )
        assert invocations == 2
        # Black sphere; the reflected background is weighted by reflectivity
        assert color == pytest.approx((0.5, 0.5, 0.5), abs=1e-5)

    def test_reflection_sees_other_object(self):
        """Test a mirror floor reflects the sphere above it."""
        from glimmer.core.renderer import trace
        from glimmer.materials.texture import solid_texture
        from glimmer.scene.manager import SceneManager

        scene = SceneManager()
        mirror = scene.add_material(solid_texture((0.0, 0.0, 0.0)), diffuse=0.0, reflectivity=1.0)
        red = scene.add_material(solid_texture((1.0, 0.0, 0.0)), diffuse=0.0)
        scene.add_plane((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), mirror)
        scene.add_sphere((0.0, 0.0, 3.0), 0.5, red)

        s = 1.0 / math.sqrt(2.0)
        # Hits the floor at (0, 1, 2); the mirrored ray passes through (0, 0, 3)
        color, invocations = trace(scene, (0.0, 0.0, 1.0), (0.0, s, s))
        assert invocations == 2
        assert color[0] == pytest.approx(0.05, abs=1e-5)
        assert color[1] == pytest.approx(0.0, abs=1e-6)

    def test_non_reflective_stops(self):
        """Test zero reflectivity ends shading at the first hit."""
        from glimmer.core.renderer import trace

        _, invocations = trace(_lit_sphere_scene(), (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert invocations == 1


class TestShadeRay:
    """Test the low-level shade_ray entry point."""

    def test_shade_ray_uses_uploaded_scene(self):
        """Test shade_ray shades whatever scene was synced last."""
        from glimmer.core.integrator import RenderSettings, apply_settings, shade_ray

        scene = _lit_sphere_scene()
        scene.sync()
        apply_settings(RenderSettings())

        color, invocations = shade_ray((0.0, 0.0, 0.0), (0.0, 0.0, 2.0))
        assert color[0] == pytest.approx(0.05 + 1.0 / math.sqrt(2.0), abs=1e-4)
        assert invocations == 1

    def test_shade_ray_zero_direction(self):
        """Test a zero direction raises ValueError."""
        from glimmer.core.integrator import shade_ray

        with pytest.raises(ValueError):
            shade_ray((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
