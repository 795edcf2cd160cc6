"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (length, distance, reflection, origin offset)
- Python-side normalization and its error cases
"""

import math

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from glimmer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, 1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_make_ray_and_ray_at(self):
        """Test make_ray builds a ray that ray_at can walk along."""
        from glimmer.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 1.0, 0.0), vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2] - 0.0) < 1e-6


class TestVectorUtilities:
    """Tests for the Taichi vector helpers."""

    def test_length_and_distance_squared(self):
        """Test squared length and squared distance."""
        from glimmer.core.ray import distance_squared, length_squared, vec3

        length2 = ti.field(dtype=ti.f32, shape=())
        dist2 = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            length2[None] = length_squared(vec3(1.0, 2.0, 2.0))
            dist2[None] = distance_squared(vec3(1.0, 1.0, 1.0), vec3(4.0, 5.0, 1.0))

        test_kernel()
        assert abs(length2[None] - 9.0) < 1e-6
        assert abs(dist2[None] - 25.0) < 1e-6

    def test_reflect_view_head_on(self):
        """Test a view vector along the normal reflects onto itself."""
        from glimmer.core.ray import reflect_view, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            # Surface facing -z, viewer 5 units in front of it
            result[None] = reflect_view(vec3(0.0, 0.0, -5.0), vec3(0.0, 0.0, -1.0))

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2] - (-1.0)) < 1e-6

    def test_reflect_view_oblique(self):
        """Test a 45 degree view vector mirrors across the normal."""
        from glimmer.core.ray import reflect_view, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            # Floor with normal +y; viewer up and to the left
            result[None] = reflect_view(vec3(-1.0, 1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        s = 1.0 / math.sqrt(2.0)
        assert abs(r[0] - s) < 1e-6
        assert abs(r[1] - s) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_reflect_view_is_unit_length(self):
        """Test the reflected direction is normalized even for long views."""
        from glimmer.core.ray import reflect_view, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            r = reflect_view(vec3(3.0, 7.0, -2.0), vec3(0.0, 0.0, -1.0))
            result[None] = r.norm()

        test_kernel()
        assert abs(result[None] - 1.0) < 1e-5

    def test_offset_origin_moves_along_direction(self):
        """Test secondary ray origins are pushed along their direction."""
        from glimmer.core.ray import offset_origin, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = offset_origin(vec3(1.0, 2.0, 3.0), vec3(0.0, 1.0, 0.0), 0.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.5) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6


class TestNormalizeTuple:
    """Tests for the Python-side normalize_tuple helper."""

    def test_normalizes(self):
        """Test a simple vector is scaled to unit length."""
        from glimmer.core.ray import normalize_tuple

        assert normalize_tuple((0.0, 3.0, 4.0)) == pytest.approx((0.0, 0.6, 0.8))

    def test_zero_vector_raises(self):
        """Test the zero vector is rejected."""
        from glimmer.core.ray import normalize_tuple

        with pytest.raises(ValueError, match="cannot be normalized"):
            normalize_tuple((0.0, 0.0, 0.0), "Ray direction")

    def test_non_finite_raises(self):
        """Test NaN and infinite components are rejected."""
        from glimmer.core.ray import normalize_tuple

        with pytest.raises(ValueError):
            normalize_tuple((float("nan"), 0.0, 1.0))
        with pytest.raises(ValueError):
            normalize_tuple((float("inf"), 0.0, 1.0))

    def test_wrong_length_raises(self):
        """Test vectors without exactly three components are rejected."""
        from glimmer.core.ray import normalize_tuple

        with pytest.raises(ValueError, match="3 components"):
            normalize_tuple((1.0, 0.0))
