"""Unit tests for the scene aggregate (closest-hit over all spheres)."""

import math

import pytest
import taichi as ti


def _intersect(origin, direction, t_min=0.001, t_max=math.inf):
    """Run intersect_scene in a kernel and return (hit, t, material_id, front_face)."""
    from glint.core.ray import make_ray, vec3
    from glint.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    mat = ti.field(dtype=ti.i32, shape=())
    front = ti.field(dtype=ti.i32, shape=())

    ox, oy, oz = origin
    dx, dy, dz = direction

    @ti.kernel
    def test_kernel():
        for _ in range(1):
            record = intersect_scene(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)), t_min, t_max)
            hit[None] = record.hit
            t_val[None] = record.t
            mat[None] = record.material_id
            front[None] = record.front_face

    test_kernel()
    return hit[None], t_val[None], mat[None], front[None]


class TestSceneStorage:
    """Tests for adding and clearing spheres."""

    def test_add_sphere_returns_indices(self):
        """Test indices are assigned in insertion order."""
        from glint.scene.intersection import add_sphere, get_sphere_count

        assert add_sphere((0.0, 0.0, 0.0), 1.0, 0) == 0
        assert add_sphere((1.0, 0.0, 0.0), 0.5, 1) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        """Test clear_scene removes all spheres."""
        from glint.scene.intersection import add_sphere, clear_scene, get_sphere_count

        add_sphere((0.0, 0.0, 0.0), 1.0)
        clear_scene()
        assert get_sphere_count() == 0

    @pytest.mark.parametrize("radius", [0.0, math.inf, math.nan])
    def test_rejects_degenerate_radius(self, radius):
        """Test zero or non-finite radii are rejected at assembly time."""
        from glint.scene.intersection import add_sphere, get_sphere_count

        with pytest.raises(ValueError):
            add_sphere((0.0, 0.0, 0.0), radius)
        assert get_sphere_count() == 0

    def test_negative_radius_accepted(self):
        """Test inside-out spheres can be added."""
        from glint.scene.intersection import add_sphere

        assert add_sphere((0.0, 0.0, 0.0), -0.4) == 0

    def test_capacity_exceeded(self):
        """Test adding past MAX_SPHERES raises RuntimeError."""
        from glint.scene.intersection import MAX_SPHERES, add_sphere

        for k in range(MAX_SPHERES):
            add_sphere((float(k), 0.0, 0.0), 0.1)
        with pytest.raises(RuntimeError):
            add_sphere((0.0, 0.0, 0.0), 0.1)


class TestIntersectScene:
    """Tests for closest-hit queries."""

    def test_empty_scene_misses(self):
        """Test every ray misses an empty scene."""
        hit, _, mat, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 0
        assert mat == -1

    @pytest.mark.parametrize("near_first", [True, False])
    def test_overlapping_spheres_closest_wins(self, near_first):
        """Test the strictly closer of two overlapping spheres is returned in either order."""
        from glint.scene.intersection import add_sphere

        near = ((0.0, 0.0, -2.0), 0.5, 1)
        far = ((0.0, 0.0, -2.6), 0.5, 2)
        for center, radius, mat in [near, far] if near_first else [far, near]:
            add_sphere(center, radius, mat)

        hit, t, mat, front = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 1
        assert mat == 1
        assert abs(t - 1.5) < 1e-12
        assert front == 1

    def test_sphere_beyond_t_max_ignored(self):
        """Test the upper bound excludes far spheres."""
        from glint.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0, 3)
        hit, _, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=5.0)

        assert hit == 0

    def test_hollow_shell_hits_inner_wall(self):
        """Test a ray inside a shell hits the negative-radius inner sphere first."""
        from glint.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 0.5, 4)
        add_sphere((0.0, 0.0, 0.0), -0.4, 4)

        # Start between the walls, heading inward
        hit, t, mat, front = _intersect((0.0, 0.0, 0.45), (0.0, 0.0, -1.0))

        assert hit == 1
        assert mat == 4
        assert abs(t - 0.05) < 1e-12
        # Entering the air pocket is leaving the glass: back face of the inside-out sphere
        assert front == 0
