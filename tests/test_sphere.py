"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Interval bounds and root selection
- Negative radius (inside-out) spheres
"""

import pytest
import taichi as ti


def _hit(origin, direction, center, radius, t_min=0.001, t_max=1e30, material_id=7):
    """Run hit_sphere in a kernel and return the record as a dict."""
    from glint.core.ray import make_ray, vec3
    from glint.geometry.sphere import hit_sphere, make_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    point = ti.Vector.field(3, dtype=ti.f64, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    mat = ti.field(dtype=ti.i32, shape=())

    ox, oy, oz = origin
    dx, dy, dz = direction
    cx, cy, cz = center

    @ti.kernel
    def test_kernel():
        ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
        sphere = make_sphere(vec3(cx, cy, cz), radius, material_id)
        record = hit_sphere(ray, sphere, t_min, t_max)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face
        mat[None] = record.material_id

    test_kernel()
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": tuple(point[None]),
        "normal": tuple(normal[None]),
        "front_face": front_face[None],
        "material_id": mat[None],
    }


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from glint.core.ray import vec3
        from glint.geometry.sphere import make_sphere

        center_result = ti.Vector.field(3, dtype=ti.f64, shape=())
        radius_result = ti.field(dtype=ti.f64, shape=())
        mat_result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5, 4)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius
            mat_result[None] = sphere.material_id

        test_kernel()
        assert tuple(center_result[None]) == (1.0, 2.0, 3.0)
        assert radius_result[None] == 0.5
        assert mat_result[None] == 4


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    @pytest.mark.parametrize("r", [0.5, 1.0, 3.0])
    def test_hit_from_outside_along_z(self, r):
        """Test ray along +z from (0, 0, -2r) hits at t = r with normal (0, 0, -1)."""
        rec = _hit((0.0, 0.0, -2.0 * r), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), r)

        assert rec["hit"] == 1
        assert abs(rec["t"] - r) < 1e-12
        assert rec["front_face"] == 1
        nx, ny, nz = rec["normal"]
        assert abs(nx) < 1e-12
        assert abs(ny) < 1e-12
        assert abs(nz + 1.0) < 1e-12
        assert rec["material_id"] == 7

    def test_hit_point_on_surface(self):
        """Test hit point equals ray_at(t) and lies on the sphere."""
        rec = _hit((0.3, 0.2, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        px, py, pz = rec["point"]
        assert abs(px - 0.3) < 1e-12
        assert abs(pz - (5.0 - 2.0 * rec["t"])) < 1e-12
        assert abs(px * px + py * py + pz * pz - 1.0) < 1e-9

    def test_miss(self):
        """Test ray passing beside the sphere misses."""
        rec = _hit((2.0, 0.0, -5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 0
        assert rec["material_id"] == -1

    def test_sphere_behind_ray(self):
        """Test a sphere entirely behind the origin is not hit."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 0

    def test_inside_sphere_hits_back_face(self):
        """Test ray from the center takes the far root and reports a back face."""
        rec = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0), 2.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-12
        assert rec["front_face"] == 0
        # Normal flipped to face the ray
        assert abs(rec["normal"][0] + 1.0) < 1e-12

    def test_near_root_outside_interval_uses_far_root(self):
        """Test the larger root is used when the smaller is below t_min."""
        rec = _hit((0.0, 0.0, -2.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0, t_min=1.5)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 3.0) < 1e-12
        assert rec["front_face"] == 0

    def test_both_roots_beyond_t_max(self):
        """Test no hit when both roots exceed t_max."""
        rec = _hit((0.0, 0.0, -5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0, t_max=3.0)

        assert rec["hit"] == 0

    def test_interval_is_closed(self):
        """Test a root exactly at t_max is accepted."""
        rec = _hit((0.0, 0.0, -2.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0, t_max=1.0)

        assert rec["hit"] == 1
        assert rec["t"] == 1.0

    def test_unnormalized_direction(self):
        """Test t is measured in units of the direction length."""
        rec = _hit((0.0, 0.0, -4.0), (0.0, 0.0, 2.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.5) < 1e-12

    def test_negative_radius_flips_normal(self):
        """Test an inside-out sphere reports the outside hit as a back face."""
        rec = _hit((0.0, 0.0, -2.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), -1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-12
        assert rec["front_face"] == 0
        # Normal still faces the incoming ray
        assert abs(rec["normal"][2] + 1.0) < 1e-12
