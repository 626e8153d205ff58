"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Unified material ids and type lookup inside kernels
- Sphere addition, shared materials and hollow shells
- Scene serialization (to_config, from_config, to_dict, from_dict)
- Scene clearing
"""

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from glint.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_ids_are_dense_across_types(self, fresh_scene):
        """Test unified ids count up regardless of material type."""
        id0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        id1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.0)
        id2 = fresh_scene.add_dielectric_material(ior=1.5)
        id3 = fresh_scene.add_lambertian_material(albedo=(0.1, 0.8, 0.1))

        assert (id0, id1, id2, id3) == (0, 1, 2, 3)
        assert fresh_scene.get_material_count() == 4

    def test_material_validation(self, fresh_scene):
        """Test out-of-range albedo and non-positive ior raise ValueError."""
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material(albedo=(1.5, 0.0, 0.0))
        with pytest.raises(ValueError):
            fresh_scene.add_metal_material(albedo=(-0.1, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(ior=0.0)

        assert fresh_scene.get_material_count() == 0

    def test_bubble_ior_allowed(self, fresh_scene):
        """Test an ior below 1 (air bubble in glass) is accepted."""
        assert fresh_scene.add_dielectric_material(ior=1.0 / 1.33) == 0

    @pytest.mark.parametrize(("fuzz", "stored"), [(-0.5, 0.0), (0.3, 0.3), (4.0, 1.0)])
    def test_metal_fuzz_clamped(self, fresh_scene, fuzz, stored):
        """Test fuzz is clamped to [0, 1] and the clamped value is recorded."""
        from glint.materials.metal import get_metal_fuzz

        mat_id = fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=fuzz)
        info = fresh_scene.get_material_info(mat_id)
        assert info.params["fuzz"] == stored

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = get_metal_fuzz(0)

        test_kernel()
        assert result[None] == pytest.approx(stored)

    def test_get_material_info(self, fresh_scene):
        """Test full material info is recorded."""
        from glint.scene.manager import MaterialType

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)

        info = fresh_scene.get_material_info(1)
        assert info is not None
        assert info.material_id == 1
        assert info.material_type == MaterialType.METAL
        assert info.type_index == 0
        assert info.params["albedo"] == (0.8, 0.6, 0.2)
        assert fresh_scene.get_material_info(99) is None


class TestMaterialTypeLookup:
    """Tests for kernel-side material lookup."""

    def test_type_and_index(self, fresh_scene):
        """Test unified ids resolve to their type and per-type index."""
        from glint.scene.manager import MaterialType, get_material_type, get_material_type_index

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))  # id=0, lambertian[0]
        fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8))  # id=1, metal[0]
        fresh_scene.add_lambertian_material(albedo=(0.2, 0.2, 0.8))  # id=2, lambertian[1]
        fresh_scene.add_dielectric_material(ior=1.5)  # id=3, dielectric[0]

        ids = ti.field(dtype=ti.i32, shape=6)
        types = ti.field(dtype=ti.i32, shape=6)
        indices = ti.field(dtype=ti.i32, shape=6)
        # Ids 4 and -1 are invalid
        for k, material_id in enumerate([0, 1, 2, 3, 4, -1]):
            ids[k] = material_id

        @ti.kernel
        def test_kernel():
            for k in range(6):
                types[k] = get_material_type(ids[k])
                indices[k] = get_material_type_index(ids[k])

        test_kernel()

        assert [types[k] for k in range(4)] == [
            int(MaterialType.LAMBERTIAN),
            int(MaterialType.METAL),
            int(MaterialType.LAMBERTIAN),
            int(MaterialType.DIELECTRIC),
        ]
        assert [indices[k] for k in range(4)] == [0, 0, 1, 0]
        assert types[4] == -1 and types[5] == -1
        assert indices[4] == -1 and indices[5] == -1


class TestSpheres:
    """Tests for adding spheres."""

    def test_add_sphere_with_material(self, fresh_scene):
        """Test adding a sphere that references a material."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        sphere_idx = fresh_scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=mat_id)

        assert sphere_idx == 0
        assert fresh_scene.get_sphere_count() == 1

    @pytest.mark.parametrize("material_id", [-1, 0, 999])
    def test_add_sphere_invalid_material(self, fresh_scene, material_id):
        """Test unknown material ids are rejected before the sphere is stored."""
        with pytest.raises(ValueError):
            fresh_scene.add_sphere(center=(0.0, 0.0, 0.0), radius=1.0, material_id=material_id)
        assert fresh_scene.get_sphere_count() == 0

    def test_zero_radius_rejected(self, fresh_scene):
        """Test a zero radius raises ValueError."""
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_sphere(center=(0.0, 0.0, 0.0), radius=0.0, material_id=mat_id)

    def test_shared_material_hollow_shell(self, fresh_scene):
        """Test two spheres may share one material, one with negative radius."""
        glass = fresh_scene.add_dielectric_material(ior=1.5)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)

        assert fresh_scene.get_material_count() == 1
        assert fresh_scene.get_sphere_count() == 2
        assert [s.material_id for s in fresh_scene.spheres] == [glass, glass]
        assert fresh_scene.spheres[1].radius == -0.4

    def test_convenience_methods(self, fresh_scene):
        """Test add_*_sphere create a material and a sphere each."""
        from glint.scene.manager import MaterialType

        s0, m0 = fresh_scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
        s1, m1 = fresh_scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=0.3)
        s2, m2 = fresh_scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5, ior=1.5)

        assert (s0, s1, s2) == (0, 1, 2)
        assert (m0, m1, m2) == (0, 1, 2)
        assert fresh_scene.get_material_info(m1).material_type == MaterialType.METAL
        assert fresh_scene.get_material_info(m2).material_type == MaterialType.DIELECTRIC

    def test_clear(self, fresh_scene):
        """Test clear() resets spheres and materials."""
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        fresh_scene.clear()

        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.materials == []
        assert fresh_scene.spheres == []

    def test_new_manager_clears_previous_scene(self, fresh_scene):
        """Test creating a SceneManager replaces the global scene."""
        from glint.scene.manager import SceneManager

        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        other = SceneManager()

        assert other.get_sphere_count() == 0
        assert other.get_material_count() == 0


class TestSceneSerialization:
    """Tests for scene serialization."""

    def test_to_config(self, fresh_scene):
        """Test exporting the scene to a config."""
        mat0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        mat1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=2.0)
        fresh_scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=mat0)
        fresh_scene.add_sphere(center=(1.0, 0.0, -1.0), radius=0.5, material_id=mat1)

        config = fresh_scene.to_config()

        assert config.materials[0] == {"type": "lambertian", "albedo": [0.8, 0.3, 0.3]}
        assert config.materials[1] == {"type": "metal", "albedo": [0.8, 0.6, 0.2], "fuzz": 1.0}
        assert config.spheres[1] == {"center": [1.0, 0.0, -1.0], "radius": 0.5, "material_id": 1}

    def test_to_dict_from_dict(self, fresh_scene):
        """Test a scene survives export and re-import."""
        glass = fresh_scene.add_dielectric_material(ior=1.5)
        ground = fresh_scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        fresh_scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        fresh_scene.add_sphere((-1.0, 0.0, -1.0), -0.4, glass)

        data = fresh_scene.to_dict()
        fresh_scene.from_dict(data)

        assert fresh_scene.get_material_count() == 2
        assert fresh_scene.get_sphere_count() == 3
        assert fresh_scene.to_dict() == data

    def test_from_config_invalid_material_type(self, fresh_scene):
        """Test an unknown material type raises ValueError."""
        from glint.scene.manager import SceneConfig

        config = SceneConfig(materials=[{"type": "unknown_material"}], spheres=[])

        with pytest.raises(ValueError, match="Unknown material type"):
            fresh_scene.from_config(config)

    def test_from_config_bad_material_reference(self, fresh_scene):
        """Test a sphere pointing past the material list raises ValueError."""
        from glint.scene.manager import SceneConfig

        config = SceneConfig(
            materials=[{"type": "dielectric", "ior": 1.5}],
            spheres=[{"center": [0.0, 0.0, 0.0], "radius": 1.0, "material_id": 3}],
        )

        with pytest.raises(ValueError):
            fresh_scene.from_config(config)

    def test_capacity(self):
        """Test capacity limits are exposed."""
        from glint.scene.manager import MAX_MATERIALS, SceneManager
        from glint.scene.intersection import MAX_SPHERES

        assert SceneManager.get_max_spheres() == MAX_SPHERES
        assert SceneManager.get_max_materials() == MAX_MATERIALS
