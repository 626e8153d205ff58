"""Pytest configuration for glint tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Debug mode turns
    on kernel assertions.
    """
    from glint.runtime import init_taichi

    init_taichi(arch="cpu", seed=42, debug=True)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized
    from glint.core.integrator import reset_render_target
    from glint.core.sampler import clear_fixed_sample
    from glint.materials.dielectric import clear_dielectric_materials
    from glint.materials.lambertian import clear_lambertian_materials
    from glint.materials.metal import clear_metal_materials
    from glint.scene.intersection import clear_scene
    from glint.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        clear_fixed_sample()
        reset_render_target()

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()
