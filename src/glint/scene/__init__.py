"""Scene module for scene management.

This module handles scene representation and ray-scene queries:

Components:
    intersection: Sphere storage and closest-hit queries over the scene
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made demo scenes with matching cameras

Scene data is organized for efficient Taichi access:
    - Structure-of-Arrays layout for sphere data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import (
    PRESETS,
    create_cover_scene,
    create_fov_scene,
    create_hollow_glass_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "PRESETS",
    "create_hollow_glass_scene",
    "create_fov_scene",
    "create_cover_scene",
]
