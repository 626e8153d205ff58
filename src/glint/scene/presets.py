"""Preset scenes.

This module provides factory functions for the demo scenes, each returning
a populated SceneManager together with a matching CameraConfig:

- Hollow glass: ground, a diffuse sphere flanked by a hollow glass sphere
  and a polished gold sphere
- Field of view: two touching spheres that frame a 90 degree view
- Cover: a large random field of small spheres plus three large ones,
  viewed through a defocused lens

The hollow glass sphere is built from two spheres at the same center that
share one dielectric material: the outer one with a positive radius and the
inner one with a negative radius, whose normals point inward so the inner
surface bounds an air pocket.

Example:
    >>> from glint.runtime import init_taichi
    >>> init_taichi()
    >>> from glint.scene.presets import create_cover_scene
    >>> from glint.core.render import Renderer
    >>>
    >>> scene, config = create_cover_scene(seed=7)
    >>> Renderer(config).render()
"""

import logging
import math
from collections.abc import Callable

import numpy as np

from glint.camera.thin_lens import CameraConfig
from glint.core.sampler import make_rng
from glint.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Type alias for scene factories
SceneFactory = Callable[..., tuple[SceneManager, CameraConfig]]

# Aspect ratio shared by the wide demo scenes
WIDE_ASPECT_RATIO = 16.0 / 9.0


def create_hollow_glass_scene(
    image_width: int = 400,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
) -> tuple[SceneManager, CameraConfig]:
    """Create the hollow glass sphere scene.

    Scene layout (camera at the origin looking down -z):
    - Ground: huge yellowish diffuse sphere below the scene
    - Center: blue diffuse sphere at (0, 0, -1)
    - Left: hollow glass sphere (radius 0.5 shell, radius -0.4 inner wall)
    - Right: polished gold metal sphere

    Args:
        image_width: Output image width in pixels.
        samples_per_pixel: Number of samples per pixel.
        max_depth: Maximum bounces per sample.

    Returns:
        A tuple of (SceneManager, CameraConfig).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
    center = scene.add_lambertian_material(albedo=(0.1, 0.2, 0.5))
    glass = scene.add_dielectric_material(ior=1.5)
    gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.0)

    scene.add_sphere(center=(0.0, -100.5, -1.0), radius=100.0, material_id=ground)
    scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=center)
    scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=0.5, material_id=glass)
    scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=-0.4, material_id=glass)
    scene.add_sphere(center=(1.0, 0.0, -1.0), radius=0.5, material_id=gold)

    config = CameraConfig(
        aspect_ratio=WIDE_ASPECT_RATIO,
        image_width=image_width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
    )

    return scene, config


def create_fov_scene(
    image_width: int = 400,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
) -> tuple[SceneManager, CameraConfig]:
    """Create the field-of-view test scene.

    A blue and a red diffuse sphere of radius cos(pi/4) touch at (0, 0, -1);
    with a 90 degree vertical field of view they fill the frame height.

    Returns:
        A tuple of (SceneManager, CameraConfig).
    """
    scene = SceneManager()

    r = math.cos(math.pi / 4.0)

    scene.add_lambertian_sphere(center=(-r, 0.0, -1.0), radius=r, albedo=(0.0, 0.0, 1.0))
    scene.add_lambertian_sphere(center=(r, 0.0, -1.0), radius=r, albedo=(1.0, 0.0, 0.0))

    config = CameraConfig(
        aspect_ratio=WIDE_ASPECT_RATIO,
        image_width=image_width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        vfov=90.0,
    )

    return scene, config


def _add_random_small_spheres(
    scene: SceneManager,
    rng: np.random.Generator,
    glass: int,
) -> None:
    """Scatter small spheres over a 22x22 grid, keeping clear of the metal sphere."""
    clearance_point = np.array([4.0, 0.2, 0.0])

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])

            if np.linalg.norm(center - clearance_point) <= 0.9:
                continue

            position = (float(center[0]), float(center[1]), float(center[2]))

            if choose_mat < 0.8:
                # diffuse
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(position, 0.2, tuple(albedo.tolist()))
            elif choose_mat < 0.95:
                # metal
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metal_sphere(position, 0.2, tuple(albedo.tolist()), fuzz)
            else:
                # glass
                scene.add_sphere(position, 0.2, glass)


def create_cover_scene(
    seed: int | None = None,
    image_width: int = 1200,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
) -> tuple[SceneManager, CameraConfig]:
    """Create the cover scene: a random field of spheres with depth of field.

    Scene layout:
    - Ground: huge grey diffuse sphere centered at (0, -1000, 0)
    - Small spheres: one per grid cell in [-11, 11) x [-11, 11), randomly
      diffuse (80%), metal (15%) or glass (5%)
    - Large spheres: glass at (0, 1, 0), brown diffuse at (-4, 1, 0) and
      polished metal at (4, 1, 0)

    All glass spheres share one dielectric material.

    Args:
        seed: Seed for the scene layout; None picks a fresh layout.
        image_width: Output image width in pixels.
        samples_per_pixel: Number of samples per pixel.
        max_depth: Maximum bounces per sample.

    Returns:
        A tuple of (SceneManager, CameraConfig).
    """
    rng = make_rng(seed)
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    scene.add_sphere(center=(0.0, -1000.0, 0.0), radius=1000.0, material_id=ground)

    glass = scene.add_dielectric_material(ior=1.5)

    _add_random_small_spheres(scene, rng, glass)

    scene.add_sphere(center=(0.0, 1.0, 0.0), radius=1.0, material_id=glass)
    scene.add_lambertian_sphere(center=(-4.0, 1.0, 0.0), radius=1.0, albedo=(0.4, 0.2, 0.1))
    scene.add_metal_sphere(center=(4.0, 1.0, 0.0), radius=1.0, albedo=(0.7, 0.6, 0.5), fuzz=0.0)

    logger.debug("Cover scene built with %d spheres", scene.get_sphere_count())

    config = CameraConfig(
        aspect_ratio=WIDE_ASPECT_RATIO,
        image_width=image_width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        vfov=20.0,
        look_from=(13.0, 2.0, 3.0),
        look_at=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        defocus_angle=0.6,
        focus_dist=10.0,
    )

    return scene, config


# Scene factories by command-line name
PRESETS: dict[str, SceneFactory] = {
    "hollow-glass": create_hollow_glass_scene,
    "fov": create_fov_scene,
    "cover": create_cover_scene,
}
