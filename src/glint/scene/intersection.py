"""Scene-level closest-hit intersection over a list of spheres.

The scene stores spheres in Taichi fields for GPU-efficient access. Each
sphere carries a unified material ID; many spheres may share one ID.

``intersect_scene`` walks every sphere and narrows the upper bound of the
search interval to the closest hit found so far, so a later sphere can
only replace an earlier result with something strictly closer. The
answer therefore does not depend on insertion order.

Example:
    >>> from glint.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import math

import taichi as ti

from glint.core.ray import Ray, real
from glint.geometry.hit_record import HitRecord, miss_record
from glint.geometry.sphere import Sphere, hit_sphere

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. Field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius. Negative values build an inside-out sphere
            (the inner wall of a hollow shell); zero is rejected because
            the outward normal divides by it.
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is zero or not finite.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius == 0.0 or not math.isfinite(radius):
        raise ValueError(f"Sphere radius must be finite and non-zero, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def intersect_scene(ray: Ray, t_min: real, t_max: real) -> HitRecord:
    """Find the closest hit of a ray against every sphere in the scene.

    Args:
        ray: The ray to test.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The HitRecord of the nearest sphere within [t_min, t_max], or a
        miss record if no sphere was hit.
    """
    # Track the closest hit so far
    closest_t = t_max
    result = miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(
            center=sphere_centers[i],
            radius=sphere_radii[i],
            material_id=sphere_material_ids[i],
        )
        rec = hit_sphere(ray, sphere, t_min, closest_t)
        # Ties at closest_t keep the earlier sphere
        if rec.hit == 1 and (result.hit == 0 or rec.t < closest_t):
            closest_t = rec.t
            result = rec

    return result
