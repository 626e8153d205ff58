"""Metal (specular reflective) material implementation.

Perfect metals (fuzz=0) produce mirror-like reflections. Rougher metals
offset the mirror direction by a random unit vector scaled by ``fuzz``,
which blurs highlights. The reflection formula is:
    R = I - 2(I . N)N

If the fuzz offset pushes the reflected direction below the surface the
ray is absorbed.

Example:
    >>> from glint.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, ray.direction, rec.normal
    >>> # )
"""

import math

import taichi as ti
import taichi.math as tm

from glint.core.ray import random_unit_vector, real, reflect, unit_vector, vec3
from glint.materials.registry import check_albedo, claim_slot


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: real,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The perturbation radius in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal facing the incoming ray (unit length).

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The fuzzed reflection (not normalized).
        - attenuation: The albedo.
        - did_scatter: 1 if the direction leaves the surface, 0 if absorbed.
    """
    reflected = reflect(unit_vector(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_unit_vector()

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

MAX_METAL_MATERIALS = 512

metal_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f64, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Forget every registered material; old slots are overwritten on reuse."""
    num_metal_materials[None] = 0


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz value into [0, 1].

    Raises:
        ValueError: If fuzz is NaN or infinite.
    """
    if not math.isfinite(fuzz):
        raise ValueError(f"fuzz must be finite, got {fuzz}")
    return min(max(fuzz, 0.0), 1.0)


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Store a metal material and return its per-type slot.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component should be in [0, 1].
        fuzz: The perturbation radius. Finite values are clamped to [0, 1].

    Returns:
        The slot index, counted per material type.

    Raises:
        RuntimeError: If the registry is full.
        ValueError: If any albedo component is outside [0, 1] or fuzz
            is not finite.
    """
    rgb = check_albedo(albedo)
    fuzz = clamp_fuzz(fuzz)
    idx = claim_slot(num_metal_materials, MAX_METAL_MATERIALS, "Metal")
    metal_albedos[idx] = list(rgb)
    metal_fuzzes[idx] = fuzz
    return idx


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> real:
    """Get the fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    """Scatter off a metal material looked up by registry index.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, incident_direction, normal)
