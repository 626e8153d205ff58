"""Dielectric (glass/water) material implementation.

This module implements clear dielectrics, which reflect and refract light
without tinting it.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for the reflectance
    - Total internal reflection when the refraction ratio * sin(theta) > 1

Outside total internal reflection, a uniform draw is compared against the
Schlick reflectance to choose between reflecting and refracting, so the
share of reflected paths grows toward grazing angles.

Example:
    >>> from glint.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, ray.direction, rec.normal, rec.front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from glint.core.ray import (
    real,
    reflect,
    refract,
    schlick_reflectance,
    unit_vector,
    vec3,
)
from glint.core.sampler import random_float
from glint.materials.registry import check_positive, claim_slot


@ti.func
def _refraction_ratio(ior: real, front_face: ti.i32) -> real:
    """Ratio n_incident / n_transmitted for the side the ray arrives on."""
    # Entering from outside: air to material; leaving: material to air
    return ti.select(front_face == 1, 1.0 / ior, ior)


@ti.func
def _cos_sin_theta(unit_direction: vec3, normal: vec3):
    """Cosine and sine of the incidence angle."""
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return cos_theta, sin_theta


@ti.func
def scatter_dielectric(
    ior: real,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal facing the incoming ray (unit length).
        front_face: 1 if the ray hits the outside of the surface,
            0 if it is inside the material hitting from within.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted unit direction.
        - attenuation: White; clear glass does not absorb.
        - did_scatter: Always 1 for dielectrics.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    refraction_ratio = _refraction_ratio(ior, front_face)

    unit_direction = unit_vector(incident_direction)
    cos_theta, sin_theta = _cos_sin_theta(unit_direction, normal)

    cannot_refract = refraction_ratio * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or random_float() < schlick_reflectance(cos_theta, refraction_ratio):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    did_scatter = 1

    return scattered_direction, attenuation, did_scatter


@ti.func
def will_reflect(
    ior: real,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal facing the incoming ray (unit length).
        front_face: 1 if the ray hits the outside of the surface.

    Returns:
        1 if the ray cannot refract, 0 otherwise.
    """
    refraction_ratio = _refraction_ratio(ior, front_face)
    _, sin_theta = _cos_sin_theta(unit_vector(incident_direction), normal)
    return 1 if refraction_ratio * sin_theta > 1.0 else 0


@ti.func
def fresnel_reflectance(
    ior: real,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> real:
    """Probability of reflection from Schlick's approximation.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal facing the incoming ray (unit length).
        front_face: 1 if the ray hits the outside of the surface.

    Returns:
        The reflectance in [0, 1].
    """
    refraction_ratio = _refraction_ratio(ior, front_face)
    cos_theta, _ = _cos_sin_theta(unit_vector(incident_direction), normal)
    return schlick_reflectance(cos_theta, refraction_ratio)


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

MAX_DIELECTRIC_MATERIALS = 256

dielectric_iors = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Forget every registered material; old slots are overwritten on reuse."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Store a dielectric material and return its per-type slot.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Values below 1.0 are allowed and model a medium less dense
            than its surroundings (an air bubble in water, ior 1/1.33).

    Returns:
        The slot index, counted per material type.

    Raises:
        RuntimeError: If the registry is full.
        ValueError: If IOR is not positive.
    """
    ior = check_positive("Index of refraction", ior)
    idx = claim_slot(num_dielectric_materials, MAX_DIELECTRIC_MATERIALS, "Dielectric")
    dielectric_iors[idx] = ior
    return idx


def get_dielectric_material_count() -> int:
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> real:
    """Get the IOR for a dielectric material by index."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Scatter off a dielectric material looked up by registry index.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    ior = get_dielectric_ior(material_idx)
    return scatter_dielectric(ior, incident_direction, normal, front_face)
