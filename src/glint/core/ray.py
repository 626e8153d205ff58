"""Ray data structure and vector utilities for GPU-accelerated ray tracing.

This module provides the Ray dataclass, the double precision ``vec3`` used
for points, directions and colors alike, and the vector helpers the
scattering models need. All operations are designed to work within Taichi
kernels. Plain arithmetic (add, subtract, negate, scale, component-wise
multiply, divide) comes from the Taichi vector type itself.

Example:
    >>> import taichi as ti
    >>> from glint.runtime import init_taichi
    >>> init_taichi()
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> # inside a kernel:
    >>> # ray = make_ray(origin, direction)
    >>> # point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from glint.core.sampler import random_float

# Scalar and 3D vector types (double precision throughout)
real = ti.f64
vec3 = ti.types.vector(3, ti.f64)

# Components below this magnitude count as zero
NEAR_ZERO_EPSILON = 1e-8

# Unit-sphere samples at or below this squared length are redrawn
MIN_SAMPLE_LENGTH_SQUARED = 1e-160


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to
            be unit length; camera rays in particular are not normalized.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: real) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> real:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> real:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Callers must never pass a zero vector. In debug mode the kernel aborts
    on that contract violation; otherwise the result is non-finite.

    Args:
        v: The input vector.

    Returns:
        v / length(v).
    """
    n = tm.length(v)
    assert n > 0.0, "unit_vector() called on a zero-length vector"
    return v / n


@ti.func
def dot(a: vec3, b: vec3) -> real:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch diffuse scatter directions that cancel out.

    Args:
        v: The vector to check.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes v - 2 * dot(v, n) * n. The normal must be unit length; the
    incident vector may have any length and the result keeps it.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(uv: vec3, normal: vec3, etai_over_etat: real) -> vec3:
    """Refract a unit direction through a surface with Snell's law.

    The refracted ray is split into the part perpendicular to the normal,
    eta * (uv + cos_theta * n), and the parallel part, whose length follows
    from the refracted direction being unit length.

    Args:
        uv: The incoming direction (unit length).
        normal: The surface normal facing the incoming ray (unit length).
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted unit direction. Callers handle total internal
        reflection before calling this.
    """
    cos_theta = tm.min(tm.dot(-uv, normal), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: real, ref_idx: real) -> real:
    """Compute Fresnel reflectance using Schlick's approximation.

    r0 = ((1 - eta) / (1 + eta))^2, reflectance = r0 + (1 - r0) * (1 - cos)^5.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        The approximate reflectance in [r0, 1].
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3() -> vec3:
    """Generate a vector with each component uniform in [0, 1)."""
    return vec3(random_float(), random_float(), random_float())


@ti.func
def random_vec3_range(lo: real, hi: real) -> vec3:
    """Generate a vector with each component uniform in [lo, hi)."""
    return lo + (hi - lo) * random_vec3()


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling over the [-1, 1)^3 cube. Points too close to the
    origin are rejected as well, so the result can always be normalized.
    If every draw is rejected (only possible with a pinned sampler) a fixed
    point on the +z axis is returned.

    Returns:
        A random point with squared length in (MIN_SAMPLE_LENGTH_SQUARED, 1).
    """
    p = vec3(0.0, 0.0, 0.5)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            candidate = random_vec3_range(-1.0, 1.0)
            len_sq = length_squared(candidate)
            if len_sq > MIN_SAMPLE_LENGTH_SQUARED and len_sq < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    This is the normalized version of random_in_unit_sphere().
    """
    return unit_vector(random_in_unit_sphere())


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used to sample the camera lens for depth of field.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                random_float() * 2.0 - 1.0,
                random_float() * 2.0 - 1.0,
                0.0,
            )
            if length_squared(p) < 1.0:
                found = True
    return p
