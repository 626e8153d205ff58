"""Sphere primitive with ray-sphere intersection.

The intersection solves |O + tD - C|^2 = r^2 with the half-b form of the
quadratic formula and accepts the nearest root inside the closed interval
[t_min, t_max]. The radius only enters the quadratic squared, so its sign
does not change where a sphere is hit. It does change the outward normal
(p - C) / r: a negative radius turns the sphere inside out, which is how a
hollow glass shell is built from an outer sphere and a smaller inner one
sharing the same dielectric.

Example:
    >>> from glint.geometry.sphere import Sphere, hit_sphere
    >>> # inside a kernel:
    >>> # sphere = Sphere(center=vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # rec = hit_sphere(ray, sphere, 0.001, tm.inf)
"""

import taichi as ti
import taichi.math as tm

from glint.core.ray import Ray, ray_at, real, vec3
from glint.geometry.hit_record import HitRecord, face_normal


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius. Negative values keep the geometry but invert
            the outward normal (hollow shells). Zero is rejected when the
            sphere is added to a scene.
        material_id: The unified material ID shared with other spheres.
    """

    center: vec3
    radius: real
    material_id: ti.i32


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: real, t_max: real) -> HitRecord:
    """Test for ray-sphere intersection.

    Expanding the sphere equation gives a*t^2 + 2*h*t + c = 0 with:
        oc = origin - center
        a = dot(direction, direction)
        h = dot(oc, direction)  (half of traditional b)
        c = dot(oc, oc) - radius^2

    The smaller root (-h - sqrt(d)) / a is tried first; if it lies outside
    [t_min, t_max] the larger root is tried.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test intersection against.
        t_min: Smallest accepted ray parameter (avoids self-intersection).
        t_max: Largest accepted ray parameter (closest hit so far).

    Returns:
        A fully populated HitRecord, or a record with hit == 0.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Find the nearest root that lies in the acceptable range
        root = (-half_b - sqrt_d) / a
        valid = t_min <= root and root <= t_max
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = t_min <= root and root <= t_max

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)
            outward_normal = (hit_point - sphere.center) / sphere.radius
            is_front_face, hit_normal = face_normal(ray.direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        material_id=ti.select(did_hit == 1, sphere.material_id, -1),
    )


@ti.func
def make_sphere(center: vec3, radius: real, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material ID."""
    return Sphere(center=center, radius=radius, material_id=material_id)
