"""Hit record shared by every surface type.

A HitRecord is rebuilt in full by each successful intersection test. Failed
tests return ``miss_record()``, so no field from an earlier hit can leak.

The normal stored in a record always faces the incoming ray. Surfaces
compute their geometric outward normal and pass it through
``face_normal()``, which decides the front/back face and flips the normal
when the ray arrives from inside.
"""

import taichi as ti
import taichi.math as tm

from glint.core.ray import real, vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The world-space hit location. Only valid if hit == 1.
        normal: Unit surface normal oriented against the ray, so that
            dot(ray.direction, normal) <= 0. Only valid if hit == 1.
        front_face: 1 if the ray struck the outward-facing side, 0 if it
            came from inside. Only valid if hit == 1.
        material_id: The unified material ID of the surface that was hit.
            -1 on a miss.
    """

    hit: ti.i32
    t: real
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a geometric normal against the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: The surface's outward normal (unit length).

    Returns:
        A tuple (front_face, normal): front_face is 1 when the ray hits the
        outside of the surface, and normal is the outward normal, negated
        when the ray hits from inside.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )
