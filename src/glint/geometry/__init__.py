"""Geometry module for hit records and shape primitives.

Components:
    hit_record: The HitRecord shared by all surfaces and the face-orientation
        step every surface applies to its outward normal
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) and follow the pattern:
    rec = hit_shape(ray, shape, t_min, t_max)

The closest-hit aggregate over all spheres lives in glint.scene.intersection.
"""

from .hit_record import HitRecord, face_normal, miss_record
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "face_normal",
    "miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
]
