"""Geometry module for shape primitives.

This module provides the sphere primitive and its intersection routine:

Components:
    sphere: Sphere dataclass, hit records and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) called from the
rendering kernels. Ray-object intersection follows the pattern:
    record = hit_sphere(ray, sphere, interval)
"""

from .sphere import (
    HitRecord,
    Sphere,
    face_normal,
    hit_sphere,
    make_hit_record,
    make_miss_record,
    make_sphere,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_hit_record",
    "make_miss_record",
    "face_normal",
]
