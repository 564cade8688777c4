"""Sphere primitive with two-root ray-sphere intersection.

The intersection solves ``|O + tD - C|^2 = r^2`` in half-b form:

    oc = C - O
    a = |D|^2
    h = dot(D, oc)
    c = |oc|^2 - r^2
    discriminant = h^2 - a*c

A negative discriminant is an ordinary miss. Otherwise the nearer root
``(h - sqrt(discriminant)) / a`` is tried first and the farther root second,
each accepted only if it lies strictly inside the query interval. Trying the
far root is what lets a ray that starts inside a sphere (refraction through
a glass ball or a bubble) find its exit point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from termtrace.core.interval import Interval
from termtrace.core.ray import Ray, ray_at, vec3
from termtrace.core.rng import REAL


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: REAL


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 on a miss.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal, always facing against the ray.
            Only valid if hit == 1.
        front_face: 1 if the outward normal already faced against the ray
            (the ray arrived from outside), 0 otherwise.
    """

    hit: ti.i32
    t: REAL
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient an outward normal against the incoming ray.

    Returns:
        A tuple of (normal, front_face).
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return normal, front_face


@ti.func
def make_hit_record(ray: Ray, t, center: vec3, radius) -> HitRecord:
    """Build a hit record for a sphere hit at parameter t."""
    point = ray_at(ray, t)
    outward_normal = (point - center) / radius
    normal, front_face = face_normal(ray.direction, outward_normal)
    return HitRecord(hit=1, t=t, point=point, normal=normal, front_face=front_face)


@ti.func
def make_miss_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, interval: Interval) -> HitRecord:
    """Intersect a ray with a sphere.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        interval: Valid range of the ray parameter; a root is accepted only
            if the interval strictly surrounds it.

    Returns:
        A HitRecord for the nearest accepted root. Check the hit field to
        determine whether an intersection occurred.
    """
    oc = sphere.center - ray.origin
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Prefer the nearer root, fall back to the farther one
        root = (h - sqrt_d) / a
        valid = interval.surrounds(root)
        if not valid:
            root = (h + sqrt_d) / a
            valid = interval.surrounds(root)

        if valid:
            result = make_hit_record(ray, root, sphere.center, sphere.radius)

    return result


@ti.func
def make_sphere(center: vec3, radius) -> Sphere:
    """Create a sphere within a Taichi kernel."""
    return Sphere(center=center, radius=radius)
