"""Scene-level sphere intersection testing.

This module stores the scene's spheres in Taichi fields and finds the
closest hit along a ray together with the material of the sphere it hit.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from termtrace.core.interval import Interval, make_interval
from termtrace.core.ray import Ray, vec3
from termtrace.core.rng import REAL
from termtrace.geometry.sphere import HitRecord, Sphere, hit_sphere


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 on a miss.
        t: The ray parameter of the closest hit. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit normal, facing against the ray. Only valid if hit == 1.
        front_face: 1 if the ray hit the outside of the surface.
        material_id: The unified material id of the hit sphere, -1 on a miss.
    """

    hit: ti.i32
    t: REAL
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=REAL, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=REAL, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    The field data is left in place and overwritten by later additions.
    """
    num_spheres[None] = 0


def add_sphere(center, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point as an (x, y, z) sequence.
        radius: The radius of the sphere. Must be positive.
        material_id: The unified material id of the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

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
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_scene_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(ray: Ray, interval: Interval) -> SceneHitRecord:
    """Test a ray against every sphere in the scene.

    Spheres are tested in insertion order. After each hit the upper bound of
    the search interval shrinks to that hit's t, so the record returned is
    the closest one inside the given interval.

    Args:
        ray: The ray to trace.
        interval: Valid range of the ray parameter.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    closest_so_far = interval.upper
    result = _make_scene_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, make_interval(interval.lower, closest_so_far))
        if rec.hit == 1:
            closest_so_far = rec.t
            result = _to_scene_hit_record(rec, sphere_material_ids[i])

    return result

