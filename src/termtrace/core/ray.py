"""Ray data structure and vector utilities.

This module provides the Ray dataclass and the vector helpers used by the
intersection, scattering and shading code. All functions are Taichi
functions and must be called from within a kernel.

Vectors double as points, directions and linear RGB colours. Arithmetic on
``vec3`` is componentwise, with scalars broadcast over all components.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -2.0))
    ...     return ray_at(ray, 0.5)  # (0, 0, -1)
"""

import taichi as ti
import taichi.math as tm

from termtrace.core.rng import REAL, random_normal, random_real

# 3-component vector of REAL
vec3 = ti.types.vector(3, REAL)

# Components below this magnitude are treated as zero by near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Vectors shorter than this normalise to the zero vector
NORMALIZE_EPSILON = 1e-12


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. It is not required to be unit
            length; the parameter t scales it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3):
    return tm.length(v)


@ti.func
def length_squared(v: vec3):
    """Squared Euclidean length; avoids the square root when comparing."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or the zero vector when v
        is shorter than NORMALIZE_EPSILON.
    """
    n = tm.length(v)
    result = vec3(0.0, 0.0, 0.0)
    if n > NORMALIZE_EPSILON:
        result = v / n
    return result


@ti.func
def dot(a: vec3, b: vec3):
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def lerp(a: vec3, b: vec3, t) -> vec3:
    """Linear interpolation: a at t=0, b at t=1."""
    return (1.0 - t) * a + t * b


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes ``v - 2 * dot(v, n) * n``. The normal should be unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_incident: vec3, normal: vec3, eta_ratio) -> vec3:
    """Refract a unit incident vector through a surface (Snell's law).

    The refracted ray is split into a part perpendicular to the normal,
    ``eta * (v + cos * n)``, and a part parallel to it whose length keeps
    the result unit length.

    Args:
        unit_incident: The incoming direction (unit length).
        normal: The surface normal, facing against the incident ray.
        eta_ratio: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-unit_incident, normal), 1.0)
    r_out_perp = eta_ratio * (unit_incident + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine, eta_ratio):
    """Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incident ray and the normal.
        eta_ratio: Ratio of refractive indices.

    Returns:
        ``r0 + (1 - r0) * (1 - cosine)^5`` with ``r0 = ((1 - eta) / (1 + eta))^2``.
    """
    r0 = (1.0 - eta_ratio) / (1.0 + eta_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_unit_vector() -> vec3:
    """Random unit vector uniformly distributed on the sphere.

    Normalises a triple of independent Gaussian samples, which is rotation
    invariant and needs no rejection loop.
    """
    return normalize(vec3(random_normal(), random_normal(), random_normal()))


@ti.func
def random_in_pixel_square() -> vec3:
    """Random offset in [-0.5, 0.5)^2 on the xy-plane."""
    return vec3(random_real() - 0.5, random_real() - 0.5, 0.0)
