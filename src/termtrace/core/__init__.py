"""Core rendering module.

This module contains the fundamental building blocks of the path tracer:

Components:
    rng: Explicit xorshift generator owned by the renderer
    interval: Closed interval with inclusive/exclusive membership tests
    ray: Ray data structure and vector utilities
    integrator: Recursive-bounce shading evaluated iteratively per sample
    progressive: Time-sliced scanline scheduler and frame buffer

Importing this package declares the generator's Taichi field, so Taichi must
already be initialised.
"""

from .interval import (
    Interval,
    empty_interval,
    make_interval,
    positive_interval,
    universe_interval,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    lerp,
    make_ray,
    near_zero,
    normalize,
    random_in_pixel_square,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .rng import REAL, get_rng_state, random_normal, random_range, random_real, seed_rng

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from termtrace.core.integrator or termtrace.core.progressive.

__all__ = [
    "REAL",
    "Interval",
    "make_interval",
    "positive_interval",
    "empty_interval",
    "universe_interval",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "lerp",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_unit_vector",
    "random_in_pixel_square",
    "seed_rng",
    "get_rng_state",
    "random_real",
    "random_range",
    "random_normal",
]
