"""Path tracing integrator that renders one scanline per kernel launch.

The colour seen along a ray is defined recursively: a ray that misses the
scene sees the sky gradient, a ray that hits a surface sees the surface's
attenuation times the colour along the scattered ray, an absorbed ray is
black, and once the bounce budget is spent the ray is black too. Taichi
functions cannot recurse, so ``ray_color`` unrolls the definition into a
loop that carries the product of attenuations (the throughput) forward.

Rendering is done a row at a time. A row kernel writes every sample of the
row into a staging field; the host copies it out with ``get_row_samples``
and only then decides what to do with it, so a row is never half written
into a frame buffer. The outer loop of every kernel is serialized and the
generator state lives in a single field, so output for a given seed is
reproducible.

Two sampling layouts are supported:
    - Subpixel: each cell holds SUBPIXEL_Y x SUBPIXEL_X slots, each slot the
      average of jittered samples inside its own fraction of the cell.
    - Pixel: one average per cell, jittered over the whole cell, stored in
      slot (0, 0).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.camera.viewport import Camera, setup_camera
    >>> from termtrace.core.integrator import render_subpixel_row, get_row_samples
    >>> from termtrace.scene.default_scene import create_default_scene
    >>> scene = create_default_scene()
    >>> setup_camera(Camera(width=80, height=24))
    >>> render_subpixel_row(row=0, width=80, samples_per_slot=4, max_depth=10)
    >>> get_row_samples(80).shape
    (80, 4, 2, 3)
"""

import numpy as np
import taichi as ti

from termtrace.camera.viewport import get_pixel_ray
from termtrace.core.interval import positive_interval
from termtrace.core.ray import Ray, lerp, make_ray, normalize, random_in_pixel_square, vec3
from termtrace.core.rng import REAL, random_real
from termtrace.materials.dielectric import scatter_dielectric_by_id
from termtrace.materials.lambertian import scatter_lambertian_by_id
from termtrace.materials.metal import scatter_metal_by_id
from termtrace.preview.subpixel import SUBPIXEL_X, SUBPIXEL_Y
from termtrace.scene.intersection import SceneHitRecord, intersect_scene
from termtrace.scene.manager import MaterialType, get_material_type, get_material_type_index

# =============================================================================
# Rendering Constants
# =============================================================================

# Widest row the staging field can hold
MAX_COLUMNS = 512

DEFAULT_MAX_DEPTH = 10
DEFAULT_T_MIN = 0.0

# =============================================================================
# Row Staging Buffer
# =============================================================================

# _row_samples[col, sy, sx] is the colour of slot (sx, sy) in column col
_row_samples = ti.Vector.field(3, dtype=REAL, shape=(MAX_COLUMNS, SUBPIXEL_Y, SUBPIXEL_X))


def _check_row_arguments(width: int, samples: int, max_depth: int) -> None:
    if width <= 0 or width > MAX_COLUMNS:
        raise ValueError(f"Row width {width} must be in [1, {MAX_COLUMNS}]")
    if samples < 1:
        raise ValueError(f"Sample count must be at least 1, got {samples}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scatter function of the material's type.

    Args:
        material_id: The unified material id of the hit surface.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the ray.
        front_face: 1 if the ray hit the outside of the surface.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). An
        unknown material id absorbs the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )
    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Vertical sky gradient: white at the horizon, light blue overhead."""
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    white = vec3(1.0, 1.0, 1.0)
    blue = vec3(0.5, 0.7, 1.0)
    return lerp(white, blue, a)


@ti.func
def scatter_ray(ray: Ray, rec: SceneHitRecord):
    """Continue a path off a surface hit.

    Returns:
        A tuple of (scattered_ray, attenuation, did_scatter). The scattered
        ray starts at the hit point.
    """
    scattered_direction, attenuation, did_scatter = scatter_material(
        rec.material_id, ray.direction, rec.normal, rec.front_face
    )
    return make_ray(rec.point, scattered_direction), attenuation, did_scatter


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, t_min) -> vec3:
    """Estimate the colour seen along a ray.

    Args:
        ray: The primary ray.
        max_depth: Maximum number of surface interactions. 0 gives black.
        t_min: Lower bound of the hit interval; the upper bound is infinite.

    Returns:
        The sampled colour (linear RGB, components >= 0).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    # Active flag instead of break
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(current, positive_interval(t_min))

            if rec.hit == 0:
                color = throughput * background_color(current.direction)
                active = 0
            else:
                scattered, attenuation, did_scatter = scatter_ray(current, rec)
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered

    return color


@ti.func
def _subpixel_slot_color(
    col: ti.i32, row: ti.i32, sx: ti.i32, sy: ti.i32, n: ti.i32, max_depth: ti.i32, t_min
) -> vec3:
    total = vec3(0.0, 0.0, 0.0)
    for _ in range(n):
        u = random_real()
        v = random_real()
        x = ti.cast(col, REAL) - 0.5 + (ti.cast(sx, REAL) + u) / SUBPIXEL_X
        y = ti.cast(row, REAL) - 0.5 + (ti.cast(sy, REAL) + v) / SUBPIXEL_Y
        total += ray_color(get_pixel_ray(x, y), max_depth, t_min)
    return total / ti.cast(n, REAL)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_subpixel_row_kernel(
    row: ti.i32, width: ti.i32, samples_per_slot: ti.i32, max_depth: ti.i32, t_min: REAL
):
    ti.loop_config(serialize=True)
    for col in range(width):
        for sy in range(SUBPIXEL_Y):
            for sx in range(SUBPIXEL_X):
                _row_samples[col, sy, sx] = _subpixel_slot_color(
                    col, row, sx, sy, samples_per_slot, max_depth, t_min
                )


@ti.kernel
def _render_pixel_row_kernel(
    row: ti.i32, width: ti.i32, samples_per_pixel: ti.i32, max_depth: ti.i32, t_min: REAL
):
    ti.loop_config(serialize=True)
    for col in range(width):
        total = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            offset = random_in_pixel_square()
            x = ti.cast(col, REAL) + offset.x
            y = ti.cast(row, REAL) + offset.y
            total += ray_color(get_pixel_ray(x, y), max_depth, t_min)
        _row_samples[col, 0, 0] = total / ti.cast(samples_per_pixel, REAL)


@ti.kernel
def _render_single_sample(x: REAL, y: REAL, max_depth: ti.i32, t_min: REAL) -> vec3:
    return ray_color(get_pixel_ray(x, y), max_depth, t_min)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_subpixel_row(
    row: int,
    width: int,
    samples_per_slot: int,
    max_depth: int = DEFAULT_MAX_DEPTH,
    t_min: float = DEFAULT_T_MIN,
) -> None:
    """Render every subpixel slot of one scanline into the staging buffer.

    Args:
        row: The row index (0 = top).
        width: Number of columns to render.
        samples_per_slot: Jittered samples averaged per slot.
        max_depth: Bounce budget per sample.
        t_min: Lower bound of the hit interval.

    Raises:
        ValueError: If width, sample count or depth is out of range.
    """
    _check_row_arguments(width, samples_per_slot, max_depth)
    _render_subpixel_row_kernel(row, width, samples_per_slot, max_depth, t_min)


def render_pixel_row(
    row: int,
    width: int,
    samples_per_pixel: int,
    max_depth: int = DEFAULT_MAX_DEPTH,
    t_min: float = DEFAULT_T_MIN,
) -> None:
    """Render one averaged colour per cell of a scanline into slot (0, 0).

    Raises:
        ValueError: If width, sample count or depth is out of range.
    """
    _check_row_arguments(width, samples_per_pixel, max_depth)
    _render_pixel_row_kernel(row, width, samples_per_pixel, max_depth, t_min)


def get_row_samples(width: int) -> np.ndarray:
    """Copy the staged row out of Taichi.

    Returns:
        A float64 array of shape (width, SUBPIXEL_Y, SUBPIXEL_X, 3).
    """
    if width <= 0 or width > MAX_COLUMNS:
        raise ValueError(f"Row width {width} must be in [1, {MAX_COLUMNS}]")
    return _row_samples.to_numpy()[:width].astype(np.float64)


def render_sample(
    x: float,
    y: float,
    max_depth: int = DEFAULT_MAX_DEPTH,
    t_min: float = DEFAULT_T_MIN,
) -> tuple[float, float, float]:
    """Trace a single ray through fractional cell coordinates (x, y).

    Python-callable helper for tests and debugging.

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _render_single_sample(x, y, max_depth, t_min)
    return (float(color[0]), float(color[1]), float(color[2]))
