"""Fixed camera with a pixel-aspect corrected viewport.

The camera sits at ``origin`` and looks down -z at a virtual image plane
``focal_length`` away. The viewport is 2.0 units high and
``2.0 * width / height`` units wide; its horizontal axis is then scaled by
``pixel_aspect_ratio`` because a terminal cell is taller than it is wide
(roughly 1:2), so without the correction spheres would render stretched.

The vertical axis points down: row 0 is the top of the image.

Pixel coordinates are fractional. ``get_pixel_ray(x, y)`` aims at
``pixel00 + x * delta_u + y * delta_v``, so integer coordinates hit cell
centers and ``x +/- 0.5`` reach the cell edges.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.camera.viewport import Camera, setup_camera, get_pixel_ray
    >>> setup_camera(Camera(width=80, height=24))
    >>> @ti.kernel
    ... def render():
    ...     ray = get_pixel_ray(40.0, 12.0)  # Ray through the middle cell
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

from termtrace.core.ray import Ray, make_ray, vec3
from termtrace.core.rng import REAL

VIEWPORT_HEIGHT = 2.0

# Terminal cells are about 10 px wide and 20 px tall
DEFAULT_PIXEL_ASPECT_RATIO = 10.0 / 20.0


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for the fixed forward-looking camera.

    Attributes:
        width: Image width in cells.
        height: Image height in cells.
        pixel_aspect_ratio: Cell width divided by cell height.
        focal_length: Distance from the origin to the image plane.
        origin: Camera position in world space (x, y, z).
    """

    width: int
    height: int
    pixel_aspect_ratio: float = DEFAULT_PIXEL_ASPECT_RATIO
    focal_length: float = 1.0
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Camera dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.pixel_aspect_ratio <= 0.0:
            raise ValueError(
                f"pixel_aspect_ratio must be positive, got {self.pixel_aspect_ratio}"
            )
        if self.focal_length <= 0.0:
            raise ValueError(f"focal_length must be positive, got {self.focal_length}")


@dataclass
class Viewport:
    """Derived viewport geometry (all arrays are float64 3-vectors).

    Attributes:
        origin: The camera position.
        pixel00: Center of the top-left cell on the image plane.
        delta_u: Step from one column to the next.
        delta_v: Step from one row to the next (points down).
        viewport_u: The full horizontal span of the viewport.
        viewport_v: The full vertical span of the viewport.
    """

    origin: np.ndarray
    pixel00: np.ndarray
    delta_u: np.ndarray
    delta_v: np.ndarray
    viewport_u: np.ndarray
    viewport_v: np.ndarray


def compute_viewport(camera: Camera) -> Viewport:
    """Compute the viewport geometry for a camera.

    Args:
        camera: The camera configuration.

    Returns:
        The Viewport with the top-left cell center and per-cell steps.
    """
    viewport_width = VIEWPORT_HEIGHT * camera.width / camera.height

    origin = np.array(camera.origin, dtype=np.float64)
    viewport_u = np.array([viewport_width, 0.0, 0.0]) * camera.pixel_aspect_ratio
    viewport_v = np.array([0.0, -VIEWPORT_HEIGHT, 0.0])

    delta_u = viewport_u / camera.width
    delta_v = viewport_v / camera.height

    upper_left = (
        origin
        - np.array([0.0, 0.0, camera.focal_length])
        - viewport_u / 2.0
        - viewport_v / 2.0
    )
    pixel00 = upper_left + 0.5 * (delta_u + delta_v)

    return Viewport(
        origin=origin,
        pixel00=pixel00,
        delta_u=delta_u,
        delta_v=delta_v,
        viewport_u=viewport_u,
        viewport_v=viewport_v,
    )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=REAL, shape=())
_pixel00 = ti.Vector.field(3, dtype=REAL, shape=())
_delta_u = ti.Vector.field(3, dtype=REAL, shape=())
_delta_v = ti.Vector.field(3, dtype=REAL, shape=())


def setup_camera(camera: Camera) -> Viewport:
    """Upload a camera's viewport to the Taichi fields used by get_pixel_ray.

    Must be called from Python scope before rendering.

    Returns:
        The computed Viewport.
    """
    viewport = compute_viewport(camera)
    _camera_origin[None] = viewport.origin.tolist()
    _pixel00[None] = viewport.pixel00.tolist()
    _delta_u[None] = viewport.delta_u.tolist()
    _delta_v[None] = viewport.delta_v.tolist()
    return viewport


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_pixel_ray(x, y) -> Ray:
    """Generate the ray through fractional cell coordinates (x, y).

    Args:
        x: Column coordinate, 0 = center of the leftmost column.
        y: Row coordinate, 0 = center of the top row.

    Returns:
        A Ray from the camera origin toward the image plane point. The
        direction is not normalized.
    """
    origin = _camera_origin[None]
    pixel_center = _pixel00[None] + x * _delta_u[None] + y * _delta_v[None]
    return make_ray(origin, pixel_center - origin)


@ti.func
def get_camera_origin() -> vec3:
    return _camera_origin[None]


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Read the uploaded camera state back, for debugging and tests."""
    info = {}
    for name, fld in (
        ("origin", _camera_origin),
        ("pixel00", _pixel00),
        ("delta_u", _delta_u),
        ("delta_v", _delta_v),
    ):
        vec = fld[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
