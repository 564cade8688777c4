"""Camera module: viewport geometry and primary ray generation.

Components:
    viewport: Fixed forward-looking camera with terminal pixel-aspect
        correction

Coordinates are fractional cell positions: x grows to the right, y grows
downward, and integer values are cell centers.
"""

from .viewport import (
    DEFAULT_PIXEL_ASPECT_RATIO,
    Camera,
    Viewport,
    compute_viewport,
    get_camera_info,
    get_camera_origin,
    get_pixel_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "Viewport",
    "DEFAULT_PIXEL_ASPECT_RATIO",
    "compute_viewport",
    "setup_camera",
    "get_pixel_ray",
    "get_camera_origin",
    "get_camera_info",
]
