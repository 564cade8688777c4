"""Time-sliced progressive renderer.

The renderer fills its frame buffer one scanline at a time, top to bottom.
Each call to ``advance()`` renders whole rows until either the image is
complete or the time budget is used up, then returns so the caller can draw
the partial image and stay responsive. The budget is checked before each
row, so a call may overrun it by at most one row. ``advance()`` returns the
number of rows it rendered, which is 0 once the image is complete.

A row only reaches the frame buffer after all of its samples have been
rendered and mapped to cells, so the buffer never holds a half-written row.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from termtrace.core.progressive import ProgressiveRenderer, RenderSettings
    >>>
    >>> renderer = ProgressiveRenderer(80, 24, RenderSettings(samples_per_pixel=16))
    >>> while not renderer.is_complete:
    ...     renderer.advance()
    ...     # draw renderer.frame_buffer
    >>> renderer.elapsed_render_time
    datetime.timedelta(...)
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from termtrace.camera.viewport import Camera, setup_camera
from termtrace.core.integrator import (
    MAX_COLUMNS,
    get_row_samples,
    render_pixel_row,
    render_subpixel_row,
)
from termtrace.core.rng import seed_rng
from termtrace.preview.framebuffer import FrameBuffer, TerminalCell
from termtrace.preview.subpixel import (
    SUBPIXEL_X,
    SUBPIXEL_Y,
    average_blocks,
    blocks_to_cells,
    colors_to_cells,
)
from termtrace.scene.default_scene import create_default_scene
from termtrace.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Clock returning seconds as a float
Clock = Callable[[], float]

__all__ = [
    "RenderMode",
    "RenderSettings",
    "TerminalCell",
    "FrameBuffer",
    "ProgressiveRenderer",
]


class RenderMode(Enum):
    """How samples are turned into cells.

    SUBPIXEL renders a 4 x 2 block per cell and maps it to a braille glyph.
    PIXEL renders one colour per cell and shows it as the background.
    """

    SUBPIXEL = "subpixel"
    PIXEL = "pixel"


@dataclass
class RenderSettings:
    """Renderer configuration.

    Attributes:
        samples_per_pixel: Samples per cell. In SUBPIXEL mode they are split
            evenly over the 8 subpixels, with at least one each, so the count
            is rounded down to a multiple of 8 (500 renders as 8 x 62 = 496).
        max_depth: Maximum number of bounces per sample.
        mode: RenderMode.SUBPIXEL or RenderMode.PIXEL.
        time_budget: Seconds of rendering per advance() call.
        seed: Seed of the renderer's random number generator.
        t_min: Lower bound of the ray hit interval.
        pixel_aspect_ratio: Cell width divided by cell height.
        focal_length: Distance from the camera to the image plane.
    """

    samples_per_pixel: int = 500
    max_depth: int = 10
    mode: RenderMode = RenderMode.SUBPIXEL
    time_budget: float = 0.015
    seed: int = 0
    t_min: float = 0.0
    pixel_aspect_ratio: float = 10.0 / 20.0
    focal_length: float = 1.0

    def __post_init__(self) -> None:
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.time_budget <= 0.0:
            raise ValueError(f"time_budget must be positive, got {self.time_budget}")
        if self.t_min < 0.0:
            raise ValueError(f"t_min must be non-negative, got {self.t_min}")
        if not isinstance(self.mode, RenderMode):
            self.mode = RenderMode(self.mode)

    @property
    def samples_per_subpixel(self) -> int:
        return max(1, self.samples_per_pixel // (SUBPIXEL_X * SUBPIXEL_Y))


class ProgressiveRenderer:
    """Renders a scene into a terminal frame buffer a few rows at a time.

    The scene, camera and random generator live in global Taichi fields, so
    constructing a renderer (re)initialises them; use one renderer at a time.

    Attributes:
        width: Image width in cells.
        height: Image height in cells.
        settings: The RenderSettings in use.
        camera: The Camera derived from the size and settings.
        scene: The SceneManager holding the scene.
    """

    def __init__(
        self,
        width: int,
        height: int,
        settings: RenderSettings | None = None,
        scene: SceneManager | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Create a renderer and upload its camera.

        Args:
            width: Image width in cells (at most MAX_COLUMNS).
            height: Image height in cells.
            settings: Render configuration. Defaults to RenderSettings().
            scene: A populated SceneManager. Defaults to the built-in scene.
            clock: Monotonic clock in seconds. Defaults to time.perf_counter.

        Raises:
            ValueError: If the dimensions or settings are invalid.
        """
        if width > MAX_COLUMNS:
            raise ValueError(f"Width {width} exceeds the maximum of {MAX_COLUMNS} columns")

        self.settings = settings if settings is not None else RenderSettings()
        self.camera = Camera(
            width=width,
            height=height,
            pixel_aspect_ratio=self.settings.pixel_aspect_ratio,
            focal_length=self.settings.focal_length,
        )
        self._frame_buffer = FrameBuffer(width, height)
        self._clock = clock if clock is not None else time.perf_counter
        self.scene = scene if scene is not None else create_default_scene()

        self._next_line = 0
        self._render_time = timedelta(0)

        setup_camera(self.camera)
        seed_rng(self.settings.seed)

        logger.info(
            "Created %dx%d renderer (%s mode, %d spp, depth %d, %d objects)",
            width,
            height,
            self.settings.mode.value,
            self.settings.samples_per_pixel,
            self.settings.max_depth,
            self.object_count,
        )

    @property
    def width(self) -> int:
        return self._frame_buffer.width

    @property
    def height(self) -> int:
        return self._frame_buffer.height

    @property
    def frame_buffer(self) -> FrameBuffer:
        """The cell grid; rows below next_line are still blank."""
        return self._frame_buffer

    @property
    def next_line(self) -> int:
        """Index of the next row to render, equal to height when done."""
        return self._next_line

    @property
    def progress(self) -> float:
        """Fraction of rows completed, in [0, 1]."""
        return min(max(self._next_line / self.height, 0.0), 1.0)

    @property
    def is_complete(self) -> bool:
        return self._next_line >= self.height

    @property
    def object_count(self) -> int:
        """Number of objects in the scene."""
        return self.scene.get_object_count()

    @property
    def elapsed_render_time(self) -> timedelta:
        """Wall time spent inside advance() calls that rendered rows."""
        return self._render_time

    def reset(self) -> None:
        """Start the image over from the top with a freshly seeded generator."""
        self._frame_buffer.clear()
        self._next_line = 0
        self._render_time = timedelta(0)
        setup_camera(self.camera)
        seed_rng(self.settings.seed)

    def _render_row(self, row: int) -> None:
        settings = self.settings
        if settings.mode is RenderMode.SUBPIXEL:
            render_subpixel_row(
                row,
                self.width,
                settings.samples_per_subpixel,
                settings.max_depth,
                settings.t_min,
            )
            blocks = get_row_samples(self.width)
            fg, bg, glyphs = blocks_to_cells(blocks)
            colors = average_blocks(blocks)
        else:
            render_pixel_row(
                row,
                self.width,
                settings.samples_per_pixel,
                settings.max_depth,
                settings.t_min,
            )
            colors = get_row_samples(self.width)[:, 0, 0]
            fg, bg, glyphs = colors_to_cells(colors)

        self._frame_buffer.set_row(row, fg, bg, glyphs, colors)

    def advance(self) -> int:
        """Render rows until the image is complete or the budget is spent.

        Returns:
            The number of rows rendered by this call.
        """
        start = self._clock()
        budget = self.settings.time_budget
        rows_rendered = 0

        while self._next_line < self.height and self._clock() - start < budget:
            self._render_row(self._next_line)
            self._next_line += 1
            rows_rendered += 1

        # Idle calls do not count toward the render time
        if rows_rendered > 0:
            self._render_time += timedelta(seconds=self._clock() - start)
            logger.debug(
                "Rendered %d rows, next line %d/%d", rows_rendered, self._next_line, self.height
            )
            if self.is_complete:
                logger.info(
                    "Render complete: %dx%d in %.3fs",
                    self.width,
                    self.height,
                    self._render_time.total_seconds(),
                )

        return rows_rendered

    def render_to_completion(self) -> Generator[float, None, None]:
        """Call advance() until the image is done, yielding progress after each call.

        Example:
            >>> for progress in renderer.render_to_completion():
            ...     print(f"{progress:.0%}")
        """
        while not self.is_complete:
            self.advance()
            yield self.progress

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"next_line={self._next_line}, mode={self.settings.mode.value})"
        )
