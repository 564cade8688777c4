"""Terminal cell grid produced by the progressive renderer."""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from termtrace.preview.color import BLACK

BLANK_GLYPH = " "


@dataclass(frozen=True)
class TerminalCell:
    """One display cell: text colour, background colour and a glyph.

    Colours are linear float RGB.
    """

    fg: tuple[float, float, float] = BLACK
    bg: tuple[float, float, float] = BLACK
    glyph: str = BLANK_GLYPH


class FrameBuffer:
    """Fixed width x height grid of terminal cells, stored row-major.

    Attributes:
        fg: Text colours, shape (height, width, 3).
        bg: Background colours, shape (height, width, 3).
        glyphs: One character per cell, shape (height, width).
        colors: Mean rendered colour of each cell, shape (height, width, 3).
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame buffer dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self.fg = np.zeros((height, width, 3), dtype=np.float64)
        self.bg = np.zeros((height, width, 3), dtype=np.float64)
        self.colors = np.zeros((height, width, 3), dtype=np.float64)
        self.glyphs = np.full((height, width), BLANK_GLYPH, dtype="<U1")

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def cell(self, x: int, y: int) -> TerminalCell:
        """Get the cell at column x, row y."""
        return TerminalCell(
            fg=tuple(float(c) for c in self.fg[y, x]),
            bg=tuple(float(c) for c in self.bg[y, x]),
            glyph=str(self.glyphs[y, x]),
        )

    def set_row(
        self,
        y: int,
        fg: npt.NDArray[np.float64],
        bg: npt.NDArray[np.float64],
        glyphs: npt.ArrayLike,
        colors: npt.NDArray[np.float64],
    ) -> None:
        """Replace a whole row of cells.

        All inputs are validated before anything is written, so a bad row
        leaves the buffer untouched.

        Raises:
            IndexError: If y is outside the buffer.
            ValueError: If any input does not have one entry per column.
        """
        if not 0 <= y < self._height:
            raise IndexError(f"Row {y} outside frame buffer of height {self._height}")

        glyph_row = np.asarray(glyphs, dtype="<U1")
        for name, arr, shape in (
            ("fg", fg, (self._width, 3)),
            ("bg", bg, (self._width, 3)),
            ("colors", colors, (self._width, 3)),
            ("glyphs", glyph_row, (self._width,)),
        ):
            if np.shape(arr) != shape:
                raise ValueError(f"{name} has shape {np.shape(arr)}, expected {shape}")

        self.fg[y] = fg
        self.bg[y] = bg
        self.colors[y] = colors
        self.glyphs[y] = glyph_row

    def clear(self) -> None:
        """Reset every cell to black on black with a blank glyph."""
        self.fg.fill(0.0)
        self.bg.fill(0.0)
        self.colors.fill(0.0)
        self.glyphs.fill(BLANK_GLYPH)

    def __repr__(self) -> str:
        return f"FrameBuffer(width={self._width}, height={self._height})"
