"""ANSI text output for frame buffers.

Each cell is written as a 24-bit foreground SGR sequence, a 24-bit
background SGR sequence and its glyph. Each row ends with a reset, so the
text can be printed line by line or pasted anywhere.

Example:
    >>> from termtrace.preview.ansi import frame_to_ansi, progress_bar
    >>> print(frame_to_ansi(renderer.frame_buffer, gamma=2.2))
    >>> print(progress_bar(renderer.progress, width=40))
"""

import numpy as np
import numpy.typing as npt

from termtrace.preview.color import to_rgb8
from termtrace.preview.framebuffer import FrameBuffer

ESC = "\033["
RESET = ESC + "0m"
CURSOR_HOME = ESC + "H"
CLEAR_SCREEN = ESC + "2J"
HIDE_CURSOR = ESC + "?25l"
SHOW_CURSOR = ESC + "?25h"

GAUGE_FILLED = "█"
GAUGE_EMPTY = "░"


def _sgr_color(rgb: npt.NDArray[np.uint8], layer: int) -> npt.NDArray[np.str_]:
    # layer 38 selects the text colour, 48 the background
    r = rgb[..., 0].astype(str)
    g = rgb[..., 1].astype(str)
    b = rgb[..., 2].astype(str)
    seq = np.char.add(f"{ESC}{layer};2;", r)
    seq = np.char.add(np.char.add(seq, ";"), g)
    seq = np.char.add(np.char.add(seq, ";"), b)
    return np.char.add(seq, "m")


def frame_to_lines(frame_buffer: FrameBuffer, gamma: float = 1.0) -> list[str]:
    """Render each row of a frame buffer as one ANSI-coloured line."""
    fgs = _sgr_color(to_rgb8(frame_buffer.fg, gamma), 38)
    bgs = _sgr_color(to_rgb8(frame_buffer.bg, gamma), 48)
    cells = np.char.add(np.char.add(fgs, bgs), frame_buffer.glyphs)
    return ["".join(row) + RESET for row in cells]


def frame_to_ansi(frame_buffer: FrameBuffer, gamma: float = 1.0) -> str:
    """Render a whole frame buffer as newline-separated ANSI text.

    Args:
        frame_buffer: The cells to draw.
        gamma: Gamma applied to both colour layers before quantisation.

    Returns:
        One line per row, without a trailing newline.
    """
    return "\n".join(frame_to_lines(frame_buffer, gamma))


def progress_bar(fraction: float, width: int = 40) -> str:
    """Text gauge such as ``[████░░░░]  50%``.

    Args:
        fraction: Completed fraction, clamped into [0, 1].
        width: Number of gauge cells between the brackets.
    """
    if width <= 0:
        raise ValueError(f"Gauge width must be positive, got {width}")
    fraction = min(max(fraction, 0.0), 1.0)
    filled = int(fraction * width)
    gauge = GAUGE_FILLED * filled + GAUGE_EMPTY * (width - filled)
    return f"[{gauge}] {fraction * 100:3.0f}%"
