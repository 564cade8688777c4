"""Preview module: turning rendered samples into terminal output.

Components:
    color: Brightness, intensity clamping, gamma and 8-bit quantisation
    framebuffer: TerminalCell and the FrameBuffer grid
    subpixel: 2-means subpixel clustering and braille glyph mapping
    ansi: 24-bit ANSI text output and a progress gauge

This package is plain NumPy and does not require Taichi.
"""

from termtrace.preview.ansi import frame_to_ansi, frame_to_lines, progress_bar
from termtrace.preview.color import (
    INTENSITY,
    apply_gamma,
    brightness,
    clamp_intensity,
    contrasting_text_color,
    to_rgb8,
)
from termtrace.preview.framebuffer import FrameBuffer, TerminalCell
from termtrace.preview.subpixel import (
    SUBPIXEL_X,
    SUBPIXEL_Y,
    average_blocks,
    block_to_cell,
    blocks_to_cells,
    cluster_blocks,
    cluster_two_colors,
    color_to_cell,
    colors_to_cells,
    mask_to_braille,
    masks_to_braille,
)

__all__ = [
    # Colour
    "INTENSITY",
    "brightness",
    "clamp_intensity",
    "apply_gamma",
    "to_rgb8",
    "contrasting_text_color",
    # Frame buffer
    "TerminalCell",
    "FrameBuffer",
    # Subpixel mapping
    "SUBPIXEL_X",
    "SUBPIXEL_Y",
    "cluster_two_colors",
    "cluster_blocks",
    "mask_to_braille",
    "masks_to_braille",
    "block_to_cell",
    "blocks_to_cells",
    "color_to_cell",
    "colors_to_cells",
    "average_blocks",
    # ANSI output
    "frame_to_ansi",
    "frame_to_lines",
    "progress_bar",
]
